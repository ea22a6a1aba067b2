from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session

from task_tracker.core.errors import NotFoundError
from task_tracker.models.task import Task

SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "title": Task.title,
    "dueDate": Task.due_date,
}


@dataclass(frozen=True)
class TaskQuery:
    limit: int = 10
    offset: int = 0
    status: str = "all"
    search: str | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    priority: str | None = None


@dataclass(frozen=True)
class TaskPage:
    tasks: list[Task]
    total: int
    pending: int
    completed: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_task_for_user(db: Session, task_id: str, user_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def list_tasks(db: Session, user_id: str, query: TaskQuery) -> TaskPage:
    qry = db.query(Task).filter(Task.user_id == user_id)  # scope

    if query.status and query.status != "all":
        qry = qry.filter(Task.status == query.status)

    if query.priority:
        qry = qry.filter(Task.priority == query.priority)

    if query.search:
        # Literal substring match: LIKE wildcards in the user's text are escaped.
        qry = qry.filter(Task.title.ilike(f"%{escape_like(query.search)}%", escape="\\"))

    column = SORT_COLUMNS.get(query.sort_by, Task.created_at)
    direction = asc if query.sort_order == "asc" else desc

    total = qry.count()
    rows = qry.order_by(direction(column), desc(Task.id)).offset(query.offset).limit(query.limit).all()

    counts = dict(
        db.query(Task.status, func.count(Task.id))
        .filter(Task.user_id == user_id)
        .group_by(Task.status)
        .all()
    )

    return TaskPage(
        tasks=rows,
        total=total,
        pending=int(counts.get("PENDING", 0)),
        completed=int(counts.get("COMPLETED", 0)),
        limit=query.limit,
        offset=query.offset,
    )


def create_task(db: Session, user_id: str, data: dict) -> Task:
    task = Task(
        user_id=user_id,
        title=data["title"],
        description=data.get("description"),
        priority=data.get("priority") or "MEDIUM",
        due_date=data.get("due_date"),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def update_task(db: Session, task: Task, data: dict) -> Task:
    """Apply a partial update. ``data`` holds only the fields the caller sent."""
    for key, value in data.items():
        setattr(task, key, value)

    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task: Task) -> None:
    db.delete(task)
    db.commit()


def toggle_task(db: Session, task: Task) -> Task:
    task.status = "COMPLETED" if task.status == "PENDING" else "PENDING"
    db.commit()
    db.refresh(task)
    return task
