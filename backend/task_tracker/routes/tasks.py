from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from task_tracker.core.database import get_db
from task_tracker.core.tokens import TokenPayload
from task_tracker.dependencies.auth import require_principal
from task_tracker.schemas.auth import MessageOut
from task_tracker.schemas.task import TaskCreate, TaskEnvelope, TaskListOut, TaskUpdate
from task_tracker.services import tasks as task_service
from task_tracker.services.tasks import TaskQuery

router = APIRouter(prefix="/tasks", tags=["tasks"], dependencies=[Depends(require_principal)])


@router.get("", response_model=TaskListOut)
def list_tasks(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status_filter: Literal["all", "PENDING", "COMPLETED"] = Query("all", alias="status"),
    search: Optional[str] = None,
    sort_by: Literal["createdAt", "updatedAt", "title", "dueDate"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    priority: Optional[Literal["LOW", "MEDIUM", "HIGH"]] = None,
    db: Session = Depends(get_db),
    principal: TokenPayload = Depends(require_principal),
):
    page = task_service.list_tasks(
        db,
        principal.user_id,
        TaskQuery(
            limit=limit,
            offset=offset,
            status=status_filter,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            priority=priority,
        ),
    )
    return {
        "tasks": page.tasks,
        "pagination": {
            "total": page.total,
            "limit": page.limit,
            "offset": page.offset,
            "has_more": page.has_more,
        },
        "stats": {"total": page.total, "pending": page.pending, "completed": page.completed},
    }


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    principal: TokenPayload = Depends(require_principal),
):
    task = task_service.create_task(db, principal.user_id, payload.model_dump())
    return {"task": task}


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    principal: TokenPayload = Depends(require_principal),
):
    return {"task": task_service.get_task_for_user(db, task_id, principal.user_id)}


@router.patch("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    principal: TokenPayload = Depends(require_principal),
):
    task = task_service.get_task_for_user(db, task_id, principal.user_id)

    data = payload.model_dump(exclude_unset=True)
    return {"task": task_service.update_task(db, task, data)}


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    principal: TokenPayload = Depends(require_principal),
):
    task = task_service.get_task_for_user(db, task_id, principal.user_id)
    task_service.delete_task(db, task)
    return {"message": "Task deleted successfully"}


@router.patch("/{task_id}/toggle", response_model=TaskEnvelope)
def toggle_task(
    task_id: str,
    db: Session = Depends(get_db),
    principal: TokenPayload = Depends(require_principal),
):
    task = task_service.get_task_for_user(db, task_id, principal.user_id)
    return {"task": task_service.toggle_task(db, task)}
