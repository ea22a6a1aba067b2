from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_serializer, field_validator

from task_tracker.schemas.base import CamelModel, as_utc

TaskStatus = Literal["PENDING", "COMPLETED"]
TaskPriority = Literal["LOW", "MEDIUM", "HIGH"]


class TaskCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    # Omit a field to leave it unchanged; only description and dueDate may be cleared with null.
    @field_validator("title", "status", "priority")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("due_date", "created_at", "updated_at")
    def serialize_dt(self, dt: Optional[datetime]):
        return as_utc(dt)


class TaskEnvelope(CamelModel):
    task: TaskOut


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class TaskStats(CamelModel):
    total: int
    pending: int
    completed: int


class TaskListOut(CamelModel):
    tasks: List[TaskOut]
    pagination: Pagination
    stats: TaskStats
