# task_tracker/models/task.py
from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from task_tracker.core.base import Base
from task_tracker.models.user import _utcnow, _uuid_str

TASK_STATUSES = ("PENDING", "COMPLETED")
TASK_PRIORITIES = ("LOW", "MEDIUM", "HIGH")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_uuid_str)

    # ownership
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="PENDING", server_default="PENDING")
    priority = Column(String(20), nullable=False, default="MEDIUM", server_default="MEDIUM")
    due_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", back_populates="tasks")
