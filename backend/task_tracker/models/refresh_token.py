# task_tracker/models/refresh_token.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from task_tracker.core.base import Base
from task_tracker.models.user import _utcnow


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # The signed refresh token itself; one row per login event.
    token = Column(String(1024), unique=True, index=True, nullable=False)

    # Store-side expiry, checked on every use alongside the token's own exp claim.
    expires_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="refresh_tokens")
