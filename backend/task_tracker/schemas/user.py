from __future__ import annotations

from datetime import datetime

from pydantic import field_serializer

from task_tracker.schemas.base import CamelModel, as_utc


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_dt(self, dt: datetime):
        return as_utc(dt)


class UserEnvelope(CamelModel):
    user: UserOut
