from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from .base import utc_now


class Task(SQLModel, table=True):
    """Task record owned by a single user."""
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    text: str
    completed: bool = Field(default=False)
    completed_at: Optional[datetime] = None
    owner_id: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
