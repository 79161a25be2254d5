from pydantic import BaseModel, Field, StrictBool
from datetime import datetime
from typing import List, Optional


class TaskCreate(BaseModel):
    """Schema for creating new tasks."""
    text: str = Field(..., min_length=1)

    class Config:
        str_strip_whitespace = True


class TaskUpdate(BaseModel):
    """Schema for updating existing tasks.

    Only ``text`` and ``completed`` can be changed by clients; anything else
    in the body is ignored.
    """
    text: Optional[str] = Field(None, min_length=1)
    completed: Optional[StrictBool] = None

    class Config:
        str_strip_whitespace = True


class TaskRead(BaseModel):
    id: str
    text: str
    completed: bool
    completed_at: Optional[datetime] = None
    owner_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskEnvelope(BaseModel):
    task: TaskRead


class TaskList(BaseModel):
    tasks: List[TaskRead]
