from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime
from typing import Dict, List
from uuid import uuid4

from ..config import TOKEN_ACCESS
from .base import utc_now


class User(SQLModel, table=True):
    """User account with its issued auth tokens.

    Tokens live inside the user row so each one can be revoked on its own.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    tokens: List[Dict[str, str]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def has_token(self, token: str, access: str = TOKEN_ACCESS) -> bool:
        return any(
            t.get("token") == token and t.get("access") == access
            for t in self.tokens or []
        )

    def add_token(self, token: str, access: str = TOKEN_ACCESS) -> None:
        # Reassign rather than append so SQLAlchemy sees the JSON change.
        self.tokens = [*(self.tokens or []), {"access": access, "token": token}]
        self.updated_at = utc_now()

    def remove_token(self, token: str) -> None:
        self.tokens = [t for t in self.tokens or [] if t.get("token") != token]
        self.updated_at = utc_now()
