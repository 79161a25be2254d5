"""Create a login for local development.

    python -m todo_api.seed

Reads SEED_EMAIL / SEED_PASSWORD from the environment.
"""
import logging
import os
from typing import Tuple

from sqlalchemy.orm import Session

from .database import create_tables, get_session
from .logging_setup import setup_logging
from .models import User
from .routers.auth import get_password_hash

logger = logging.getLogger(__name__)


def seed_user(db: Session, email: str, password: str) -> Tuple[User, bool]:
    """Return the user with ``email``, creating it first if needed."""
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        return existing_user, False

    user = User(email=email, hashed_password=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def main() -> None:
    setup_logging()
    create_tables()

    email = os.getenv("SEED_EMAIL", "test@example.com")
    password = os.getenv("SEED_PASSWORD", "password")

    with get_session() as db:
        _, created = seed_user(db, email, password)

    if created:
        logger.info("Test user created: %s", email)
    else:
        logger.info("User already exists: %s", email)


if __name__ == "__main__":
    main()
