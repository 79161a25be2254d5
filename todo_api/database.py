import logging
from contextlib import contextmanager

from sqlmodel import SQLModel, create_engine
from sqlalchemy.orm import sessionmaker

from .config import DATABASE_URL

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task, User  # noqa: F401

logger = logging.getLogger(__name__)


def _create_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    return create_engine(url, echo=False, pool_pre_ping=True)


engine = _create_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_session():
    """Session for scripts such as the seed command; closed on exit."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_db():
    """FastAPI dependency: one session per request."""
    with get_session() as db:
        yield db


def create_tables(bind=None):
    """Create all database tables."""
    SQLModel.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")
