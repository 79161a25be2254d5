from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Task as TaskModel, User
from ..schemas.task import TaskCreate, TaskEnvelope, TaskList, TaskRead, TaskUpdate
from .auth import get_current_user

router = APIRouter()


def is_task_id(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _task_id(task_id: str) -> str:
    """Path dependency: a task id that is not a UUID can never match, so 404."""
    if not is_task_id(task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return str(UUID(task_id))


def _get_owned_task(db: Session, task_id: str, current_user: User) -> TaskModel:
    task = db.query(TaskModel).filter(
        TaskModel.id == task_id, TaskModel.owner_id == current_user.id
    ).first()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return task


def _get_update_data(task_update: TaskUpdate) -> dict:
    data = task_update.model_dump(exclude_unset=True, exclude_none=True)
    # Completion time is always derived server side.
    if data.get("completed") is True:
        data["completed_at"] = datetime.now(timezone.utc)
    else:
        data["completed"] = False
        data["completed_at"] = None
    return data


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST)


@router.post("/tasks", response_model=TaskRead)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new task owned by the caller."""
    db_task = TaskModel(text=task.text, owner_id=current_user.id)
    db.add(db_task)
    _commit(db)
    db.refresh(db_task)
    return db_task


@router.get("/tasks", response_model=TaskList)
def list_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's tasks, oldest first."""
    tasks = (
        db.query(TaskModel)
        .filter(TaskModel.owner_id == current_user.id)
        .order_by(TaskModel.created_at.asc())
        .all()
    )
    return {"tasks": tasks}


@router.get("/tasks/{task_id}", response_model=TaskEnvelope)
def get_task(
    current_user: User = Depends(get_current_user),
    task_id: str = Depends(_task_id),
    db: Session = Depends(get_db),
):
    """Get a specific task by ID."""
    return {"task": _get_owned_task(db, task_id, current_user)}


@router.delete("/tasks/{task_id}", response_model=TaskEnvelope)
def delete_task(
    current_user: User = Depends(get_current_user),
    task_id: str = Depends(_task_id),
    db: Session = Depends(get_db),
):
    """Delete a specific task and return what was removed."""
    task = _get_owned_task(db, task_id, current_user)
    removed = TaskRead.model_validate(task)

    db.delete(task)
    _commit(db)
    return {"task": removed}


@router.patch("/tasks/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_update: Optional[TaskUpdate] = None,
    current_user: User = Depends(get_current_user),
    task_id: str = Depends(_task_id),
    db: Session = Depends(get_db),
):
    """Partially update a task.

    ``completed_at`` is set when ``completed`` is true and cleared otherwise,
    so leaving ``completed`` out of the body (or sending no body at all)
    marks the task as not done.
    """
    task = _get_owned_task(db, task_id, current_user)

    for field, value in _get_update_data(task_update or TaskUpdate()).items():
        setattr(task, field, value)

    task.updated_at = datetime.now(timezone.utc)

    db.add(task)
    _commit(db)
    db.refresh(task)
    return {"task": task}
