"""Task API routes.

Learn: These routes are the HTTP interface to the owner-scoped task
store. The service layer does the ownership checks; routes just pass
the caller's identity along and translate HTTP to service calls.
Errors raised by the service (NotFound, Forbidden, ValidationError)
are turned into responses by the app-level handlers in main.py.

Key patterns:
- Query params for filtering (search, isCompleted, priority)
- PUT is a partial update (omitted fields keep their value)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.dependencies import CurrentIdentity, get_current_user
from taskhub.db.engine import get_db
from taskhub.schemas.task import TaskCreate, TaskDeleted, TaskRead, TaskUpdate
from taskhub.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the caller."""
    return await svc.create_task(
        owner_id=identity.user_id,
        title=body.title,
        description=body.description,
        priority=body.priority,
    )


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    search: Optional[str] = Query(None, description="Substring of title or description"),
    is_completed: Optional[str] = Query(
        None, alias="isCompleted", description='"true" for completed, anything else for open'
    ),
    priority: Optional[str] = Query(None, description="Low, Medium or High"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first, with optional filters."""
    return await svc.list_tasks(
        owner_id=identity.user_id,
        search=search,
        is_completed=None if is_completed is None else is_completed == "true",
        priority=priority,
    )


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    return await svc.get_owned_task(task_id, identity.user_id, action="view")


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (title, description, isCompleted, priority)."""
    return await svc.update_task(
        task_id=task_id,
        owner_id=identity.user_id,
        title=body.title,
        description=body.description,
        is_completed=body.is_completed,
        priority=body.priority,
    )


@router.delete("/{task_id}", response_model=TaskDeleted)
async def delete_task(
    task_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(task_id, identity.user_id)
    return TaskDeleted(id=task_id)
