"""Task service — ownership-scoped CRUD for tasks.

Learn: Every method takes the caller's owner_id, which comes from the
verified token and never from the request body. The rules are:

1. Create always stamps owner_id from the caller.
2. List always filters on owner_id; there is no cross-user listing.
3. Get/update/delete look the task up by id first:
   - no such task        → NotFound (404)
   - someone else's task → Forbidden (401), before anything is touched
   - the caller's task   → proceed

Partial updates keep the stored value when a text field is omitted OR
empty ("new value or old value"). Existing clients rely on that, so a
title can't be cleared through update. is_completed is different: an
explicit False is applied.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.models import DEFAULT_PRIORITY, Task
from taskhub.errors import Forbidden, NotFound, Unauthorized, ValidationError

logger = structlog.get_logger()


def _contains(column, text: str):
    """Case-insensitive literal substring match (LIKE wildcards escaped)."""
    escaped = (
        text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return column.ilike(f"%{escaped}%", escape="\\")


class TaskService:
    """Business logic for a single user's tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        owner_id: uuid.UUID,
        title: Optional[str],
        description: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> Task:
        title = title.strip() if title else ""
        if not title:
            raise ValidationError("Task must have a title")

        task = Task(
            owner_id=owner_id,
            title=title,
            description=description,
            priority=priority or DEFAULT_PRIORITY,
        )
        self.db.add(task)
        try:
            await self.db.commit()
        except IntegrityError:
            # owner_id has no users row: the token outlived its account.
            await self.db.rollback()
            logger.warning("tasks.unknown_owner", owner_id=str(owner_id))
            raise Unauthorized("Not authorized, user not found")
        logger.info("tasks.created", task_id=task.id, owner_id=str(owner_id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(
        self,
        owner_id: uuid.UUID,
        search: Optional[str] = None,
        is_completed: Optional[bool] = None,
        priority: Optional[str] = None,
    ) -> list[Task]:
        """List the owner's tasks, newest first.

        Learn: Filters are applied conditionally — only when the caller
        provides them — and always on top of the owner filter.
        """
        query = (
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        if search:
            query = query.where(
                or_(_contains(Task.title, search), _contains(Task.description, search))
            )
        if is_completed is not None:
            query = query.where(Task.is_completed == is_completed)
        if priority:
            query = query.where(Task.priority == priority)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_owned_task(
        self, task_id: int, owner_id: uuid.UUID, action: str = "access"
    ) -> Task:
        """Fetch a task and enforce ownership.

        Raises NotFound if the task doesn't exist, Forbidden if it belongs
        to someone else.
        """
        task = await self.db.get(Task, task_id)
        if not task:
            raise NotFound("Task not found")
        if task.owner_id != owner_id:
            logger.warning(
                "tasks.ownership_violation",
                task_id=task_id,
                owner_id=str(owner_id),
                action=action,
            )
            raise Forbidden(f"Not authorized to {action} this task")
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        task_id: int,
        owner_id: uuid.UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        is_completed: Optional[bool] = None,
        priority: Optional[str] = None,
    ) -> Task:
        task = await self.get_owned_task(task_id, owner_id, action="update")

        task.title = (title.strip() if title else "") or task.title
        task.description = description or task.description
        if is_completed is not None:
            task.is_completed = is_completed
        task.priority = priority or task.priority

        await self.db.commit()
        await self.db.refresh(task)
        logger.info("tasks.updated", task_id=task.id)
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: int, owner_id: uuid.UUID) -> None:
        task = await self.get_owned_task(task_id, owner_id, action="delete")
        await self.db.delete(task)
        await self.db.commit()
        logger.info("tasks.deleted", task_id=task_id)
