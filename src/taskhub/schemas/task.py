"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (all optional)
- TaskRead: what the API returns

Task JSON is camelCase on the wire (isCompleted, createdAt, ...), which
is what the browser client sends and expects. snake_case is accepted on
input too. Unknown keys, including any attempt to set an owner, are
dropped.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

Priority = Literal["Low", "Medium", "High"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TaskCreate(_CamelModel):
    # Presence of a non-empty title is checked by TaskService so the
    # error carries a readable message.
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None


class TaskUpdate(_CamelModel):
    """Partial update.

    title, description and priority fall back to their stored value when
    omitted OR empty; is_completed is applied whenever it is present.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    is_completed: Optional[bool] = None
    priority: Optional[Priority] = None

    @field_validator("priority", mode="before")
    @classmethod
    def _empty_priority_is_omitted(cls, v):
        return None if v == "" else v


class TaskRead(BaseModel):
    # Read from ORM attributes by field name, written out in camelCase.
    model_config = ConfigDict(
        alias_generator=AliasGenerator(serialization_alias=to_camel),
        from_attributes=True,
    )

    id: int
    owner_id: uuid.UUID
    title: str
    description: Optional[str]
    is_completed: bool
    priority: Priority
    created_at: datetime
    updated_at: datetime


class TaskDeleted(BaseModel):
    message: str = "Task removed"
    id: int
