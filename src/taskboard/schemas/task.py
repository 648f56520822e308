"""Pydantic schemas for tasks.

Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT/PATCH to modify a task (all optional)
- TaskRead: what the API returns
"""

from typing import Optional

from pydantic import BaseModel, Field

from taskboard.schemas.common import UTCDateTime


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    project_id: Optional[int] = None

    model_config = {"str_strip_whitespace": True}


class TaskUpdate(BaseModel):
    """Partial update — only fields present in the body are applied.

    ``project_id: null`` detaches the task from its project; omitting
    ``project_id`` leaves it alone (see model_fields_set).
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    is_done: Optional[bool] = None
    project_id: Optional[int] = None

    model_config = {"str_strip_whitespace": True}


class TaskRead(BaseModel):
    id: int
    title: str
    is_done: bool
    creator_id: int
    project_id: Optional[int]
    created_at: UTCDateTime
    updated_at: UTCDateTime

    model_config = {"from_attributes": True}
