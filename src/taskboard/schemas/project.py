"""Pydantic schemas for projects."""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_serializer
from sqlalchemy import inspect

from taskboard.db.models import Project
from taskboard.schemas.common import UTCDateTime
from taskboard.schemas.task import TaskRead


class ProjectWrite(BaseModel):
    """Body for POST, PUT and PATCH — the title is the only writable field."""
    title: str = Field(..., min_length=1, max_length=255)

    model_config = {"str_strip_whitespace": True}


class ProjectRead(BaseModel):
    """A project; ``tasks`` is present only when the relation was loaded.

    Learn: reading an unloaded relationship on an AsyncSession would
    trigger lazy IO (and fail), so from_model() checks the instance state
    instead of letting pydantic touch the attribute.
    """

    id: int
    title: str
    owner_id: int
    created_at: UTCDateTime
    updated_at: UTCDateTime
    tasks: Optional[list[TaskRead]] = None

    @classmethod
    def from_model(cls, project: Project) -> "ProjectRead":
        tasks = None
        if "tasks" not in inspect(project).unloaded:
            tasks = [TaskRead.model_validate(t) for t in project.tasks]
        return cls(
            id=project.id,
            title=project.title,
            owner_id=project.owner_id,
            created_at=project.created_at,
            updated_at=project.updated_at,
            tasks=tasks,
        )

    @model_serializer(mode="wrap")
    def _omit_unloaded(self, handler) -> dict[str, Any]:
        data = handler(self)
        if self.tasks is None:
            data.pop("tasks", None)
        return data
