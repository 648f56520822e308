"""Task service — business logic for task CRUD.

Learn: the same shape as ProjectService. Identity is explicit, lookups
go through get_owned_or_404(), and the list goes through the shared
query pipeline with TASK_QUERY as its allow-list:

  filter[is_done]              exact match (true/false/1/0)
  sort=title|is_done|created_at  any order, "-" for descending
  default order                -created_at, then id
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.identity import CurrentIdentity
from taskboard.auth.policy import Action, authorize
from taskboard.config import settings
from taskboard.db.models import Project, Task, is_valid_id
from taskboard.errors import AuthorizationDenied, NotFound, ValidationFailed
from taskboard.query import ExactFilter, ListParams, Page, ResourceQuery, Sort, parse_bool

logger = structlog.get_logger()

TASK_QUERY = ResourceQuery(
    model=Task,
    id_column=Task.id,
    owner_column=Task.creator_id,
    filters=(ExactFilter("is_done", Task.is_done, parse_bool),),
    sorts=(
        Sort("title", Task.title),
        Sort("is_done", Task.is_done),
        Sort("created_at", Task.created_at),
    ),
)

INVALID_PROJECT = "The selected project id is invalid."


class TaskNotFound(NotFound):
    message = "Task not found"


class TaskService:
    """Business logic for task management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookup ─────────────────────────────────────────

    async def get_owned_or_404(
        self, identity: CurrentIdentity, task_id: int, action: Action
    ) -> Task:
        if not is_valid_id(task_id):
            raise TaskNotFound()
        task = await self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFound()
        try:
            authorize(identity, task, action)
        except AuthorizationDenied as e:
            raise TaskNotFound() from e
        return task

    async def _check_project(self, identity: CurrentIdentity, project_id: int) -> None:
        """A task may only be filed under a project its creator owns.

        A foreign project and a missing one get the same message.
        """
        if not is_valid_id(project_id):
            raise ValidationFailed.for_field("project_id", INVALID_PROJECT)
        owner_id = await self.db.scalar(
            select(Project.owner_id).where(Project.id == project_id)
        )
        if owner_id != identity.user_id:
            raise ValidationFailed.for_field("project_id", INVALID_PROJECT)

    # ─── Read ───────────────────────────────────────────

    async def list_tasks(self, identity: CurrentIdentity, params: ListParams) -> Page:
        owner_id: Optional[int] = None if settings.shared_read else identity.user_id
        return await TASK_QUERY.run(
            self.db, params, owner_id=owner_id, per_page=settings.page_size
        )

    async def get_task(self, identity: CurrentIdentity, task_id: int) -> Task:
        return await self.get_owned_or_404(identity, task_id, Action.VIEW)

    # ─── Write ──────────────────────────────────────────

    async def create_task(
        self,
        identity: CurrentIdentity,
        title: str,
        project_id: Optional[int] = None,
    ) -> Task:
        """Create a new, not-done task owned by the caller."""
        if project_id is not None:
            await self._check_project(identity, project_id)

        task = Task(
            creator_id=identity.user_id,
            project_id=project_id,
            title=title,
            is_done=False,
        )
        self.db.add(task)
        await self.db.commit()
        logger.info("task.created", task_id=task.id, creator_id=identity.user_id)
        return task

    async def update_task(
        self, identity: CurrentIdentity, task_id: int, changes: dict
    ) -> Task:
        """Apply a partial update. ``changes`` holds only the fields sent."""
        task = await self.get_owned_or_404(identity, task_id, Action.UPDATE)

        if "project_id" in changes and changes["project_id"] is not None:
            await self._check_project(identity, changes["project_id"])

        if changes.get("title") is not None:
            task.title = changes["title"]
        if changes.get("is_done") is not None:
            task.is_done = changes["is_done"]
        if "project_id" in changes:
            task.project_id = changes["project_id"]

        await self.db.commit()
        return task

    async def delete_task(self, identity: CurrentIdentity, task_id: int) -> None:
        task = await self.get_owned_or_404(identity, task_id, Action.DELETE)
        await self.db.delete(task)
        await self.db.commit()
        logger.info("task.deleted", task_id=task_id, creator_id=identity.user_id)
