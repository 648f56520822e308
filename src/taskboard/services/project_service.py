"""Project service — CRUD for projects, scoped by the caller's identity.

Learn: every method takes the CurrentIdentity explicitly. Lookups that
fail authorization surface as NotFound, exactly like a missing id, so a
caller learns nothing about other users' projects.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.auth.identity import CurrentIdentity
from taskboard.auth.policy import Action, authorize
from taskboard.config import settings
from taskboard.db.models import Project, Task, is_valid_id
from taskboard.errors import AuthorizationDenied, NotFound
from taskboard.query import Include, ListParams, Page, ResourceQuery, Sort

logger = structlog.get_logger()

PROJECT_QUERY = ResourceQuery(
    model=Project,
    id_column=Project.id,
    owner_column=Project.owner_id,
    sorts=(
        Sort("title", Project.title),
        Sort("created_at", Project.created_at),
    ),
    includes=(Include("tasks", Project.tasks),),
)


class ProjectNotFound(NotFound):
    message = "Project not found"


class ProjectService:
    """Business logic for project management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookup ─────────────────────────────────────────

    async def get_owned_or_404(
        self,
        identity: CurrentIdentity,
        project_id: int,
        action: Action,
        with_tasks: bool = False,
    ) -> Project:
        """Load a project and check the guard; both failures are 404."""
        if not is_valid_id(project_id):
            raise ProjectNotFound()
        query = select(Project).where(Project.id == project_id)
        if with_tasks:
            query = query.options(selectinload(Project.tasks))
        result = await self.db.execute(query)
        project = result.scalars().first()
        if project is None:
            raise ProjectNotFound()
        try:
            authorize(identity, project, action)
        except AuthorizationDenied as e:
            raise ProjectNotFound() from e
        return project

    # ─── Read ───────────────────────────────────────────

    async def list_projects(self, identity: CurrentIdentity, params: ListParams) -> Page:
        owner_id: Optional[int] = None if settings.shared_read else identity.user_id
        return await PROJECT_QUERY.run(
            self.db, params, owner_id=owner_id, per_page=settings.page_size
        )

    async def get_project(self, identity: CurrentIdentity, project_id: int) -> Project:
        return await self.get_owned_or_404(identity, project_id, Action.VIEW, with_tasks=True)

    # ─── Write ──────────────────────────────────────────

    async def create_project(self, identity: CurrentIdentity, title: str) -> Project:
        project = Project(owner_id=identity.user_id, title=title)
        self.db.add(project)
        await self.db.commit()
        logger.info("project.created", project_id=project.id, owner_id=identity.user_id)
        return project

    async def update_project(
        self, identity: CurrentIdentity, project_id: int, title: str
    ) -> Project:
        project = await self.get_owned_or_404(identity, project_id, Action.UPDATE)
        project.title = title
        await self.db.commit()
        return project

    async def delete_project(self, identity: CurrentIdentity, project_id: int) -> None:
        """Delete a project and, in the same transaction, all of its tasks."""
        project = await self.get_owned_or_404(identity, project_id, Action.DELETE)
        result = await self.db.execute(delete(Task).where(Task.project_id == project.id))
        await self.db.delete(project)
        await self.db.commit()
        logger.info(
            "project.deleted",
            project_id=project_id,
            owner_id=identity.user_id,
            tasks_deleted=result.rowcount,
        )
