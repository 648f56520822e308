"""Project API routes.

Routes translate HTTP to ProjectService calls; the service does lookup,
authorization and persistence. Unowned and missing projects are both 404.
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.auth.identity import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.query import ListParams, list_params
from taskboard.schemas.common import DataResponse, Paginated
from taskboard.schemas.project import ProjectRead, ProjectWrite
from taskboard.services.project_service import ProjectService

router = APIRouter(prefix="/projects")


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


@router.get(
    "",
    response_model=Paginated[ProjectRead],
    description=(
        "List the caller's projects, newest first.\n\n"
        "Query parameters:\n"
        "- include: `tasks` (also `include[]=tasks`)\n"
        "- sort: `title`, `created_at`; prefix `-` for descending\n"
        "- page: 1-based page number"
    ),
)
async def list_projects(
    request: Request,
    params: ListParams = Depends(list_params),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    page = await svc.list_projects(identity, params)
    items = [ProjectRead.from_model(p) for p in page.items]
    return Paginated[ProjectRead].build(page, items, request.url)


@router.post("", response_model=DataResponse[ProjectRead], status_code=201)
async def create_project(
    body: ProjectWrite,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    project = await svc.create_project(identity, body.title)
    return DataResponse[ProjectRead](data=ProjectRead.from_model(project))


@router.get(
    "/{project_id}",
    response_model=DataResponse[ProjectRead],
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Get a single project with its tasks."""
    project = await svc.get_project(identity, project_id)
    return DataResponse[ProjectRead](data=ProjectRead.from_model(project))


@router.api_route(
    "/{project_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[ProjectRead],
    responses={404: {"description": "Project not found"}},
)
async def update_project(
    project_id: int,
    body: ProjectWrite,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    project = await svc.update_project(identity, project_id, body.title)
    return DataResponse[ProjectRead](data=ProjectRead.from_model(project))


@router.delete(
    "/{project_id}",
    status_code=204,
    responses={404: {"description": "Project not found"}},
)
async def delete_project(
    project_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Delete a project. Its tasks are deleted with it."""
    await svc.delete_project(identity, project_id)
    return Response(status_code=204)
