"""Task API routes.

Routes just translate HTTP to TaskService calls and shape the output.

Key patterns:
- POST for creation, PUT/PATCH for partial updates
- Query params for filtering, sorting and paging (see taskboard.query)
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.auth.identity import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.query import ListParams, list_params
from taskboard.schemas.common import DataResponse, Paginated
from taskboard.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get(
    "",
    response_model=Paginated[TaskRead],
    description=(
        "List the caller's tasks.\n\n"
        "Query parameters:\n"
        "- filter[is_done]: `true` / `false`\n"
        "- sort: `title`, `is_done`, `created_at`; prefix `-` for descending "
        "(default `-created_at`)\n"
        "- page: 1-based page number"
    ),
)
async def list_tasks(
    request: Request,
    params: ListParams = Depends(list_params),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    page = await svc.list_tasks(identity, params)
    items = [TaskRead.model_validate(t) for t in page.items]
    return Paginated[TaskRead].build(page, items, request.url)


@router.post("", response_model=DataResponse[TaskRead], status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Create a new task. It starts with is_done = false."""
    task = await svc.create_task(identity, title=body.title, project_id=body.project_id)
    return DataResponse[TaskRead](data=TaskRead.model_validate(task))


@router.get(
    "/{task_id}",
    response_model=DataResponse[TaskRead],
    responses={404: {"description": "Task not found"}},
)
async def get_task(
    task_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    task = await svc.get_task(identity, task_id)
    return DataResponse[TaskRead](data=TaskRead.model_validate(task))


@router.api_route(
    "/{task_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[TaskRead],
    responses={404: {"description": "Task not found"}},
)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Partially update a task (title, is_done, project_id)."""
    task = await svc.update_task(identity, task_id, body.model_dump(exclude_unset=True))
    return DataResponse[TaskRead](data=TaskRead.model_validate(task))


@router.delete(
    "/{task_id}",
    status_code=204,
    responses={404: {"description": "Task not found"}},
)
async def delete_task(
    task_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    await svc.delete_task(identity, task_id)
    return Response(status_code=204)
