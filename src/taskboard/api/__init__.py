"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health, login and register are
open (no auth required); /logout and /user ask for the identity
themselves.
"""

from fastapi import APIRouter, Depends

from taskboard.api.auth import router as auth_router
from taskboard.api.health import router as health_router
from taskboard.api.projects import router as projects_router
from taskboard.api.tasks import router as tasks_router
from taskboard.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes require a valid bearer token
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
