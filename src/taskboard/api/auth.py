"""Auth API — registration, login, logout, current user.

Routes for user authentication and token lifecycle:
- POST /login    → email/password → bearer token
- POST /register → create account + first token (token shown once)
- POST /logout   → revoke the token used on this request
- GET  /user     → current user info
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.auth.identity import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserRead,
)
from taskboard.services.auth_service import AuthService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Login information invalid"}},
)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Exchange email and password for a new bearer token."""
    token = await svc.authenticate(body.email, body.password)
    return TokenResponse(access_token=token)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a user account and issue its first token."""
    user = await svc.register(name=body.name, email=body.email, password=body.password)
    token = await svc.issue_token(user)
    await svc.db.commit()
    return RegisterResponse(data=UserRead.model_validate(user), access_token=token)


@router.post("/logout", status_code=204)
async def logout(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Revoke the presented token. Other tokens of the same user stay valid."""
    await svc.revoke_token(identity.token)
    return Response(status_code=204)


@router.get("/user", response_model=UserRead)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return identity.user
