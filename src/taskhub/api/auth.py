"""Auth API — signup and login.

Learn: Both routes are open (no token needed) and both answer with the
user plus a freshly issued JWT, so a client is signed in right after
signing up:
- POST /auth/signup → create a new user account (201)
- POST /auth/login  → email/password → user + token
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.dependencies import get_token_service
from taskhub.auth.jwt import TokenService
from taskhub.db.engine import get_db
from taskhub.schemas.user import AuthResponse, LoginRequest, RegisterRequest
from taskhub.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _user_svc(request: Request, db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


def _auth_response(user, tokens: TokenService) -> AuthResponse:
    return AuthResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        token=tokens.issue(user.id),
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    svc: UserService = Depends(_user_svc),
    tokens: TokenService = Depends(get_token_service),
):
    """Create a new user account and sign it in."""
    user = await svc.register(name=body.name, email=body.email, password=body.password)
    return _auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: UserService = Depends(_user_svc),
    tokens: TokenService = Depends(get_token_service),
):
    """Login with email and password → user + JWT."""
    user = await svc.authenticate(email=body.email, password=body.password)
    return _auth_response(user, tokens)
