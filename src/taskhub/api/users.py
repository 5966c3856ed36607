"""Profile API — the signed-in user's own account.

- GET /users/profile → name and email (never the password hash)
- PUT /users/profile → change name/email, and the password if one is given
"""

from fastapi import APIRouter, Depends

from taskhub.api.auth import _user_svc
from taskhub.auth.dependencies import CurrentIdentity, get_current_user
from taskhub.schemas.user import ProfileUpdate, UserRead
from taskhub.services.user_service import UserService

router = APIRouter(prefix="/users")


@router.get("/profile", response_model=UserRead)
async def get_profile(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    return await svc.get_profile(identity.user_id)


@router.put("/profile", response_model=UserRead)
async def update_profile(
    body: ProfileUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Update name/email; a non-empty password is re-hashed before storage."""
    return await svc.update_profile(
        identity.user_id,
        name=body.name,
        email=body.email,
        password=body.password,
    )
