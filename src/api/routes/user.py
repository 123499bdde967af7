from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from src.api.error import http_error
from src.api.response import envelope
from src.api.utils.cookies import CookieTransport
from src.api.utils.jwt import TokenCodec
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    ChangePasswordCommand,
    ChangePasswordUseCase,
    ProfileSetupCommand,
    ProfileSetupUseCase,
)
from src.depends import (
    get_cookie_transport,
    get_current_identity,
    get_session_cache,
    get_token_codec,
    get_unit_of_work,
)
from src.domain.entities import Gender
from src.domain.identity import IdentitySnapshot

router = APIRouter(prefix="/user", tags=["User"])


@router.get("/me", status_code=status.HTTP_200_OK)
async def current_user(identity: IdentitySnapshot = Depends(get_current_identity)):
    """Current identity resolved from the access cookie"""
    if identity.setup:
        return envelope(status.HTTP_200_OK, "User profile details!", identity)
    return envelope(status.HTTP_200_OK, "Please, complete your profile!", identity)


class ProfileSetupRequest(BaseModel):
    """Profile setup HTTP request payload"""

    name: str = Field(..., min_length=3, max_length=30)
    username: str = Field(..., min_length=3, max_length=15)
    gender: Gender
    bio: Optional[str] = Field(None, max_length=500)


@router.patch("/profile-setup", status_code=status.HTTP_200_OK)
async def profile_setup(
    body: ProfileSetupRequest,
    response: Response,
    identity: IdentitySnapshot = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
    cookies: CookieTransport = Depends(get_cookie_transport),
):
    """
    Profile Setup

    Completes the profile so the next sign-in creates a session.

    Raises:
        - 401/403: Access cookie missing or invalid
        - 409 Conflict: Username already exists
    """
    command = ProfileSetupCommand(
        name=body.name, username=body.username, gender=body.gender, bio=body.bio
    )
    use_case = ProfileSetupUseCase(uow, cache, codec)
    result = await use_case.execute(identity.id, command)

    if result.is_err():
        raise http_error(result.error)

    data = result.value
    if data.access is None:
        return envelope(status.HTTP_200_OK, "Please, complete your profile!", data.identity)

    cookies.set_access(response, data.access.token)
    return envelope(status.HTTP_200_OK, "Profile updated successfully!", data.identity)


class ChangePasswordRequest(BaseModel):
    """Change-password HTTP request payload"""

    old_password: str = Field(..., max_length=72)
    new_password: str = Field(..., min_length=6, max_length=72)


@router.patch("/change-password", status_code=status.HTTP_200_OK)
async def change_password(
    body: ChangePasswordRequest,
    response: Response,
    identity: IdentitySnapshot = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
    cookies: CookieTransport = Depends(get_cookie_transport),
):
    """
    Change Password

    Sets a new access cookie on success. Refresh sessions are left intact.

    Raises:
        - 400 Bad Request: New password equals the old one
        - 401/403: Access cookie missing or invalid
        - 403 Forbidden: Incorrect old password
    """
    command = ChangePasswordCommand(
        old_password=body.old_password, new_password=body.new_password
    )
    use_case = ChangePasswordUseCase(uow, cache, codec)
    result = await use_case.execute(identity.id, command)

    if result.is_err():
        raise http_error(result.error)

    cookies.set_access(response, result.value.access.token)
    return envelope(
        status.HTTP_200_OK, "Password changed successfully!", result.value.identity
    )
