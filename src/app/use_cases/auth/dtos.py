"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import Optional
from pydantic import BaseModel, field_validator

from src.api.utils.jwt import IssuedToken
from src.domain.entities.session import DEVICE_MAX_LENGTH
from src.domain.identity import IdentitySnapshot


# ============================================================================
# Command DTOs
# ============================================================================


class SignUpCommand(BaseModel):
    """Validated sign-up intent"""

    email: str
    password: str


class SignInCommand(BaseModel):
    """
    Validated sign-in intent

    Exactly one of email/username identifies the user. Device metadata is
    recorded on the session created for this login.
    """

    email: Optional[str] = None
    username: Optional[str] = None
    password: str
    device: Optional[str] = None
    ip_address: Optional[str] = None

    @field_validator("device")
    @classmethod
    def truncate_device(cls, value: Optional[str]) -> Optional[str]:
        # Raw User-Agent; the column holds at most DEVICE_MAX_LENGTH characters
        return value[:DEVICE_MAX_LENGTH] if value else None


# ============================================================================
# Response DTOs
# ============================================================================


class SignUpResponse(BaseModel):
    """Response for sign-up use case"""

    identity: IdentitySnapshot


class SignInResponse(BaseModel):
    """
    Response for sign-in use case

    refresh/session_id are None while the profile setup is incomplete.
    """

    identity: IdentitySnapshot
    access: IssuedToken
    refresh: Optional[IssuedToken] = None
    session_id: Optional[str] = None
    setup_required: bool = False


class RefreshSessionResponse(BaseModel):
    """
    Response for refresh use case

    refresh is only set when the refresh token was rotated.
    """

    identity: IdentitySnapshot
    access: IssuedToken
    refresh: Optional[IssuedToken] = None
    session_id: str
    rotated: bool = False


class SignOutResponse(BaseModel):
    """Response for sign-out use case"""

    identity: Optional[IdentitySnapshot] = None
    session_deleted: bool = False


class SweepExpiredSessionsResponse(BaseModel):
    """Response for expired-session sweep"""

    deleted_count: int
