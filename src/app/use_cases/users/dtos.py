"""
User Use Case DTOs
"""

from typing import Optional
from pydantic import BaseModel

from src.api.utils.jwt import IssuedToken
from src.domain.entities import Gender
from src.domain.identity import IdentitySnapshot


class ProfileSetupCommand(BaseModel):
    """Profile fields submitted by the user"""

    name: Optional[str] = None
    username: Optional[str] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None


class ProfileSetupResponse(BaseModel):
    """
    Response for profile setup

    access is re-issued only once the profile is complete.
    """

    identity: IdentitySnapshot
    access: Optional[IssuedToken] = None


class ChangePasswordCommand(BaseModel):
    old_password: str
    new_password: str


class ChangePasswordResponse(BaseModel):
    """Response for password change; a fresh access token is always issued"""

    identity: IdentitySnapshot
    access: IssuedToken
