"""
Identity Snapshot

The view of a User that is cached and attached to authenticated requests.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from .entities import Gender, User


class IdentitySnapshot(BaseModel):
    """
    Resolved identity for downstream handlers.

    Profile fields are only exposed once setup is complete.
    """

    id: UUID
    email: str
    setup: bool
    username: Optional[str] = None
    name: Optional[str] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None
    image: Optional[str] = None


def create_identity_snapshot(user: User) -> IdentitySnapshot:
    if not user.setup:
        return IdentitySnapshot(id=user.id, email=user.email, setup=False)

    return IdentitySnapshot(
        id=user.id,
        email=user.email,
        setup=True,
        username=user.username,
        name=user.name,
        gender=user.gender,
        bio=user.bio,
        image=user.image,
    )
