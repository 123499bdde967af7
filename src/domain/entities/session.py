"""
Session Entity

One row per signed-in device. The (id, refresh_token) pair is the
credential that authorizes a refresh.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

DEVICE_MAX_LENGTH = 255


class Session(SQLModel, table=True):
    """
    Session entity - stores the current refresh token of a login instance.

    Business Rules:
    - Created on sign-in once the profile setup is complete
    - Rotation replaces refresh_token/expires_at in place (same id)
    - Deleted on sign-out, on expired refresh, or by the sweep
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    refresh_token: str = Field(max_length=1024)
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    # Device metadata
    device: Optional[str] = Field(default=None, max_length=DEVICE_MAX_LENGTH)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_credential", "id", "refresh_token"),
    )
