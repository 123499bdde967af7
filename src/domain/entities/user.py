"""
User Entity

The identity that owns sessions.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow
from .enums import Gender


class User(SQLModel, table=True):
    """
    User entity - the identity behind every session.

    Business Rules:
    - Email must be unique across all users
    - Username is optional until profile setup, unique and lowercase once set
    - Password stored as bcrypt hash (cost factor 12)
    - setup=True only once name, username and gender are filled in;
      refresh tokens are never issued before that
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=30)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Profile
    name: Optional[str] = Field(default=None, max_length=60)
    gender: Optional[Gender] = Field(default=None)
    bio: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = Field(default=None, max_length=500)
    setup: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
