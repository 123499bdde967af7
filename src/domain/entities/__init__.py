"""
Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

from .enums import Gender
from .user import User
from .session import Session

__all__ = [
    # Enums
    "Gender",
    # Entities
    "User",
    "Session",
]
