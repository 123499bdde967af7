"""
User Use Cases

Profile and credential management for the signed-in user.
"""

from .profile_setup_use_case import ProfileSetupUseCase
from .change_password_use_case import ChangePasswordUseCase
from .dtos import (
    ProfileSetupCommand,
    ProfileSetupResponse,
    ChangePasswordCommand,
    ChangePasswordResponse,
)

__all__ = [
    "ProfileSetupUseCase",
    "ChangePasswordUseCase",
    "ProfileSetupCommand",
    "ProfileSetupResponse",
    "ChangePasswordCommand",
    "ChangePasswordResponse",
]
