"""
Use Cases

Organized into domain folders:
- auth/: Session lifecycle (sign-up, sign-in, refresh, sign-out, sweep)
- users/: Profile management
"""

from .auth import (
    SignUpUseCase,
    SignInUseCase,
    SignOutUseCase,
    RefreshSessionUseCase,
    ResolveIdentityUseCase,
    SweepExpiredSessionsUseCase,
)
from .users import ChangePasswordUseCase, ProfileSetupUseCase

__all__ = [
    # Auth
    "SignUpUseCase",
    "SignInUseCase",
    "SignOutUseCase",
    "RefreshSessionUseCase",
    "ResolveIdentityUseCase",
    "SweepExpiredSessionsUseCase",
    # Users
    "ProfileSetupUseCase",
    "ChangePasswordUseCase",
]
