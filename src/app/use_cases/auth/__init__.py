"""
Authentication Use Cases

All session lifecycle business logic.
"""

from .sign_up_use_case import SignUpUseCase
from .sign_in_use_case import SignInUseCase
from .sign_out_use_case import SignOutUseCase
from .refresh_session_use_case import (
    RefreshSessionUseCase,
    RefreshState,
    classify_refresh,
)
from .resolve_identity_use_case import ResolveIdentityUseCase
from .sweep_expired_sessions_use_case import SweepExpiredSessionsUseCase
from .dtos import (
    SignUpCommand,
    SignInCommand,
    SignUpResponse,
    SignInResponse,
    SignOutResponse,
    RefreshSessionResponse,
    SweepExpiredSessionsResponse,
)

__all__ = [
    # Use Cases
    "SignUpUseCase",
    "SignInUseCase",
    "SignOutUseCase",
    "RefreshSessionUseCase",
    "ResolveIdentityUseCase",
    "SweepExpiredSessionsUseCase",
    # State machine
    "RefreshState",
    "classify_refresh",
    # DTOs - Commands
    "SignUpCommand",
    "SignInCommand",
    # DTOs - Responses
    "SignUpResponse",
    "SignInResponse",
    "SignOutResponse",
    "RefreshSessionResponse",
    "SweepExpiredSessionsResponse",
]
