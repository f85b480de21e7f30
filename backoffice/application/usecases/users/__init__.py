"""
===============================================================================
USER DIRECTORY USE CASES PACKAGE (Public API / Exports)
===============================================================================
"""

from __future__ import annotations

from .authenticate_user import AuthenticateUserUseCase
from .create_user import CreateUserUseCase
from .get_user import GetUserUseCase, ListUsersUseCase
from .grant_validation import validate_bindings, validate_grants
from .set_user_status import SetUserStatusUseCase
from .update_grants import UpdateGrantsUseCase

__all__ = [
    "AuthenticateUserUseCase",
    "CreateUserUseCase",
    "GetUserUseCase",
    "ListUsersUseCase",
    "SetUserStatusUseCase",
    "UpdateGrantsUseCase",
    "validate_bindings",
    "validate_grants",
]
