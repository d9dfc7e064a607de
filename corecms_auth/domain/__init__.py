# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import LoginToken, User, UserIdentity, new_token_id, parse_token_id
from .users.exceptions import (
    InvalidCredentialsError,
    InvalidUserStateError,
    StorageFailureError,
    TokenInvalidError,
    UserAlreadyExistsError,
)

__all__ = [
    "LoginToken",
    "User",
    "UserIdentity",
    "new_token_id",
    "parse_token_id",
    "InvalidCredentialsError",
    "InvalidUserStateError",
    "StorageFailureError",
    "TokenInvalidError",
    "UserAlreadyExistsError",
]
