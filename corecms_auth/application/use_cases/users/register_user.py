# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from corecms_auth.application.services.session_engine import SessionEngine
from corecms_auth.domain.users.entities import User
from corecms_auth.domain.users.exceptions import StorageFailureError, UserAlreadyExistsError
from corecms_auth.domain.users.repositories import UserRepository


class RegisterUserUseCase:
    """Create an account and log it straight in."""

    def __init__(self, *, users: UserRepository, engine: SessionEngine[Any]) -> None:
        self._users = users
        self._engine = engine

    async def execute(self, username: str, password: str, context: Any) -> User:
        existing = await self._users.get_by_username(username)
        if existing:
            raise UserAlreadyExistsError()

        user = User.with_password(username, password)
        if not await self._engine.create_user(user):
            raise StorageFailureError("user.create")
        if not await self._engine.login_user(user, context):
            raise StorageFailureError("token.create")
        return user
