# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from corecms_auth.domain.users.entities import User
from corecms_auth.domain.users.exceptions import StorageFailureError
from corecms_auth.domain.users.repositories import UserRepository
from corecms_auth.shared.logging import logger


class CreateUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    async def execute(self, user: User) -> bool:
        try:
            created = await self._users.create(user)
        except StorageFailureError:
            created = False
        if created:
            logger.info(f"users.create: ok user_id={user.id} username={user.username}")
        else:
            logger.warning(f"users.create: rejected username={user.username}")
        return created
