# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from corecms_auth.domain.users.entities import User
from corecms_auth.domain.users.exceptions import StorageFailureError
from corecms_auth.domain.users.repositories import UserRepository
from corecms_auth.shared.logging import logger


class DeleteUserUseCase:
    """Remove a user record.

    Outstanding login tokens are not touched; they stop resolving because
    their user is gone and are reaped once they fail validation.
    """

    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    async def execute(self, user: User) -> bool:
        try:
            deleted = await self._users.delete(user)
        except StorageFailureError:
            deleted = False
        if deleted:
            logger.info(f"users.delete: ok user_id={user.id}")
        else:
            logger.warning(f"users.delete: failed user_id={user.id}")
        return deleted
