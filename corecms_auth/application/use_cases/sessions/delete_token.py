# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for revoking a single login token."""

from __future__ import annotations

from corecms_auth.domain.users.entities import LoginToken
from corecms_auth.domain.users.exceptions import StorageFailureError
from corecms_auth.domain.users.repositories import LoginTokenRepository
from corecms_auth.shared.logging import logger


class DeleteTokenUseCase:
    def __init__(self, *, tokens: LoginTokenRepository) -> None:
        self._tokens = tokens

    async def execute(self, token: LoginToken) -> bool:
        # stores treat deleting an absent token as success
        try:
            deleted = await self._tokens.delete(token)
        except StorageFailureError:
            deleted = False
        if not deleted:
            logger.warning(f"session.revoke: store failed tok={token.short_id}…")
        return deleted
