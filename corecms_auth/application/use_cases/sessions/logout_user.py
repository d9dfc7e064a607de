# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for ending the session a request carries."""

from __future__ import annotations

from typing import Any

from corecms_auth.application.use_cases.sessions.delete_token import DeleteTokenUseCase
from corecms_auth.application.use_cases.sessions.read_token import ReadTokenUseCase
from corecms_auth.domain.users.exceptions import StorageFailureError
from corecms_auth.domain.users.repositories import CredentialTransport
from corecms_auth.shared.config import AuthConfig
from corecms_auth.shared.logging import logger


class LogoutUserUseCase:
    def __init__(
        self,
        *,
        read_token: ReadTokenUseCase,
        delete_token: DeleteTokenUseCase,
        transport: CredentialTransport,
        config: AuthConfig,
    ) -> None:
        self._read_token = read_token
        self._delete_token = delete_token
        self._transport = transport
        self._config = config

    async def execute(self, context: Any) -> bool:
        try:
            token = await self._read_token.execute(context)
        except StorageFailureError:
            return False
        if token is None:
            return False

        # on failure the cookie stays; a later validation reaps the token
        if not await self._delete_token.execute(token):
            return False

        self._transport.clear(context, self._config.cookie_name)
        logger.info(f"session.logout: ok user_id={token.user_id} tok={token.short_id}…")
        return True
