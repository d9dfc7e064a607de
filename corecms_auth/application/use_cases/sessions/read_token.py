# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for looking up the login token a request presents."""

from __future__ import annotations

from typing import Any

from corecms_auth.domain.users.entities import LoginToken, parse_token_id
from corecms_auth.domain.users.repositories import CredentialTransport, LoginTokenRepository
from corecms_auth.shared.config import AuthConfig


class ReadTokenUseCase:
    def __init__(
        self,
        *,
        tokens: LoginTokenRepository,
        transport: CredentialTransport,
        config: AuthConfig,
    ) -> None:
        self._tokens = tokens
        self._transport = transport
        self._config = config

    async def execute(self, context: Any) -> LoginToken | None:
        token_id = parse_token_id(self._transport.read(context, self._config.cookie_name))
        if token_id is None:
            return None
        return await self._tokens.get_by_id(token_id)
