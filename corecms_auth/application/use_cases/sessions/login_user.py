# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from corecms_auth.domain.users.entities import LoginToken, User, new_token_id
from corecms_auth.domain.users.exceptions import (
    InvalidCredentialsError,
    InvalidUserStateError,
    StorageFailureError,
)
from corecms_auth.domain.users.repositories import (
    CredentialTransport,
    IpResolver,
    LoginTokenRepository,
    UserRepository,
)
from corecms_auth.shared.config import AuthConfig
from corecms_auth.shared.logging import logger


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: LoginTokenRepository,
        ip_resolver: IpResolver,
        transport: CredentialTransport,
        config: AuthConfig,
        clock: Callable[[], datetime],
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._ip_resolver = ip_resolver
        self._transport = transport
        self._config = config
        self._clock = clock

    async def execute(self, username: str, password: str, context: Any) -> LoginToken:
        user = await self._users.get_by_username(username)
        # unknown user and wrong password must look the same to the caller
        if user is None or not user.verify_password(password):
            logger.info("session.login: rejected credentials")
            raise InvalidCredentialsError()
        return await self.execute_for_user(user, context)

    async def execute_for_user(self, user: User, context: Any) -> LoginToken:
        if user is None or user.id is None:
            raise InvalidUserStateError(
                context={"detail": "user is missing or has not been persisted"}
            )

        token = LoginToken(
            id=new_token_id(),
            user_id=user.id,
            access_ip=self._ip_resolver.resolve(context),
            expire_at=self._clock() + self._config.session_lifetime,
        )

        if not await self._tokens.create(token):
            logger.warning(f"session.login: token store rejected write user_id={user.id}")
            raise StorageFailureError("token.create")

        self._transport.write(
            context,
            self._config.cookie_name,
            str(token.id),
            expires_at=token.expire_at,
            http_only=True,
            same_site=self._config.cookie_samesite,
            secure=self._config.cookie_secure,
        )
        logger.info(
            f"session.login: ok user_id={user.id} ip={token.access_ip or '-'} "
            f"exp={token.expire_at.isoformat()} tok={token.short_id}…"
        )
        return token
