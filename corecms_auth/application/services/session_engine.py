# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session engine: issues, validates and revokes login tokens.

Every public coroutine reports authentication outcomes as ``bool`` or
``None`` only. Unknown usernames, wrong passwords, expired or foreign-IP
tokens and store outages all collapse to the same negative result so a
caller cannot tell them apart. The one exception is
:class:`~corecms_auth.domain.users.exceptions.InvalidUserStateError`, raised
when asked to log in a user that was never persisted.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, cast

from corecms_auth.application.interfaces import Clock, IdentityFactory, ReapPort
from corecms_auth.application.use_cases.sessions.delete_token import DeleteTokenUseCase
from corecms_auth.application.use_cases.sessions.login_user import LoginUserUseCase
from corecms_auth.application.use_cases.sessions.logout_user import LogoutUserUseCase
from corecms_auth.application.use_cases.sessions.read_token import ReadTokenUseCase
from corecms_auth.application.use_cases.sessions.resolve_identity import ResolveIdentityUseCase
from corecms_auth.application.use_cases.users.create_user import CreateUserUseCase
from corecms_auth.application.use_cases.users.delete_user import DeleteUserUseCase
from corecms_auth.domain.users.entities import LoginToken, User, UserIdentity
from corecms_auth.domain.users.exceptions import InvalidCredentialsError, StorageFailureError
from corecms_auth.domain.users.repositories import (
    CredentialTransport,
    IpResolver,
    LoginTokenRepository,
    UserRepository,
)
from corecms_auth.shared.config import AuthConfig


def utc_now() -> datetime:
    return datetime.now(UTC)


def _same_identity(identity: UserIdentity) -> UserIdentity:
    return identity


class SessionEngine[T]:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: LoginTokenRepository,
        ip_resolver: IpResolver,
        transport: CredentialTransport,
        reaper: ReapPort,
        config: AuthConfig | None = None,
        identity_factory: IdentityFactory[T] | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config or AuthConfig()  # type: ignore[call-arg]
        factory = identity_factory or cast(Callable[[UserIdentity], T], _same_identity)

        self._read_token = ReadTokenUseCase(
            tokens=tokens, transport=transport, config=self._config
        )
        self._login = LoginUserUseCase(
            users=users,
            tokens=tokens,
            ip_resolver=ip_resolver,
            transport=transport,
            config=self._config,
            clock=clock,
        )
        self._resolve = ResolveIdentityUseCase(
            users=users,
            read_token=self._read_token,
            ip_resolver=ip_resolver,
            reaper=reaper,
            identity_factory=factory,
            clock=clock,
        )
        self._delete_token = DeleteTokenUseCase(tokens=tokens)
        self._logout = LogoutUserUseCase(
            read_token=self._read_token,
            delete_token=self._delete_token,
            transport=transport,
            config=self._config,
        )
        self._create_user = CreateUserUseCase(users=users)
        self._delete_user = DeleteUserUseCase(users=users)

    @property
    def config(self) -> AuthConfig:
        return self._config

    async def login(self, username: str, password: str, context: Any) -> bool:
        try:
            await self._login.execute(username, password, context)
        except (InvalidCredentialsError, StorageFailureError):
            return False
        return True

    async def login_user(self, user: User, context: Any) -> bool:
        """Start a session for an already authenticated, persisted user."""
        try:
            await self._login.execute_for_user(user, context)
        except StorageFailureError:
            return False
        return True

    async def resolve_identity(self, context: Any) -> T | None:
        return await self._resolve.execute(context)

    async def read_token(self, context: Any) -> LoginToken | None:
        try:
            return await self._read_token.execute(context)
        except StorageFailureError:
            return None

    async def delete_token(self, token: LoginToken) -> bool:
        return await self._delete_token.execute(token)

    async def logout(self, context: Any) -> bool:
        return await self._logout.execute(context)

    async def create_user(self, user: User) -> bool:
        return await self._create_user.execute(user)

    async def delete_user(self, user: User) -> bool:
        return await self._delete_user.execute(user)


__all__ = ["SessionEngine", "utc_now"]
