# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Any

from corecms_auth.application.interfaces import Clock, IdentityFactory, ReapPort
from corecms_auth.application.use_cases.sessions.read_token import ReadTokenUseCase
from corecms_auth.domain.users.entities import LoginToken, UserIdentity
from corecms_auth.domain.users.exceptions import StorageFailureError, TokenInvalidError
from corecms_auth.domain.users.repositories import IpResolver, UserRepository
from corecms_auth.shared.logging import logger


class ResolveIdentityUseCase[T]:
    """Map the credential a request carries to an application identity.

    The token must be live (``now < expire_at``) and bound to the resolved
    client IP. A token failing either check is handed to the reaper and the
    request is treated as anonymous; the caller never learns which check
    failed. A token whose user no longer exists also yields ``None`` but is
    left in place.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        read_token: ReadTokenUseCase,
        ip_resolver: IpResolver,
        reaper: ReapPort,
        identity_factory: IdentityFactory[T],
        clock: Clock,
    ) -> None:
        self._users = users
        self._read_token = read_token
        self._ip_resolver = ip_resolver
        self._reaper = reaper
        self._identity_factory = identity_factory
        self._clock = clock

    async def execute(self, context: Any) -> T | None:
        try:
            token = await self._read_token.execute(context)
            if token is None:
                return None

            try:
                self._validate(token, self._ip_resolver.resolve(context), self._clock())
            except TokenInvalidError as exc:
                logger.debug(f"session.resolve: rejected tok={token.short_id}… reason={exc.reason}")
                self._reaper.submit(token)
                return None

            user = await self._users.get_by_id(token.user_id)
        except StorageFailureError as exc:
            logger.warning(f"session.resolve: store unavailable error={exc.code}")
            return None

        if user is None:
            logger.info(f"session.resolve: orphaned tok={token.short_id}… user_id={token.user_id}")
            return None

        return self._identity_factory(UserIdentity.from_user(user))

    @staticmethod
    def _validate(token: LoginToken, ip_address: str, now: datetime) -> None:
        if not token.is_bound(ip_address):
            raise TokenInvalidError("ip_mismatch")
        if not token.is_live(now):
            raise TokenInvalidError("expired")
