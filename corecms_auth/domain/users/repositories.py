# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from .entities import LoginToken, User


class UserRepository(Protocol):
    async def create(self, user: User) -> bool: ...
    async def delete(self, user: User) -> bool: ...
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_username(self, username: str) -> User | None: ...


class LoginTokenRepository(Protocol):
    async def create(self, token: LoginToken) -> bool: ...
    async def delete(self, token: LoginToken) -> bool: ...
    async def get_by_id(self, token_id: UUID) -> LoginToken | None: ...


class IpResolver(Protocol):
    def resolve(self, context: Any) -> str: ...


class CredentialTransport(Protocol):
    def read(self, context: Any, name: str) -> str | None: ...

    def write(
        self,
        context: Any,
        name: str,
        value: str,
        *,
        expires_at: datetime,
        http_only: bool,
        same_site: str,
        secure: bool,
    ) -> None: ...

    def clear(self, context: Any, name: str) -> None: ...
