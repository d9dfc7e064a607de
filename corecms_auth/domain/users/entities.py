# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from werkzeug.security import check_password_hash, generate_password_hash

_SALT_BYTES = 16


def new_token_id() -> UUID:
    """Return a token id carrying 128 bits from the OS CSPRNG."""
    while True:
        token_id = UUID(bytes=secrets.token_bytes(16))
        if token_id.int:
            return token_id


def parse_token_id(raw: str | None) -> UUID | None:
    if not raw:
        return None
    try:
        token_id = UUID(raw)
    except ValueError:
        return None
    if not token_id.int:
        return None
    return token_id


@dataclass(slots=True)
class User:
    """User record as held by the identity store.

    ``id`` stays ``None`` until the store persists the user and assigns one.
    """

    username: str
    password_salt: str
    password_hash: str
    access_level: int = 0
    id: UUID | None = None

    @classmethod
    def with_password(cls, username: str, password: str, *, access_level: int = 0) -> User:
        salt = secrets.token_hex(_SALT_BYTES)
        return cls(
            username=username,
            password_salt=salt,
            password_hash=generate_password_hash(salt + password),
            access_level=access_level,
        )

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def verify_password(self, candidate: str) -> bool:
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, self.password_salt + candidate))


@dataclass(slots=True, frozen=True)
class LoginToken:

    id: UUID
    user_id: UUID
    access_ip: str
    expire_at: datetime

    def is_live(self, now: datetime) -> bool:
        return now < self.expire_at

    def is_bound(self, ip_address: str) -> bool:
        return ip_address == self.access_ip

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]


@dataclass(slots=True, frozen=True)
class UserIdentity:
    """Base identity fields handed to an identity factory on resolution."""

    id: UUID
    username: str
    password_salt: str
    password_hash: str
    access_level: int

    @classmethod
    def from_user(cls, user: User) -> UserIdentity:
        if user.id is None:
            raise ValueError("cannot build an identity for an unpersisted user")
        return cls(
            id=user.id,
            username=user.username,
            password_salt=user.password_salt,
            password_hash=user.password_hash,
            access_level=user.access_level,
        )
