from __future__ import annotations

import asyncio
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

_TMP = Path(tempfile.mkdtemp(prefix="corecms-auth-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP / 'auth.db'}")
os.environ.setdefault("LOG_FILE", str(_TMP / "app.log"))
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402

from corecms_auth.application.services.session_engine import SessionEngine  # noqa: E402
from corecms_auth.domain.users.entities import LoginToken, User, UserIdentity  # noqa: E402
from corecms_auth.domain.users.exceptions import StorageFailureError  # noqa: E402
from corecms_auth.shared.config import AuthConfig  # noqa: E402

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}
        self.fail_reads = False
        self.fail_writes = False

    async def create(self, user: User) -> bool:
        if self.fail_writes or user.id is not None:
            return False
        user.id = uuid4()
        self.users[user.id] = replace(user)
        return True

    async def delete(self, user: User) -> bool:
        if self.fail_writes:
            return False
        if user.id is not None:
            self.users.pop(user.id, None)
        return True

    async def get_by_id(self, user_id: UUID) -> User | None:
        if self.fail_reads:
            raise StorageFailureError("user.get_by_id")
        user = self.users.get(user_id)
        return replace(user) if user else None

    async def get_by_username(self, username: str) -> User | None:
        if self.fail_reads:
            raise StorageFailureError("user.get_by_username")
        for user in self.users.values():
            if user.username == username:
                return replace(user)
        return None


class InMemoryTokenRepository:
    def __init__(self) -> None:
        self.tokens: dict[UUID, LoginToken] = {}
        self.reads = 0
        self.deleted: list[UUID] = []
        self.fail_reads = False
        self.fail_writes = False

    async def create(self, token: LoginToken) -> bool:
        if self.fail_writes:
            return False
        self.tokens[token.id] = token
        return True

    async def delete(self, token: LoginToken) -> bool:
        if self.fail_writes:
            return False
        self.tokens.pop(token.id, None)
        self.deleted.append(token.id)
        return True

    async def get_by_id(self, token_id: UUID) -> LoginToken | None:
        self.reads += 1
        if self.fail_reads:
            raise StorageFailureError("token.get_by_id")
        return self.tokens.get(token_id)


@dataclass
class FakeContext:
    """Stands in for a request: an address plus a cookie jar."""

    ip: str = "10.0.0.1"
    cookies: dict[str, str] = field(default_factory=dict)
    writes: list[dict] = field(default_factory=list)
    clears: list[str] = field(default_factory=list)


class FakeIpResolver:
    def resolve(self, context: FakeContext) -> str:
        return context.ip


class FakeTransport:
    def read(self, context: FakeContext, name: str) -> str | None:
        return context.cookies.get(name)

    def write(self, context: FakeContext, name: str, value: str, **attrs) -> None:
        context.writes.append({"name": name, "value": value, **attrs})
        context.cookies[name] = value

    def clear(self, context: FakeContext, name: str) -> None:
        context.clears.append(name)
        context.cookies.pop(name, None)


class MutableClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class RecordingReaper:
    def __init__(self) -> None:
        self.submitted: list[LoginToken] = []

    def submit(self, token: LoginToken) -> None:
        self.submitted.append(token)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def tokens() -> InMemoryTokenRepository:
    return InMemoryTokenRepository()


@pytest.fixture()
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture()
def reaper() -> RecordingReaper:
    return RecordingReaper()


@pytest.fixture()
def auth_config() -> AuthConfig:
    return AuthConfig(cookie_name="CoreCMSAuthToken", session_lifetime=timedelta(days=7))


@pytest.fixture()
def ctx() -> FakeContext:
    return FakeContext()


@pytest.fixture()
def make_ctx() -> Callable[..., FakeContext]:
    return FakeContext


@pytest.fixture()
def build_engine(
    users: InMemoryUserRepository,
    tokens: InMemoryTokenRepository,
    reaper: RecordingReaper,
    clock: MutableClock,
    auth_config: AuthConfig,
) -> Callable[..., SessionEngine[Any]]:
    def _build(**overrides: Any) -> SessionEngine[Any]:
        kwargs: dict[str, Any] = {
            "users": users,
            "tokens": tokens,
            "ip_resolver": FakeIpResolver(),
            "transport": FakeTransport(),
            "reaper": reaper,
            "config": auth_config,
            "clock": clock,
        }
        kwargs.update(overrides)
        return SessionEngine(**kwargs)

    return _build


@pytest.fixture()
def engine(build_engine: Callable[..., SessionEngine[Any]]) -> SessionEngine[UserIdentity]:
    return build_engine()


@pytest.fixture()
def alice(users: InMemoryUserRepository) -> User:
    user = User.with_password("alice", "correct-horse")
    assert asyncio.run(users.create(user))
    return user
