from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from corecms_auth.application.services.token_reaper import TokenReaper
from corecms_auth.domain.users.entities import LoginToken, new_token_id


def _token() -> LoginToken:
    return LoginToken(
        id=new_token_id(),
        user_id=uuid4(),
        access_ip="10.0.0.1",
        expire_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


@pytest.fixture()
def live_reaper(tokens):
    reaper = TokenReaper(tokens, name="token-reaper-test")
    yield reaper
    reaper.shutdown()


def test_submit_deletes_in_background(live_reaper, tokens) -> None:
    token = _token()
    tokens.tokens[token.id] = token

    live_reaper.submit(token)

    assert live_reaper.wait_idle(timeout=5)
    assert token.id not in tokens.tokens
    assert live_reaper.pending() == 0


def test_duplicate_submissions_are_coalesced() -> None:
    gate = threading.Event()
    calls: list = []

    class SlowTokens:
        async def delete(self, token: LoginToken) -> bool:
            calls.append(token.id)
            await asyncio.to_thread(gate.wait, 5)
            return True

    reaper = TokenReaper(SlowTokens())
    try:
        token = _token()
        reaper.submit(token)
        reaper.submit(token)
        assert reaper.pending() == 1
        gate.set()
        assert reaper.wait_idle(timeout=5)
    finally:
        reaper.shutdown()

    assert len(calls) == 1


def test_failed_delete_is_swallowed() -> None:
    class BrokenTokens:
        async def delete(self, token: LoginToken) -> bool:
            raise RuntimeError("store down")

    reaper = TokenReaper(BrokenTokens())
    try:
        reaper.submit(_token())
        assert reaper.wait_idle(timeout=5)
        assert reaper.pending() == 0
    finally:
        reaper.shutdown()


def test_wait_idle_without_work_returns_immediately(live_reaper) -> None:
    assert live_reaper.wait_idle(timeout=0) is True


def test_restarts_after_shutdown(live_reaper, tokens) -> None:
    live_reaper.shutdown()

    token = _token()
    tokens.tokens[token.id] = token
    live_reaper.submit(token)

    assert live_reaper.wait_idle(timeout=5)
    assert token.id not in tokens.tokens


def test_expired_token_is_gone_after_resolution(
    build_engine, tokens, live_reaper, make_ctx, alice, clock
) -> None:
    engine = build_engine(reaper=live_reaper)
    ctx = make_ctx()
    assert asyncio.run(engine.login("alice", "correct-horse", ctx))

    clock.advance(timedelta(days=7, seconds=1))
    assert asyncio.run(engine.resolve_identity(ctx)) is None

    assert live_reaper.wait_idle(timeout=5)
    assert tokens.tokens == {}


def test_ip_mismatch_kills_token_for_original_client(
    build_engine, tokens, live_reaper, make_ctx, alice
) -> None:
    engine = build_engine(reaper=live_reaper)
    owner = make_ctx(ip="10.0.0.1")
    assert asyncio.run(engine.login("alice", "correct-horse", owner))

    thief = make_ctx(ip="10.0.0.2", cookies=dict(owner.cookies))
    assert asyncio.run(engine.resolve_identity(thief)) is None
    assert live_reaper.wait_idle(timeout=5)

    assert asyncio.run(engine.resolve_identity(owner)) is None
