from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from corecms_auth.app import create_app
from corecms_auth.domain.users.entities import LoginToken, User, new_token_id
from corecms_auth.infrastructure.audit import AuditAction, audit_log
from corecms_auth.infrastructure.container import container
from corecms_auth.infrastructure.db import SessionLocal, drop_db, init_db
from corecms_auth.infrastructure.db.models import AuditLog, LoginTokenRecord, UserRecord
from corecms_auth.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyLoginTokenRepository,
    SqlAlchemyUserRepository,
)

CREDS = {"username": "alice", "password": "correct-horse"}


@pytest.fixture(autouse=True)
def reset_database() -> None:
    drop_db()
    init_db()
    yield
    drop_db()


def _count(model) -> int:
    session = SessionLocal()
    try:
        return session.query(model).count()
    finally:
        session.close()


def test_register_login_logout_flow() -> None:
    app = create_app()

    with app.test_client() as client:
        register = client.post("/api/auth/register", json=CREDS)
        assert register.status_code == 200
        assert client.delete("/api/auth/logout").get_json() == {"ok": True}

        login = client.post("/api/auth/login", json=CREDS)
        assert login.status_code == 200
        assert client.get_cookie(container.auth_config.cookie_name)
        assert _count(LoginTokenRecord) == 1

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.get_json()["username"] == "alice"

        assert client.delete("/api/auth/logout").status_code == 200

    assert _count(UserRecord) == 1
    assert _count(LoginTokenRecord) == 0
    assert _count(AuditLog) >= 4


def test_expired_token_is_reaped_from_database() -> None:
    app = create_app()

    with app.test_client() as client:
        client.post("/api/auth/register", json=CREDS)

        session = SessionLocal()
        try:
            session.query(LoginTokenRecord).update(
                {LoginTokenRecord.expire_at: datetime.now(UTC) - timedelta(seconds=1)}
            )
            session.commit()
        finally:
            session.close()

        assert client.get("/api/auth/me").status_code == 401

    assert container.token_reaper.wait_idle(timeout=5)
    assert _count(LoginTokenRecord) == 0


def test_orphaned_token_stays_until_it_fails_validation() -> None:
    app = create_app()

    with app.test_client() as client:
        client.post("/api/auth/register", json=CREDS)

        session = SessionLocal()
        try:
            session.query(UserRecord).delete()
            session.commit()
        finally:
            session.close()

        assert client.get("/api/auth/me").status_code == 401

    assert _count(LoginTokenRecord) == 1


def test_security_headers_are_set() -> None:
    app = create_app()

    with app.test_client() as client:
        response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Cache-Control"] == "no-store"


def test_user_repository_round_trip() -> None:
    repo = SqlAlchemyUserRepository()
    user = User.with_password("bob", "password1", access_level=3)

    assert asyncio.run(repo.create(user)) is True
    assert user.id is not None
    # a persisted user cannot be created twice
    assert asyncio.run(repo.create(user)) is False

    clash = User.with_password("bob", "password2")
    assert asyncio.run(repo.create(clash)) is False
    assert clash.id is None

    loaded = asyncio.run(repo.get_by_username("bob"))
    assert loaded == user
    assert asyncio.run(repo.get_by_id(user.id)) == user

    assert asyncio.run(repo.delete(user)) is True
    assert asyncio.run(repo.delete(user)) is True
    assert asyncio.run(repo.get_by_id(user.id)) is None


def test_token_repository_round_trip() -> None:
    repo = SqlAlchemyLoginTokenRepository()
    token = LoginToken(
        id=new_token_id(),
        user_id=new_token_id(),
        access_ip="2001:db8::1",
        expire_at=datetime(2030, 5, 17, 8, 30, tzinfo=UTC),
    )

    assert asyncio.run(repo.create(token)) is True
    assert asyncio.run(repo.get_by_id(token.id)) == token

    assert asyncio.run(repo.delete(token)) is True
    assert asyncio.run(repo.delete(token)) is True
    assert asyncio.run(repo.get_by_id(token.id)) is None


def test_audit_redacts_secrets_and_persists() -> None:
    event = audit_log(
        AuditAction.LOGIN_FAILED,
        success=False,
        ip_address="10.0.0.1",
        details={"username": "alice", "password": "hunter22"},
    )

    assert event.details == {"username": "alice", "password": "***REDACTED***"}
    session = SessionLocal()
    try:
        row = session.query(AuditLog).one()
    finally:
        session.close()
    assert row.action == "login_failed"
    assert row.success is False
    assert "hunter22" not in (row.details_json or "")
