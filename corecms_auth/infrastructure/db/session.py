# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from corecms_auth.shared.config import DatabaseConfig, load_config
from corecms_auth.shared.logging import logger


class Base(DeclarativeBase):
    pass


def _engine_options(config: DatabaseConfig) -> dict[str, Any]:
    url = make_url(config.url)
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        # the reaper and asyncio.to_thread workers share connections across threads
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(config.pool_timeout),
        }
        if url.database in (None, "", ":memory:"):
            return options

    options.update(
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
    )
    return options


def build_engine(config: DatabaseConfig) -> Engine:
    return create_engine(config.url, **_engine_options(config))


ENGINE: Engine = build_engine(load_config().database)

SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Commit on success, roll back and re-raise on error, always release."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        logger.exception("db.session: rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()


def init_db() -> None:
    from corecms_auth.infrastructure.db import models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=ENGINE)
    logger.info(f"db: schema ensured backend={ENGINE.url.get_backend_name()}")


def drop_db() -> None:
    from corecms_auth.infrastructure.db import models  # noqa: F401

    Base.metadata.drop_all(bind=ENGINE)
    logger.info("db: schema dropped")
