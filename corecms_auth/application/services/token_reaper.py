# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Background deletion of login tokens that failed validation."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from uuid import UUID

from corecms_auth.domain.users.entities import LoginToken
from corecms_auth.domain.users.repositories import LoginTokenRepository
from corecms_auth.shared.logging import logger


class TokenReaper:
    """Runs token deletions on a private event loop in a daemon thread.

    :meth:`submit` returns immediately and never raises, so the request that
    found the token invalid is not slowed down by the store. A failed
    deletion is logged and dropped; the token fails validation again on its
    next use and is resubmitted then. Submissions for a token id that is
    already being deleted are coalesced.
    """

    def __init__(self, tokens: LoginTokenRepository, *, name: str = "token-reaper") -> None:
        self._tokens = tokens
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._inflight: dict[UUID, concurrent.futures.Future[bool]] = {}

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        # caller holds self._lock
        if (
            self._loop
            and not self._loop.is_closed()
            and self._thread
            and self._thread.is_alive()
        ):
            return self._loop

        loop = asyncio.new_event_loop()

        def _runner() -> None:
            asyncio.set_event_loop(loop)
            logger.debug(f"session.reap: loop running thread={threading.current_thread().name}")
            try:
                loop.run_forever()
            finally:
                loop.run_until_complete(loop.shutdown_default_executor())
                loop.close()
                logger.debug(f"session.reap: loop stopped thread={threading.current_thread().name}")

        thread = threading.Thread(target=_runner, name=self._name, daemon=True)
        self._loop, self._thread = loop, thread
        thread.start()
        logger.info(f"session.reap: started worker thread={thread.name}")
        return loop

    def submit(self, token: LoginToken) -> None:
        try:
            with self._lock:
                if token.id in self._inflight:
                    logger.debug(f"session.reap: already pending tok={token.short_id}…")
                    return
                loop = self._ensure_loop()
                future = asyncio.run_coroutine_threadsafe(self._reap(token), loop)
                self._inflight[token.id] = future
        except RuntimeError as exc:
            logger.warning(f"session.reap: worker unavailable tok={token.short_id}… error={exc}")
            return
        future.add_done_callback(lambda _f, token_id=token.id: self._forget(token_id))

    def _forget(self, token_id: UUID) -> None:
        with self._lock:
            self._inflight.pop(token_id, None)

    async def _reap(self, token: LoginToken) -> bool:
        try:
            deleted = await self._tokens.delete(token)
        except Exception as exc:
            logger.warning(
                f"session.reap: delete raised tok={token.short_id}… error={type(exc).__name__}"
            )
            return False
        if deleted:
            logger.info(f"session.reap: deleted tok={token.short_id}… user_id={token.user_id}")
        else:
            logger.warning(f"session.reap: store refused delete tok={token.short_id}…")
        return deleted

    def pending(self) -> int:
        with self._lock:
            return sum(1 for future in self._inflight.values() if not future.done())

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every submitted deletion has finished."""
        with self._lock:
            futures = list(self._inflight.values())
        if not futures:
            return True
        _done, not_done = concurrent.futures.wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: float = 5.0) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout)
        logger.info(f"session.reap: stopped worker thread={self._name}")


__all__ = ["TokenReaper"]
