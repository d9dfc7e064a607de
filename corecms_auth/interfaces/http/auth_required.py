# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from functools import wraps
from typing import Any

from flask import g, request

from corecms_auth.application.services.session_engine import SessionEngine
from corecms_auth.interfaces.http.exchange import current_exchange
from corecms_auth.shared.errors import UnauthorizedError
from corecms_auth.shared.logging import logger
from corecms_auth.utils.asyncio_utils import run_async


def current_identity(engine: SessionEngine[Any]) -> Any | None:
    """Resolve the caller's identity once per request and cache it on ``g``."""
    if "identity" not in g:
        g.identity = run_async(engine.resolve_identity(current_exchange()))
        g.user_id = getattr(g.identity, "id", None)
    return g.identity


def auth_required(engine: SessionEngine[Any]):
    def decorator(f):
        @wraps(f)
        def inner(*a, **kw):
            if current_identity(engine) is None:
                logger.warning(f"Auth failed (no valid session) on {request.method} {request.path}")
                raise UnauthorizedError()
            logger.debug(f"Auth OK: user={g.user_id} {request.method} {request.path}")
            return f(*a, **kw)

        return inner

    return decorator


__all__ = ["auth_required", "current_identity"]
