# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Per-request carrier between Flask and the session engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from flask import Blueprint, Flask, Request, Response, g, request


@dataclass(slots=True)
class HttpExchange:
    """Incoming request plus cookie changes staged for the outgoing response."""

    request: Request
    _staged: list[Callable[[Response], None]] = field(default_factory=list)

    def stage(self, operation: Callable[[Response], None]) -> None:
        self._staged.append(operation)

    def apply(self, response: Response) -> Response:
        staged, self._staged = self._staged, []
        for operation in staged:
            operation(response)
        return response


def current_exchange() -> HttpExchange:
    exchange = g.get("_auth_exchange")
    if exchange is None:
        exchange = HttpExchange(request=request._get_current_object())  # type: ignore[attr-defined]
        g._auth_exchange = exchange
    return exchange


def _apply_exchange(response: Response) -> Response:
    exchange = g.get("_auth_exchange")
    if exchange is not None:
        exchange.apply(response)
    return response


def bind_exchange(target: Flask | Blueprint) -> None:
    target.after_request(_apply_exchange)


__all__ = ["HttpExchange", "bind_exchange", "current_exchange"]
