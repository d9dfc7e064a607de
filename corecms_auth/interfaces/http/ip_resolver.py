# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import ipaddress

from flask import Request

from corecms_auth.domain.users.repositories import IpResolver
from corecms_auth.interfaces.http.exchange import HttpExchange
from corecms_auth.shared.config import AuthConfig
from corecms_auth.shared.logging import logger


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.rstrip(",").split(",") if part.strip()]


def canonical_ip(value: str) -> str:
    """Render each address in ``value`` in its canonical compressed form.

    Tokens that are not IP addresses are kept verbatim so the result still
    compares equal for the same raw input.
    """
    parts = []
    for part in _split_csv(value):
        candidate = part[1:-1] if part.startswith("[") and part.endswith("]") else part
        try:
            parts.append(str(ipaddress.ip_address(candidate)))
        except ValueError:
            parts.append(part)
    return ", ".join(parts)


class ForwardedIpResolver(IpResolver):
    """Best-effort client address for a request.

    Order: ``X-Forwarded-For`` (when trusted; the whole chain, or only the
    first hop), the socket peer, then a ``REMOTE_ADDR`` header. Returns ``""``
    when nothing usable is present.
    """

    def __init__(self, *, trust_forwarded_for: bool = True, first_only: bool = False) -> None:
        self._trust_forwarded_for = trust_forwarded_for
        self._first_only = first_only

    @classmethod
    def from_config(cls, config: AuthConfig) -> ForwardedIpResolver:
        return cls(
            trust_forwarded_for=config.trust_forwarded_for,
            first_only=config.forwarded_first_only,
        )

    def resolve(self, context: HttpExchange) -> str:
        try:
            return canonical_ip(self._raw_ip(context.request))
        except Exception as exc:
            logger.warning(f"ip_resolver: could not resolve client ip error={type(exc).__name__}")
            return ""

    def _raw_ip(self, request: Request) -> str:
        ip = ""
        if self._trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For", "")
            if self._first_only:
                hops = _split_csv(forwarded)
                ip = hops[0] if hops else ""
            else:
                ip = forwarded

        if not ip.strip() and request.remote_addr:
            ip = request.remote_addr

        if not ip.strip():
            ip = request.headers.get("REMOTE_ADDR", "")

        return ip.strip()


__all__ = ["ForwardedIpResolver", "canonical_ip"]
