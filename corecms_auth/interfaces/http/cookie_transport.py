# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from flask import Response

from corecms_auth.domain.users.repositories import CredentialTransport
from corecms_auth.interfaces.http.exchange import HttpExchange


class FlaskCookieTransport(CredentialTransport):
    """Carries the session credential in a single cookie."""

    def __init__(self, *, path: str = "/", domain: str | None = None) -> None:
        self._path = path
        self._domain = domain

    def read(self, context: HttpExchange, name: str) -> str | None:
        return context.request.cookies.get(name) or None

    def write(
        self,
        context: HttpExchange,
        name: str,
        value: str,
        *,
        expires_at: datetime,
        http_only: bool,
        same_site: str,
        secure: bool,
    ) -> None:
        def _set(response: Response) -> None:
            response.set_cookie(
                name,
                value,
                expires=expires_at,
                path=self._path,
                domain=self._domain,
                secure=secure,
                httponly=http_only,
                samesite=same_site,
            )

        context.stage(_set)

    def clear(self, context: HttpExchange, name: str) -> None:
        def _delete(response: Response) -> None:
            response.delete_cookie(name, path=self._path, domain=self._domain)

        context.stage(_delete)
