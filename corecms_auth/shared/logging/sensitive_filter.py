# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Redaction of credentials before log records reach a sink.

Login token ids are bearer secrets, so full UUIDs following a token or
cookie key are masked. Log lines already use the 8-character ``short_id``.
"""

from __future__ import annotations

import re
from typing import Any

_MASK = "***REDACTED***"
_Q = r"['\"]?"

_RULES: list[tuple[re.Pattern[str], str]] = [
    # key=value secrets: passwords, salts, hashes, secret keys
    (
        re.compile(
            rf"((?:password(?:_hash)?|password_salt|salt|secret[_-]?key)\s*[:=]\s*{_Q})([^'\"\s,]{{6,}})",
            re.IGNORECASE,
        ),
        rf"\1{_MASK}",
    ),
    # bearer credentials and raw tokens
    (re.compile(r"(bearer\s+)([\w\-.~+/]{8,}=*)", re.IGNORECASE), rf"\1{_MASK}"),
    (
        re.compile(rf"((?:auth[_-]?)?token\s*[:=]\s*{_Q})([\w\-.]{{20,}})", re.IGNORECASE),
        rf"\1{_MASK}",
    ),
    # Cookie / Set-Cookie headers and session cookie pairs
    (re.compile(rf"((?:set-)?cookie\s*[:=]\s*{_Q})([^'\"]{{10,}})", re.IGNORECASE), rf"\1{_MASK}"),
    (re.compile(r"(AuthToken=)([0-9a-fA-F-]{32,36})"), rf"\1{_MASK}"),
    (re.compile(rf"(authorization\s*:\s*{_Q})([^'\"]{{10,}})", re.IGNORECASE), rf"\1{_MASK}"),
    # database URLs with credentials
    (re.compile(r"(\w+(?:\+\w+)?://[^:/@\s]+:)([^@\s]+)(@)"), rf"\1{_MASK}\3"),
]


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: rewrites the message in place and never drops a record."""
    record["message"] = sanitize_message(record["message"])
    return True
