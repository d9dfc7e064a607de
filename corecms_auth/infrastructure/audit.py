# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Audit trail for authentication events.

Each event is logged and written to the ``audit_logs`` table. A failed write
is logged and dropped so auditing never changes the outcome of a request.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from corecms_auth.infrastructure.db.models import AuditLog
from corecms_auth.infrastructure.db.session import session_scope
from corecms_auth.shared.logging import logger

_REDACTED_KEYS = ("password", "token", "salt", "hash", "cookie", "secret")


class AuditAction(str, Enum):
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    REGISTER = "register"
    ACCOUNT_DELETED = "account_deleted"


@dataclass(slots=True, frozen=True)
class AuditEvent:
    action: AuditAction
    success: bool
    user_id: str | None = None
    ip_address: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def describe(self) -> str:
        text = (
            f"AUDIT: {self.action.value} | user_id={self.user_id} | "
            f"ip={self.ip_address} | success={self.success}"
        )
        return f"{text} | details={self.details}" if self.details else text


def redact_details(details: dict[str, Any] | None) -> dict[str, Any]:
    return {
        key: "***REDACTED***" if any(word in key.lower() for word in _REDACTED_KEYS) else value
        for key, value in (details or {}).items()
    }


def _persist(event: AuditEvent) -> None:
    try:
        with session_scope() as session:
            session.add(
                AuditLog(
                    timestamp=event.timestamp,
                    action=event.action.value,
                    user_id=event.user_id,
                    ip_address=event.ip_address,
                    success=event.success,
                    details_json=json.dumps(event.details, default=str) if event.details else None,
                )
            )
    except SQLAlchemyError as exc:
        logger.warning(f"audit: store failed action={event.action.value} error={type(exc).__name__}")


def audit_log(
    action: AuditAction,
    *,
    success: bool = True,
    user_id: str | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditEvent:
    event = AuditEvent(
        action=action,
        success=success,
        user_id=user_id,
        ip_address=ip_address,
        details=redact_details(details),
    )
    if success:
        logger.info(event.describe())
    else:
        logger.warning(event.describe())
    _persist(event)
    return event


__all__ = ["AuditAction", "AuditEvent", "audit_log", "redact_details"]
