# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from corecms_auth.shared.errors.base import DomainError, InfrastructureError


class UserAlreadyExistsError(DomainError):
    code = "user_already_exists"
    status = HTTPStatus.CONFLICT


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class InvalidUserStateError(DomainError):
    """A session was requested for a user the store never persisted."""

    code = "invalid_user_state"
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class TokenInvalidError(DomainError):
    code = "token_invalid"
    status = HTTPStatus.UNAUTHORIZED

    def __init__(self, reason: str) -> None:
        super().__init__(context={"reason": reason})
        self.reason = reason


class StorageFailureError(InfrastructureError):
    code = "storage_failure"
    status = HTTPStatus.SERVICE_UNAVAILABLE

    def __init__(self, operation: str) -> None:
        super().__init__(context={"operation": operation})
        self.operation = operation
