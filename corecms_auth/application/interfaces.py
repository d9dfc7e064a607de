# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from corecms_auth.domain.users.entities import LoginToken, UserIdentity

type Clock = Callable[[], datetime]
type IdentityFactory[T] = Callable[[UserIdentity], T]


class ReapPort(Protocol):
    """Accepts invalid tokens for deletion without making the caller wait."""

    def submit(self, token: LoginToken) -> None: ...
