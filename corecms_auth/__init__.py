# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Cookie-based session authentication with IP-pinned, expiring login tokens."""

from corecms_auth.application.services.session_engine import SessionEngine
from corecms_auth.application.services.token_reaper import TokenReaper
from corecms_auth.domain.users.entities import LoginToken, User, UserIdentity
from corecms_auth.shared.config import AuthConfig

__version__ = "0.1.0"

__all__ = [
    "AuthConfig",
    "LoginToken",
    "SessionEngine",
    "TokenReaper",
    "User",
    "UserIdentity",
]
