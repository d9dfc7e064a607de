# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COOKIE_NAME = "CoreCMSAuthToken"
DEFAULT_SESSION_LIFETIME = timedelta(days=7)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///app.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env", validate_by_name=True, extra="ignore"
    )


class AuthConfig(BaseSettings):
    """Read-only settings captured by a session engine at construction."""

    cookie_name: str = Field(DEFAULT_COOKIE_NAME, min_length=1, alias="AUTH_COOKIE_NAME")
    session_lifetime: timedelta = Field(DEFAULT_SESSION_LIFETIME, alias="SESSION_LIFETIME")

    # Cookie attributes
    cookie_secure: bool = Field(True, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")

    # Client IP resolution
    trust_forwarded_for: bool = Field(True, alias="TRUST_FORWARDED_FOR")
    forwarded_first_only: bool = Field(False, alias="FORWARDED_FIRST_ONLY")

    model_config = SettingsConfigDict(
        env_file=".env", validate_by_name=True, extra="ignore", frozen=True
    )

    @field_validator("session_lifetime", mode="after")
    @classmethod
    def _positive_lifetime(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("session lifetime must be positive")
        return value

    @field_validator(
        "cookie_secure", "trust_forwarded_for", "forwarded_first_only", mode="before"
    )
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _parse_bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _auth_config_factory() -> AuthConfig:
    return AuthConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    auth: AuthConfig = Field(default_factory=_auth_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY must be a strong random value in production.\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if not self.auth.cookie_secure:
            print(
                "\n⚠️  PRODUCTION SECURITY WARNING: COOKIE_SECURE is disabled, "
                "session cookies will travel over plain HTTP.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "DEFAULT_COOKIE_NAME",
    "DEFAULT_SESSION_LIFETIME",
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "load_config",
]
