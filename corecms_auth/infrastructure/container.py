# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from corecms_auth.application.services.session_engine import SessionEngine
from corecms_auth.application.services.token_reaper import TokenReaper
from corecms_auth.application.use_cases.users.register_user import RegisterUserUseCase
from corecms_auth.domain.users.entities import UserIdentity
from corecms_auth.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyLoginTokenRepository,
    SqlAlchemyUserRepository,
)
from corecms_auth.interfaces.http.controllers.auth_controller import AuthController
from corecms_auth.interfaces.http.cookie_transport import FlaskCookieTransport
from corecms_auth.interfaces.http.ip_resolver import ForwardedIpResolver
from corecms_auth.shared.config import AuthConfig, load_config


class Container:
    def __init__(self, auth_config: AuthConfig | None = None) -> None:
        self._auth_config = auth_config

    @cached_property
    def auth_config(self) -> AuthConfig:
        return self._auth_config or load_config().auth

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def login_token_repository(self) -> SqlAlchemyLoginTokenRepository:
        return SqlAlchemyLoginTokenRepository()

    @cached_property
    def ip_resolver(self) -> ForwardedIpResolver:
        return ForwardedIpResolver.from_config(self.auth_config)

    @cached_property
    def credential_transport(self) -> FlaskCookieTransport:
        return FlaskCookieTransport()

    @cached_property
    def token_reaper(self) -> TokenReaper:
        return TokenReaper(self.login_token_repository)

    @cached_property
    def session_engine(self) -> SessionEngine[UserIdentity]:
        return SessionEngine(
            users=self.user_repository,
            tokens=self.login_token_repository,
            ip_resolver=self.ip_resolver,
            transport=self.credential_transport,
            reaper=self.token_reaper,
            config=self.auth_config,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(users=self.user_repository, engine=self.session_engine)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            engine=self.session_engine,
            register_use_case=self.register_user_use_case,
            ip_resolver=self.ip_resolver,
        )


container = Container()
