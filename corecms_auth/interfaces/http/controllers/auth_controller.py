# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from corecms_auth.application.services.session_engine import SessionEngine
from corecms_auth.application.use_cases.users.register_user import RegisterUserUseCase
from corecms_auth.domain.users.entities import User, UserIdentity
from corecms_auth.domain.users.exceptions import InvalidCredentialsError, StorageFailureError
from corecms_auth.domain.users.repositories import IpResolver
from corecms_auth.infrastructure.audit import AuditAction, audit_log
from corecms_auth.interfaces.http.auth_required import auth_required, current_identity
from corecms_auth.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    IdentityDTO,
    LoginRequestDTO,
    RegisterRequestDTO,
)
from corecms_auth.interfaces.http.exchange import bind_exchange, current_exchange
from corecms_auth.shared.errors.validation import raise_validation_error
from corecms_auth.shared.logging import logger
from corecms_auth.utils.asyncio_utils import run_async


class AuthController:
    def __init__(
        self,
        *,
        engine: SessionEngine[UserIdentity],
        register_use_case: RegisterUserUseCase,
        ip_resolver: IpResolver,
    ) -> None:
        self._engine = engine
        self._register_use_case = register_use_case
        self._ip_resolver = ip_resolver

    def _client_ip(self) -> str:
        return self._ip_resolver.resolve(current_exchange())

    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user = run_async(
            self._register_use_case.execute(dto.username, dto.password, current_exchange())
        )

        audit_log(
            AuditAction.REGISTER,
            user_id=str(user.id),
            ip_address=self._client_ip(),
            details={"username": dto.username},
            success=True,
        )
        logger.info(f"auth.register: ok user_id={user.id}")
        return jsonify(AuthSuccessDTO().model_dump()), 200

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        if current_identity(self._engine) is not None:
            # already logged in, no need to issue another token
            return jsonify(AuthSuccessDTO().model_dump()), 200

        ip_address = self._client_ip()
        if not run_async(self._engine.login(dto.username, dto.password, current_exchange())):
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"username": dto.username},
                success=False,
            )
            raise InvalidCredentialsError()

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            ip_address=ip_address,
            details={"username": dto.username},
            success=True,
        )
        logger.info(f"auth.login: ok username={dto.username}")
        return jsonify(AuthSuccessDTO().model_dump()), 200

    def logout(self) -> tuple[Response, int]:
        ok = run_async(self._engine.logout(current_exchange()))
        g.pop("identity", None)

        audit_log(AuditAction.LOGOUT, ip_address=self._client_ip(), success=ok)
        logger.info(f"auth.logout: ok={ok}")
        return jsonify(AuthSuccessDTO(ok=ok).model_dump()), 200

    def me(self) -> tuple[Response, int]:
        identity: UserIdentity = g.identity
        payload = IdentityDTO(
            id=str(identity.id),
            username=identity.username,
            access_level=identity.access_level,
        )
        return jsonify(payload.model_dump()), 200

    def delete_account(self) -> tuple[Response, int]:
        identity: UserIdentity = g.identity
        user = User(
            id=identity.id,
            username=identity.username,
            password_salt=identity.password_salt,
            password_hash=identity.password_hash,
            access_level=identity.access_level,
        )
        if not run_async(self._engine.delete_user(user)):
            raise StorageFailureError("user.delete")

        run_async(self._engine.logout(current_exchange()))
        g.pop("identity", None)

        audit_log(
            AuditAction.ACCOUNT_DELETED,
            user_id=str(identity.id),
            ip_address=self._client_ip(),
            success=True,
        )
        return jsonify(AuthSuccessDTO().model_dump()), 200

    def as_blueprint(self) -> Blueprint:
        require = auth_required(self._engine)
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bind_exchange(bp)
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["DELETE"])
        bp.add_url_rule("/me", view_func=require(self.me), methods=["GET"])
        bp.add_url_rule("/account", view_func=require(self.delete_account), methods=["DELETE"])
        return bp
