# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import asyncio
import uuid
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from corecms_auth.domain.users.entities import LoginToken, User
from corecms_auth.domain.users.exceptions import StorageFailureError
from corecms_auth.domain.users.repositories import LoginTokenRepository, UserRepository
from corecms_auth.infrastructure.db.models import LoginTokenRecord, UserRecord, as_utc
from corecms_auth.infrastructure.db.session import session_scope
from corecms_auth.shared.logging import logger


def _to_user(row: UserRecord) -> User:
    return User(
        id=UUID(row.id),
        username=row.username,
        password_salt=row.password_salt,
        password_hash=row.password_hash,
        access_level=row.access_level,
    )


def _to_token(row: LoginTokenRecord) -> LoginToken:
    return LoginToken(
        id=UUID(row.id),
        user_id=UUID(row.user_id),
        access_ip=row.access_ip,
        expire_at=as_utc(row.expire_at),
    )


class SqlAlchemyUserRepository(UserRepository):
    """Identity store backed by the ``users`` table.

    Blocking session work runs in the default executor so the calling
    coroutine only suspends. ``create`` assigns ``user.id`` on success.
    """

    async def create(self, user: User) -> bool:
        return await asyncio.to_thread(self._create, user)

    async def delete(self, user: User) -> bool:
        return await asyncio.to_thread(self._delete, user)

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await asyncio.to_thread(self._get_by_id, user_id)

    async def get_by_username(self, username: str) -> User | None:
        return await asyncio.to_thread(self._get_by_username, username)

    def _create(self, user: User) -> bool:
        if user.id is not None:
            logger.warning(f"users.repo: refusing to re-create user_id={user.id}")
            return False
        new_id = uuid.uuid4()
        try:
            with session_scope() as session:
                session.add(
                    UserRecord(
                        id=str(new_id),
                        username=user.username,
                        password_salt=user.password_salt,
                        password_hash=user.password_hash,
                        access_level=user.access_level,
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning(f"users.repo: create failed error={type(exc).__name__}")
            return False
        user.id = new_id
        return True

    def _delete(self, user: User) -> bool:
        if user.id is None:
            return True
        try:
            with session_scope() as session:
                session.query(UserRecord).filter(UserRecord.id == str(user.id)).delete()
        except SQLAlchemyError as exc:
            logger.warning(f"users.repo: delete failed error={type(exc).__name__}")
            return False
        return True

    def _get_by_id(self, user_id: UUID) -> User | None:
        try:
            with session_scope() as session:
                row = session.query(UserRecord).filter(UserRecord.id == str(user_id)).first()
                return _to_user(row) if row else None
        except SQLAlchemyError as exc:
            raise StorageFailureError("user.get_by_id") from exc

    def _get_by_username(self, username: str) -> User | None:
        try:
            with session_scope() as session:
                row = session.query(UserRecord).filter(UserRecord.username == username).first()
                return _to_user(row) if row else None
        except SQLAlchemyError as exc:
            raise StorageFailureError("user.get_by_username") from exc


class SqlAlchemyLoginTokenRepository(LoginTokenRepository):
    async def create(self, token: LoginToken) -> bool:
        return await asyncio.to_thread(self._create, token)

    async def delete(self, token: LoginToken) -> bool:
        return await asyncio.to_thread(self._delete, token)

    async def get_by_id(self, token_id: UUID) -> LoginToken | None:
        return await asyncio.to_thread(self._get_by_id, token_id)

    def _create(self, token: LoginToken) -> bool:
        try:
            with session_scope() as session:
                session.add(
                    LoginTokenRecord(
                        id=str(token.id),
                        user_id=str(token.user_id),
                        access_ip=token.access_ip,
                        expire_at=token.expire_at,
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning(f"tokens.repo: create failed error={type(exc).__name__}")
            return False
        return True

    def _delete(self, token: LoginToken) -> bool:
        try:
            with session_scope() as session:
                session.query(LoginTokenRecord).filter(
                    LoginTokenRecord.id == str(token.id)
                ).delete()
        except SQLAlchemyError as exc:
            logger.warning(f"tokens.repo: delete failed error={type(exc).__name__}")
            return False
        return True

    def _get_by_id(self, token_id: UUID) -> LoginToken | None:
        try:
            with session_scope() as session:
                row = (
                    session.query(LoginTokenRecord)
                    .filter(LoginTokenRecord.id == str(token_id))
                    .first()
                )
                return _to_token(row) if row else None
        except SQLAlchemyError as exc:
            raise StorageFailureError("token.get_by_id") from exc
