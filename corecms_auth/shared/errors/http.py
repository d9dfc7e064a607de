# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from corecms_auth.shared.config import load_config
from corecms_auth.shared.logging import logger

from .base import AppError


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    return jsonify(error.to_dict()), error.status


def _http_error_code(exc: HTTPException) -> str:
    return (exc.name or "http_error").lower().replace(" ", "_").replace("'", "")


def register_error_handler(app: Flask) -> None:
    """Render every error leaving a view as JSON.

    Application errors keep their code. Werkzeug HTTP errors use a code made
    from their name. Anything else is a bare ``internal_error`` with the
    traceback only in the log.
    """
    debug_mode = load_config().debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        where = f"{request.method} {request.path}"
        if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"app error {exc.code} status={int(exc.status)} on {where}")
        else:
            logger.warning(f"app error {exc.code} status={int(exc.status)} on {where}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        if exc.code is not None and exc.code < HTTPStatus.BAD_REQUEST:
            # routing redirects
            return exc
        status = exc.code or HTTPStatus.INTERNAL_SERVER_ERROR
        return jsonify({"error": _http_error_code(exc)}), status

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        where = f"{request.method} {request.path} user={g.get('user_id')}"
        if debug_mode:
            logger.exception(f"Unhandled exception on {where}")
        else:
            logger.error(f"Unhandled {type(exc).__name__} on {where}")
        return jsonify({"error": "internal_error"}), HTTPStatus.INTERNAL_SERVER_ERROR
