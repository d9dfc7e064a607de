# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError

_SCALARS = (str, int, float, bool)


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    """Reduce a pydantic error to field paths and error types.

    Input values are never echoed back, so a rejected password cannot leak
    into a response body or a log line.
    """
    errors: list[dict[str, Any]] = []
    for item in exc.errors(include_url=False, include_input=False):
        path = ".".join(str(part) for part in item.get("loc", ()))
        entry: dict[str, Any] = {"field": path or "body", "type": item.get("type", "value_error")}
        if ctx := item.get("ctx"):
            # ctx may hold the raised exception object
            entry["ctx"] = {k: v if isinstance(v, _SCALARS) else str(v) for k, v in ctx.items()}
        errors.append(entry)

    return {
        "fields": sorted({entry["field"] for entry in errors}),
        "errors": errors,
    }


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    raise ValidationError(context=format_pydantic_errors(exc)) from exc


__all__ = ["format_pydantic_errors", "raise_validation_error"]
