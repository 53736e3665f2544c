"""Shared error response helpers."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse


def error_response(
    message: str,
    status_code: int = 401,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {"message": message}
    if details:
        payload["details"] = details
    return JSONResponse(payload, status_code=status_code)
