"""Shared error responses for the HTTP layer."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from ..errors import BridgeError


def error_response(
    error: str,
    exc: Exception | None = None,
    status_code: int | None = None,
    **extra,
) -> JSONResponse:
    """JSON error body with the original error message as ``detail``."""
    if status_code is None:
        status_code = 500
        if isinstance(exc, BridgeError) and exc.status_code and 400 <= exc.status_code < 600:
            status_code = exc.status_code

    body = {"error": error}
    if exc is not None:
        body["detail"] = exc.message if isinstance(exc, BridgeError) else str(exc)
    body.update(extra)
    return JSONResponse(body, status_code=status_code)
