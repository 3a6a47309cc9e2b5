"""HTTP adapters for Problem Details exception handling.

Examples
--------
>>> from fastapi import FastAPI
>>> from doxsearch_common.errors.http import register_problem_details_handler
>>> app = FastAPI()
>>> register_problem_details_handler(app)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse

from doxsearch_common.errors.exceptions import DoxsearchError
from doxsearch_common.logging import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

__all__ = [
    "PROBLEM_JSON",
    "problem_details_response",
    "register_problem_details_handler",
]

logger = get_logger(__name__)

PROBLEM_JSON = "application/problem+json"


def problem_details_response(
    error: DoxsearchError,
    request: Request | None = None,
) -> JSONResponse:
    """Convert a DoxsearchError to an RFC 9457 Problem Details JSONResponse.

    Parameters
    ----------
    error : DoxsearchError
        Exception to convert.
    request : Request | None, optional
        Request used to build the ``instance`` URI. Defaults to None.

    Returns
    -------
    JSONResponse
        Response carrying the error's HTTP status and a
        ``application/problem+json`` body.
    """
    instance = None
    if request is not None:
        instance = str(request.url.path)
        if request.url.query:
            instance += f"?{request.url.query}"

    details = error.to_problem_details(instance=instance)

    logger.log(
        error.log_level,
        "Error: %s",
        error.message,
        exc_info=error.__cause__,
        extra={"operation": "http_error", "error_code": error.code.value},
    )

    return JSONResponse(
        status_code=error.http_status,
        content=dict(details),
        media_type=PROBLEM_JSON,
    )


def register_problem_details_handler(app: FastAPI) -> None:
    """Register a FastAPI exception handler for DoxsearchError."""

    async def _handler(request: Request, exc: Exception) -> JSONResponse:
        if not isinstance(exc, DoxsearchError):  # pragma: no cover - registered for subclass only
            raise exc
        return problem_details_response(exc, request)

    app.add_exception_handler(DoxsearchError, _handler)
