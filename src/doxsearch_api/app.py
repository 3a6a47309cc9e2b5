"""Lookup service endpoints over a generated search table.

The table is loaded once, on first use, from ``DOXSEARCH_INDEX__PATH`` and
shared read-only by every request. All errors are returned as RFC 9457
Problem Details.

Examples
--------
>>> from fastapi.testclient import TestClient
>>> from doxsearch_api.app import app, get_store
>>> app.dependency_overrides[get_store] = lambda: store  # doctest: +SKIP
>>> TestClient(app).get("/lookup", params={"prefix": "search"}).json()  # doctest: +SKIP
{'prefix': 'search', 'results': [...]}
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Final

from fastapi import Depends, FastAPI, HTTPException, Query
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response

from doxsearch.loader import load
from doxsearch.store import SearchIndexStore
from doxsearch_api.schemas import HealthResponse, LookupResponse, LookupResult
from doxsearch_common.errors import DoxsearchError, IndexNotLoadedError, InvalidQueryError
from doxsearch_common.errors.http import register_problem_details_handler
from doxsearch_common.logging import get_logger, set_correlation_id, setup_logging, with_fields
from doxsearch_common.observability import MetricsProvider, observe_duration
from doxsearch_common.settings import DoxsearchSettings, load_settings

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "CorrelationIDMiddleware",
    "app",
    "get_settings",
    "get_store",
    "healthz",
    "load_configured_store",
    "lookup",
    "metrics_endpoint",
    "store_health",
]

logger = get_logger(__name__)
metrics = MetricsProvider.default()


@lru_cache(maxsize=1)
def get_settings() -> DoxsearchSettings:
    """Return the process settings, read from the environment once."""
    return load_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Configure JSON logging at the configured level before serving."""
    settings = get_settings()
    setup_logging(settings.observability.log_level)
    logger.info(
        "Lookup service starting",
        extra={"operation": "startup", "log_level": settings.observability.log_level},
    )
    yield


app = FastAPI(title="doxsearch Lookup API", version="0.1.0", lifespan=lifespan)

register_problem_details_handler(app)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Echo ``X-Correlation-ID`` or generate one, and bind it to the request's logs."""

    HEADER_NAME: Final[str] = "X-Correlation-ID"

    async def dispatch(
        self,
        request: StarletteRequest,
        call_next: Callable[[StarletteRequest], Awaitable[Response]],
    ) -> Response:
        header_name = self.HEADER_NAME
        correlation_id = request.headers.get(header_name)
        if not correlation_id:
            correlation_id = str(uuid.uuid4())
        set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            set_correlation_id(None)
        response.headers[header_name] = correlation_id
        return response


app.add_middleware(CorrelationIDMiddleware)


@lru_cache(maxsize=4)
def load_configured_store(path: Path | None, section: str) -> SearchIndexStore:
    """Load the search table at ``path`` on first use and keep it.

    A failed load is not cached; the next call retries it.

    Parameters
    ----------
    path : Path | None
        Table file or ``search/`` directory, as configured.
    section : str
        Table section to read from a directory.

    Returns
    -------
    SearchIndexStore
        The loaded table.

    Raises
    ------
    IndexNotLoadedError
        If no table path is configured.
    IndexSourceError
        If the configured path is missing or holds no tables.
    MalformedIndexError
        If a table is malformed.
    """
    if path is None:
        msg = "No search table configured; set DOXSEARCH_INDEX__PATH"
        raise IndexNotLoadedError(msg)
    store = load(path, section=section)
    logger.info(
        "Search table ready",
        extra={"operation": "startup", "source": store.source, "record_count": len(store)},
    )
    return store


SettingsDependency = Annotated[DoxsearchSettings, Depends(get_settings)]


def get_store(settings: SettingsDependency) -> SearchIndexStore:
    """Return the search table named by the settings."""
    return load_configured_store(settings.index.path, settings.index.section)


def store_health(settings: SettingsDependency) -> HealthResponse:
    """Describe the configured table, reporting load failures instead of raising."""
    try:
        store = load_configured_store(settings.index.path, settings.index.section)
    except DoxsearchError as exc:
        logger.warning(
            "Search table unavailable",
            extra={"operation": "healthz", "error_code": exc.code.value},
        )
        return HealthResponse(status="unloaded", error=exc.code.value)
    return HealthResponse(status="ok", records=len(store), source=store.source)


StoreDependency = Annotated[SearchIndexStore, Depends(get_store)]
HealthDependency = Annotated[HealthResponse, Depends(store_health)]


@app.get("/healthz", response_model=HealthResponse)
def healthz(health: HealthDependency) -> HealthResponse:
    """Report whether a search table is loaded and how many records it holds."""
    return health


def _resolve_limit(limit: int | None, settings: DoxsearchSettings) -> int:
    if limit is None:
        return settings.api.default_limit
    if not 1 <= limit <= settings.api.max_limit:
        msg = f"limit must be between 1 and {settings.api.max_limit}, got {limit}"
        raise InvalidQueryError(msg, context={"limit": limit})
    return limit


@app.get("/lookup", response_model=LookupResponse)
def lookup(
    store: StoreDependency,
    settings: SettingsDependency,
    prefix: Annotated[str, Query(description="Text typed by the user")] = "",
    limit: Annotated[int | None, Query(description="Maximum number of results")] = None,
) -> LookupResponse:
    """Return records whose key starts with ``prefix``, in generation order.

    Parameters
    ----------
    store : SearchIndexStore
        Loaded search table.
    settings : DoxsearchSettings
        Runtime settings providing the default and maximum ``limit``.
    prefix : str, optional
        Text typed by the user. Defaults to ``""`` (every record).
    limit : int | None, optional
        Maximum number of results. Defaults to ``api.default_limit``.

    Returns
    -------
    LookupResponse
        The prefix and its matching records.

    Raises
    ------
    InvalidQueryError
        If ``limit`` is outside ``1..api.max_limit``.
    """
    effective_limit = _resolve_limit(limit, settings)
    with (
        with_fields(logger, operation="lookup", prefix=prefix) as log,
        observe_duration(metrics, "lookup", component="api"),
    ):
        records = store.lookup(prefix, limit=effective_limit)
        log.info("Lookup served", extra={"result_count": len(records)})
    return LookupResponse(
        prefix=prefix,
        results=[LookupResult.from_record(record) for record in records],
    )


@app.get("/metrics")
def metrics_endpoint(settings: SettingsDependency) -> Response:
    """Expose collected metrics in Prometheus text format."""
    if not settings.observability.metrics_enabled:
        raise HTTPException(status_code=404, detail="Metrics are disabled")
    return Response(content=metrics.render(), media_type=CONTENT_TYPE_LATEST)
