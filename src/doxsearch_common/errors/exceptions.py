"""Typed exception hierarchy with Problem Details support.

All doxsearch exceptions inherit from DoxsearchError, which provides
structured fields and RFC 9457 Problem Details mapping.

Examples
--------
>>> from doxsearch_common.errors import ErrorCode, MalformedIndexError
>>> try:
...     raise MalformedIndexError("references list is empty", position=3)
... except MalformedIndexError as e:
...     assert e.code == ErrorCode.MALFORMED_INDEX
...     assert e.http_status == 422
...     details = e.to_problem_details(instance="/lookup")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from doxsearch_common.errors.codes import ErrorCode, get_type_uri
from doxsearch_common.problem_details import build_problem_details

if TYPE_CHECKING:
    from doxsearch_common.problem_details import ProblemDetails
    from doxsearch_common.problem_details import JsonValue

__all__ = [
    "DoxsearchError",
    "DoxsearchErrorConfig",
    "IndexNotLoadedError",
    "IndexSourceError",
    "InvalidQueryError",
    "MalformedIndexError",
    "SerializationError",
    "SettingsError",
]


@dataclass(slots=True)
class DoxsearchErrorConfig:
    """Configuration options used when instantiating :class:`DoxsearchError`."""

    code: ErrorCode = ErrorCode.RUNTIME_ERROR
    http_status: int = 500
    log_level: int = logging.ERROR
    cause: Exception | None = None
    context: Mapping[str, object] | None = None


class DoxsearchError(Exception):
    """Base exception for all doxsearch errors.

    Provides structured fields (code, http_status, log_level, context) and
    RFC 9457 Problem Details mapping.

    Parameters
    ----------
    message : str
        Human-readable error message.
    config : DoxsearchErrorConfig | None, optional
        Structured configuration for the error. Defaults to None, meaning
        ``RUNTIME_ERROR`` / 500.

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Error code enum value.
    http_status : int
        HTTP status code for Problem Details responses.
    log_level : int
        Logging level for error logging.
    context : dict[str, object]
        Additional context dictionary for error details.
    """

    def __init__(self, message: str, *, config: DoxsearchErrorConfig | None = None) -> None:
        resolved = config or DoxsearchErrorConfig()
        super().__init__(message)
        self.message = message
        self.code = resolved.code
        self.http_status = resolved.http_status
        self.log_level = resolved.log_level
        self.context: dict[str, object] = dict(resolved.context) if resolved.context else {}
        if resolved.cause is not None:
            self.__cause__ = resolved.cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetails:
        """Convert to RFC 9457 Problem Details JSON.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the specific occurrence. Defaults to None.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetails
            Validated Problem Details payload. Context entries are emitted
            under ``extensions``.
        """
        return build_problem_details(
            get_type_uri(self.code),
            title or self.__class__.__name__,
            self.http_status,
            self.message,
            instance or "urn:doxsearch:error",
            code=self.code.value,
            extensions=cast("Mapping[str, JsonValue] | None", self.context or None),
        )

    def __str__(self) -> str:
        """Return ``"<Class>[<code>]: <message>"`` plus the cause type when chained."""
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class MalformedIndexError(DoxsearchError):
    """Search table does not parse into well-formed ``(id, label, references)`` triples.

    Raised by the loaders; a partially loaded table is never returned. Uses
    error code MALFORMED_INDEX and HTTP status 422.

    Parameters
    ----------
    message : str
        Reason the input was rejected.
    position : int | None, optional
        Zero-based record position where parsing failed, when known.
    source : str | None, optional
        File the table was read from, when known.
    cause : Exception | None, optional
        Underlying parser exception. Defaults to None.
    """

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        source: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        context: dict[str, object] = {}
        if position is not None:
            context["position"] = position
        if source is not None:
            context["source"] = source
        super().__init__(
            message,
            config=DoxsearchErrorConfig(
                code=ErrorCode.MALFORMED_INDEX,
                http_status=422,
                cause=cause,
                context=context,
            ),
        )
        self.position = position
        self.source = source


class IndexSourceError(DoxsearchError):
    """Search table file or directory is missing or unreadable (503)."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            config=DoxsearchErrorConfig(
                code=ErrorCode.INDEX_SOURCE_UNAVAILABLE,
                http_status=503,
                cause=cause,
                context=context,
            ),
        )


class IndexNotLoadedError(DoxsearchError):
    """No search table is configured for the service (503)."""

    def __init__(self, message: str, context: Mapping[str, object] | None = None) -> None:
        super().__init__(
            message,
            config=DoxsearchErrorConfig(
                code=ErrorCode.INDEX_NOT_LOADED,
                http_status=503,
                log_level=logging.WARNING,
                context=context,
            ),
        )


class InvalidQueryError(DoxsearchError):
    """Lookup request carried an invalid parameter (400)."""

    def __init__(self, message: str, context: Mapping[str, object] | None = None) -> None:
        super().__init__(
            message,
            config=DoxsearchErrorConfig(
                code=ErrorCode.INVALID_QUERY,
                http_status=400,
                log_level=logging.INFO,
                context=context,
            ),
        )


class SerializationError(DoxsearchError):
    """Store could not be written back to a table file (500)."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            config=DoxsearchErrorConfig(
                code=ErrorCode.SERIALIZATION_ERROR,
                http_status=500,
                cause=cause,
                context=context,
            ),
        )


class SettingsError(DoxsearchError):
    """Settings failed validation (500)."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            config=DoxsearchErrorConfig(
                code=ErrorCode.CONFIGURATION_ERROR,
                http_status=500,
                cause=cause,
                context=context,
            ),
        )
