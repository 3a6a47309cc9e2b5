"""Error code registry and type URIs for Problem Details.

Codes and URIs are frozen after initial release to maintain backward
compatibility with clients that branch on them.

Examples
--------
>>> from doxsearch_common.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.MALFORMED_INDEX)
'https://doxsearch.dev/problems/malformed-index'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]


BASE_TYPE_URI: Final[str] = "https://doxsearch.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes for doxsearch exceptions.

    Attributes
    ----------
    MALFORMED_INDEX
        The search table does not parse into ``(id, label, references)`` triples.
    INDEX_SOURCE_UNAVAILABLE
        The search table file or directory cannot be found or read.
    INDEX_NOT_LOADED
        No search table has been configured or loaded yet.
    INVALID_QUERY
        A lookup request carried an invalid parameter.
    CONFIGURATION_ERROR
        Settings failed validation.
    SERIALIZATION_ERROR
        A store could not be written back to disk.
    RUNTIME_ERROR
        Unclassified runtime failure.
    """

    MALFORMED_INDEX = "malformed-index"
    INDEX_SOURCE_UNAVAILABLE = "index-source-unavailable"
    INDEX_NOT_LOADED = "index-not-loaded"
    INVALID_QUERY = "invalid-query"
    CONFIGURATION_ERROR = "configuration-error"
    SERIALIZATION_ERROR = "serialization-error"
    RUNTIME_ERROR = "runtime-error"


def get_type_uri(code: ErrorCode) -> str:
    """Return the Problem Details ``type`` URI for ``code``.

    Parameters
    ----------
    code : ErrorCode
        Error code to resolve.

    Returns
    -------
    str
        Absolute URI under :data:`BASE_TYPE_URI`.
    """
    return f"{BASE_TYPE_URI}/{code.value}"
