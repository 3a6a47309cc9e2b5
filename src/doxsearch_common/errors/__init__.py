"""Exception hierarchy and Problem Details support.

Examples
--------
>>> from doxsearch_common.errors import DoxsearchError, ErrorCode
>>> error = DoxsearchError("Operation failed")
>>> error.to_problem_details()["type"]
'https://doxsearch.dev/problems/runtime-error'
"""

from __future__ import annotations

from doxsearch_common.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from doxsearch_common.errors.exceptions import (
    DoxsearchError,
    DoxsearchErrorConfig,
    IndexNotLoadedError,
    IndexSourceError,
    InvalidQueryError,
    MalformedIndexError,
    SerializationError,
    SettingsError,
)

__all__ = [
    "BASE_TYPE_URI",
    "DoxsearchError",
    "DoxsearchErrorConfig",
    "ErrorCode",
    "IndexNotLoadedError",
    "IndexSourceError",
    "InvalidQueryError",
    "MalformedIndexError",
    "SerializationError",
    "SettingsError",
    "get_type_uri",
]
