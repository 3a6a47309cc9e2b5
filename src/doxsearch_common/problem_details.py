"""RFC 9457 Problem Details helpers with schema validation.

Payloads are validated against :data:`PROBLEM_DETAILS_SCHEMA` (JSON Schema
2020-12) before they leave the package.

Examples
--------
>>> from doxsearch_common.problem_details import build_problem_details
>>> problem = build_problem_details(
...     problem_type="https://doxsearch.dev/problems/malformed-index",
...     title="MalformedIndexError",
...     status=422,
...     detail="record 3: references list is empty",
...     instance="urn:doxsearch:load",
...     extensions={"position": 3},
... )
>>> problem["status"]
422
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, TypedDict, cast

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping


__all__ = [
    "JsonValue",
    "PROBLEM_DETAILS_SCHEMA",
    "ProblemDetails",
    "ProblemDetailsValidationError",
    "build_problem_details",
    "validate_problem_details",
]


PROBLEM_DETAILS_SCHEMA: Final[dict[str, object]] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://doxsearch.dev/schema/common/problem_details.json",
    "title": "Problem Details",
    "type": "object",
    "required": ["type", "title", "status", "detail", "instance"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "title": {"type": "string", "minLength": 1},
        "status": {"type": "integer", "minimum": 100, "maximum": 599},
        "detail": {"type": "string"},
        "instance": {"type": "string", "minLength": 1},
        "code": {"type": "string", "pattern": "^[a-z0-9]+(-[a-z0-9]+)*$"},
        "extensions": {"type": "object"},
    },
    "additionalProperties": False,
}

Draft202012Validator.check_schema(PROBLEM_DETAILS_SCHEMA)
_VALIDATOR: Final = Draft202012Validator(PROBLEM_DETAILS_SCHEMA)

type JsonPrimitive = str | int | float | bool | None
"""Scalar JSON values."""

type JsonValue = JsonPrimitive | dict[str, JsonValue] | list[JsonValue]
"""Any JSON-serializable value, used for Problem Details extensions."""


class ProblemDetails(TypedDict, total=False):
    """TypedDict for RFC 9457 Problem Details responses."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str
    extensions: dict[str, JsonValue]


class ProblemDetailsValidationError(Exception):
    """Raised when a Problem Details payload fails schema validation.

    Parameters
    ----------
    message : str
        Human-readable error message describing the validation failure.
    validation_errors : list[str] | None, optional
        Specific validation error messages from the schema validator.
    """

    def __init__(self, message: str, validation_errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.validation_errors = validation_errors or []


def validate_problem_details(payload: Mapping[str, object]) -> None:
    """Validate a Problem Details payload against the canonical schema.

    Parameters
    ----------
    payload : Mapping[str, object]
        Problem Details payload to validate.

    Raises
    ------
    ProblemDetailsValidationError
        If the payload fails schema validation.
    """
    try:
        _VALIDATOR.validate(dict(payload))
    except ValidationError as exc:
        errors = [exc.message]
        if exc.absolute_path:
            path_str = ".".join(str(p) for p in exc.absolute_path)
            errors.append(f"at path: {path_str}")
        msg = f"Problem Details validation failed: {'; '.join(errors)}"
        raise ProblemDetailsValidationError(msg, validation_errors=errors) from exc


def build_problem_details(
    problem_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    *,
    code: str | None = None,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetails:
    """Build and validate an RFC 9457 Problem Details payload.

    Parameters
    ----------
    problem_type : str
        Problem type URI.
    title : str
        Short summary of the problem type.
    status : int
        HTTP status code.
    detail : str
        Human-readable explanation of this occurrence.
    instance : str
        URI identifying this occurrence.
    code : str | None, optional
        Stable kebab-case error code. Defaults to None.
    extensions : Mapping[str, JsonValue] | None, optional
        Additional context, emitted under ``extensions``. Defaults to None.

    Returns
    -------
    ProblemDetails
        Validated payload.

    Raises
    ------
    TypeError
        If ``status`` is not an int.
    """
    if not isinstance(status, int) or isinstance(status, bool):
        msg = "build_problem_details() expected 'status' to be an int"
        raise TypeError(msg)
    payload: dict[str, object] = {
        "type": problem_type,
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    if code is not None:
        payload["code"] = code
    if extensions:
        payload["extensions"] = dict(extensions)

    validate_problem_details(payload)

    return cast("ProblemDetails", payload)
