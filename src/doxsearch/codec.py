"""Reader and writer for the generator's ``var searchData=[...]`` tables.

Each bucket file holds one JavaScript array literal::

    var searchData=
    [
      ['searchresult',['SearchResult',['../classmlclient_1_1_search_result.html',1,'mlclient']]],
      ...
    ];

Every entry is ``[id, [label, ref, ref, ...]]`` and every ref is
``[target, frame_flag, scope]``. Strings are single-quoted; the generator only
escapes backslashes and single quotes, and HTML-escapes the text itself.

:func:`parse_search_data` validates the whole table before returning anything;
:func:`dump_search_data` reproduces the generator's layout byte for byte.
"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING, Final

from doxsearch.records import Reference, SearchIndexRecord
from doxsearch_common.errors import MalformedIndexError

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = [
    "SEARCH_DATA_HEADER",
    "dump_search_data",
    "parse_search_data",
    "parse_search_entries",
]

SEARCH_DATA_HEADER: Final[str] = "var searchData=\n"

_ASSIGNMENT_RE: Final = re.compile(
    r"\A\s*var\s+searchData\s*=\s*(?P<body>\[.*\])\s*;?\s*\Z", re.S
)


def _describe(value: object) -> str:
    return type(value).__name__


def _parse_reference(raw: object, *, position: int, index: int) -> Reference:
    if not isinstance(raw, list) or len(raw) != 3:
        msg = f"record {position}: reference {index} must be a [target, flag, scope] triple"
        raise MalformedIndexError(msg, position=position)
    target, flag, scope = raw
    if not isinstance(target, str) or not isinstance(scope, str):
        msg = (
            f"record {position}: reference {index} target and scope must be strings, "
            f"got {_describe(target)} and {_describe(scope)}"
        )
        raise MalformedIndexError(msg, position=position)
    if not isinstance(flag, int) or isinstance(flag, bool) or flag not in (0, 1):
        msg = f"record {position}: reference {index} frame flag must be 0 or 1, got {flag!r}"
        raise MalformedIndexError(msg, position=position)
    return Reference(target=target, scope_label=scope, parent_frame=bool(flag))


def _parse_entry(raw: object, *, position: int) -> SearchIndexRecord:
    if not isinstance(raw, list) or len(raw) != 2:
        msg = f"record {position}: expected [id, [label, references...]]"
        raise MalformedIndexError(msg, position=position)
    key, body = raw
    if not isinstance(key, str):
        msg = f"record {position}: id must be a string, got {_describe(key)}"
        raise MalformedIndexError(msg, position=position)
    if not isinstance(body, list) or not body:
        msg = f"record {position} ({key!r}): expected [label, references...]"
        raise MalformedIndexError(msg, position=position)
    label, *refs = body
    if not isinstance(label, str):
        msg = f"record {position} ({key!r}): label must be a string, got {_describe(label)}"
        raise MalformedIndexError(msg, position=position)
    if not refs:
        msg = f"record {position} ({key!r}): references list is empty"
        raise MalformedIndexError(msg, position=position)
    references = tuple(
        _parse_reference(ref, position=position, index=index) for index, ref in enumerate(refs)
    )
    return SearchIndexRecord(id=key, label=label, references=references)


def parse_search_entries(entries: object) -> tuple[SearchIndexRecord, ...]:
    """Validate already-decoded entries and convert them to records.

    Parameters
    ----------
    entries : object
        Decoded array-of-arrays, e.g. from :func:`json.loads` on an exported
        table.

    Returns
    -------
    tuple[SearchIndexRecord, ...]
        Records in input order.

    Raises
    ------
    MalformedIndexError
        If ``entries`` is not a list of well-formed entries.
    """
    if not isinstance(entries, list):
        msg = f"search data must be an array of entries, got {_describe(entries)}"
        raise MalformedIndexError(msg)
    return tuple(_parse_entry(raw, position=position) for position, raw in enumerate(entries))


def parse_search_data(text: str) -> tuple[SearchIndexRecord, ...]:
    """Parse the text of one generated bucket file.

    Parameters
    ----------
    text : str
        Full file contents, including the ``var searchData=`` assignment.

    Returns
    -------
    tuple[SearchIndexRecord, ...]
        Records in generation order.

    Raises
    ------
    MalformedIndexError
        If the assignment is missing, the literal does not parse, or any entry
        has the wrong shape. Nothing is returned for partially valid input.

    Examples
    --------
    >>> records = parse_search_data(
    ...     "var searchData=\\n[\\n  ['search',['search',['../a.html#x',1,'ns::A::search()']]]\\n];"
    ... )
    >>> records[0].references[0].anchor
    'x'
    """
    match = _ASSIGNMENT_RE.match(text)
    if match is None:
        msg = "input is not a 'var searchData=[...]' assignment"
        raise MalformedIndexError(msg)
    try:
        entries: object = ast.literal_eval(match.group("body"))
    except (SyntaxError, ValueError, TypeError, MemoryError, RecursionError) as exc:
        line = getattr(exc, "lineno", None)
        where = f" near line {line}" if line is not None else ""
        msg = f"search data literal does not parse{where}: {exc.__class__.__name__}"
        raise MalformedIndexError(msg, cause=exc) from exc
    return parse_search_entries(entries)


def _quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _dump_entry(record: SearchIndexRecord) -> str:
    refs = ",".join(
        f"[{_quote(ref.target)},{int(ref.parent_frame)},{_quote(ref.scope_label)}]"
        for ref in record.references
    )
    return f"  [{_quote(record.id)},[{_quote(record.label)},{refs}]]"


def dump_search_data(records: Iterable[SearchIndexRecord]) -> str:
    """Render records in the generator's bucket file layout.

    The result has no trailing newline after the closing ``];``, matching the
    generator.

    Parameters
    ----------
    records : Iterable[SearchIndexRecord]
        Records in the order they should appear.

    Returns
    -------
    str
        File contents.
    """
    lines = [_dump_entry(record) for record in records]
    body = ",\n".join(lines)
    if body:
        body += "\n"
    return f"{SEARCH_DATA_HEADER}[\n{body}];"
