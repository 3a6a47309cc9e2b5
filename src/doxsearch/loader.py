"""Load generated search tables from text, files, or a ``search/`` directory.

The generator writes one bucket file per section and leading character
(``all_0.js`` … ``all_11.js``, ``classes_3.js``, ``files_0.js``). A directory
load concatenates every bucket of one section in numeric order. Any malformed
bucket fails the whole load.

Examples
--------
>>> from pathlib import Path
>>> from doxsearch.loader import load
>>> store = load(Path("docs/html/search"))  # doctest: +SKIP
>>> [r.label for r in store.lookup("setQuery")]  # doctest: +SKIP
['setQuery', 'setQueryText']
"""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING, Final

from doxsearch.codec import parse_search_data
from doxsearch.store import SearchIndexStore
from doxsearch_common.errors import IndexSourceError, MalformedIndexError
from doxsearch_common.fs import read_text
from doxsearch_common.logging import get_logger, with_fields
from doxsearch_common.observability import MetricsProvider, observe_duration

if TYPE_CHECKING:
    from pathlib import Path

    from doxsearch.records import SearchIndexRecord

__all__ = [
    "bucket_files",
    "load",
    "load_directory",
    "load_file",
    "load_text",
]

logger = get_logger(__name__)

_SECTION_RE: Final = re.compile(r"[a-z]+")


def load_text(
    text: str,
    *,
    source: str | None = None,
    metrics: MetricsProvider | None = None,
) -> SearchIndexStore:
    """Parse one table's text into a store.

    Parameters
    ----------
    text : str
        Contents of a bucket file.
    source : str | None, optional
        Name reported in errors and logs. Defaults to None.
    metrics : MetricsProvider | None, optional
        Metrics sink. Defaults to the process-wide provider.

    Returns
    -------
    SearchIndexStore
        Store holding every record of the table.

    Raises
    ------
    MalformedIndexError
        If the text is not a well-formed table.
    """
    provider = metrics or MetricsProvider.default()
    with (
        with_fields(logger, operation="load", source=source or "<text>") as log,
        observe_duration(provider, "load", component="loader"),
    ):
        records = _parse(text, source=source)
        store = SearchIndexStore(records, source=source)
        log.log_success("Search table loaded", record_count=len(store))
        return store


def _parse(text: str, *, source: str | None) -> tuple[SearchIndexRecord, ...]:
    try:
        return parse_search_data(text)
    except MalformedIndexError as exc:
        exc.source = source
        if source is not None:
            exc.context["source"] = source
        logger.log_failure(
            "Rejected malformed search table",
            exception=exc,
            operation="load",
            source=source or "<text>",
        )
        raise


def load_file(path: Path, *, metrics: MetricsProvider | None = None) -> SearchIndexStore:
    """Load a single bucket file.

    Raises
    ------
    IndexSourceError
        If the file is missing or cannot be read or decoded.
    MalformedIndexError
        If the file is not a well-formed table.
    """
    text = _read(path)
    return load_text(text, source=str(path), metrics=metrics)


def _read(path: Path) -> str:
    try:
        return read_text(path)
    except FileNotFoundError as exc:
        msg = f"Search table not found: {path}"
        raise IndexSourceError(msg, cause=exc, context={"path": str(path)}) from exc
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Search table unreadable: {path}: {exc}"
        raise IndexSourceError(msg, cause=exc, context={"path": str(path)}) from exc


def bucket_files(directory: Path, section: str = "all") -> list[Path]:
    """Return ``<section>_<n>.js`` files in ``directory`` sorted by bucket number.

    Raises
    ------
    ValueError
        If ``section`` is not a lowercase section name such as ``all``.
    """
    if _SECTION_RE.fullmatch(section) is None:
        msg = f"invalid section name {section!r}"
        raise ValueError(msg)
    pattern = re.compile(rf"{section}_(\d+)\.js")
    numbered: list[tuple[int, Path]] = []
    for candidate in directory.iterdir():
        match = pattern.fullmatch(candidate.name)
        if match is not None and candidate.is_file():
            numbered.append((int(match.group(1)), candidate))
    return [path for _, path in sorted(numbered)]


def load_directory(
    directory: Path,
    section: str = "all",
    *,
    metrics: MetricsProvider | None = None,
) -> SearchIndexStore:
    """Load and concatenate every bucket of ``section`` in ``directory``.

    Parameters
    ----------
    directory : Path
        Generated ``search/`` directory.
    section : str, optional
        Section prefix (``all``, ``classes``, ``functions``, ``files``...).
        Defaults to ``"all"``.
    metrics : MetricsProvider | None, optional
        Metrics sink. Defaults to the process-wide provider.

    Returns
    -------
    SearchIndexStore
        Store with the records of every bucket, bucket by bucket.

    Raises
    ------
    IndexSourceError
        If the directory is missing or holds no bucket for ``section``.
    MalformedIndexError
        If any bucket is malformed; the error names the offending file.
    """
    if not directory.is_dir():
        msg = f"Search directory not found: {directory}"
        raise IndexSourceError(msg, context={"path": str(directory)})
    try:
        files = bucket_files(directory, section)
    except ValueError as exc:
        raise IndexSourceError(str(exc), cause=exc, context={"section": section}) from exc
    if not files:
        msg = f"No '{section}_*.js' search tables in {directory}"
        raise IndexSourceError(msg, context={"path": str(directory), "section": section})

    provider = metrics or MetricsProvider.default()
    started = time.monotonic()
    records: list[SearchIndexRecord] = []
    for path in files:
        records.extend(load_file(path, metrics=provider))
    store = SearchIndexStore(records, source=str(directory))
    logger.log_success(
        "Search directory loaded",
        operation="load_directory",
        duration_ms=(time.monotonic() - started) * 1000,
        section=section,
        file_count=len(files),
        record_count=len(store),
    )
    return store


def load(source: Path, *, section: str = "all") -> SearchIndexStore:
    """Load a table file or a whole ``search/`` directory.

    Raises
    ------
    IndexSourceError
        If ``source`` does not exist or has no tables.
    MalformedIndexError
        If any table is malformed.
    """
    if source.is_dir():
        return load_directory(source, section)
    return load_file(source)
