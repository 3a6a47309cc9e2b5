"""In-memory store of generated search table records.

The store is built once from a complete table and never mutated, so a single
instance can be shared by any number of concurrent readers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from doxsearch.codec import dump_search_data
from doxsearch.keys import encode_search_id, normalize_key
from doxsearch.records import SearchIndexRecord
from doxsearch_common.errors import MalformedIndexError, SerializationError
from doxsearch_common.fs import atomic_write
from doxsearch_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

__all__ = ["SearchIndexStore"]

logger = get_logger(__name__)


class SearchIndexStore:
    """Ordered, read-only collection of :class:`SearchIndexRecord` values.

    Records keep the order the generator wrote them in. Keys are compared
    after :func:`~doxsearch.keys.normalize_key`; ids may repeat (a class and
    its constructor share one key) and every duplicate is kept.

    Parameters
    ----------
    records : Iterable[SearchIndexRecord]
        Records in generation order.

    Raises
    ------
    MalformedIndexError
        If any element is not a :class:`SearchIndexRecord`.

    Examples
    --------
    >>> from doxsearch.records import Reference, SearchIndexRecord
    >>> record = SearchIndexRecord(
    ...     "searchresult", "SearchResult", (Reference("#ctor", "mlclient::SearchResult"),)
    ... )
    >>> store = SearchIndexStore([record])
    >>> [r.label for r in store.lookup("Search")]
    ['SearchResult']
    >>> store.lookup("searchresulting")
    ()
    """

    __slots__ = ("_keys", "_records", "source")

    def __init__(self, records: Iterable[SearchIndexRecord], *, source: str | None = None) -> None:
        materialized = tuple(records)
        for position, record in enumerate(materialized):
            if not isinstance(record, SearchIndexRecord):
                msg = f"record {position}: expected SearchIndexRecord, got {type(record).__name__}"
                raise MalformedIndexError(msg, position=position, source=source)
        self._records: tuple[SearchIndexRecord, ...] = materialized
        self._keys: tuple[str, ...] = tuple(normalize_key(record.id) for record in materialized)
        self.source = source

    @classmethod
    def from_records(
        cls, records: Iterable[SearchIndexRecord], *, source: str | None = None
    ) -> SearchIndexStore:
        """Build a store from already constructed records."""
        return cls(records, source=source)

    @property
    def records(self) -> tuple[SearchIndexRecord, ...]:
        """All records in generation order."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SearchIndexRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(records={len(self._records)}, source={self.source!r})"

    def lookup(self, prefix: str, limit: int | None = None) -> tuple[SearchIndexRecord, ...]:
        """Return every record whose key starts with ``prefix``.

        The prefix is normalized and encoded the way the search widget encodes
        typed text, so ``"SearchDescription.hpp"`` finds
        ``searchdescription_2ehpp``. A prefix typed in key form matches as is, so
        every prefix of a stored id finds it. An empty prefix matches every record.

        Parameters
        ----------
        prefix : str
            Text typed by the user.
        limit : int | None, optional
            Maximum number of records to return. Defaults to no limit.

        Returns
        -------
        tuple[SearchIndexRecord, ...]
            Matching records in generation order; empty when nothing matches.

        Raises
        ------
        ValueError
            If ``limit`` is negative.
        """
        if limit is not None and limit < 0:
            msg = f"limit must be non-negative, got {limit}"
            raise ValueError(msg)
        # Typed text may already be in key form (``search_result``,
        # ``searchdescription_2e``), so the plain key matches too.
        keys = (normalize_key(prefix), encode_search_id(prefix))
        matches: list[SearchIndexRecord] = []
        for stored, record in zip(self._keys, self._records, strict=True):
            if limit is not None and len(matches) >= limit:
                break
            if stored.startswith(keys):
                matches.append(record)
        return tuple(matches)

    def get(self, key: str) -> tuple[SearchIndexRecord, ...]:
        """Return the records stored under exactly ``key`` (already encoded)."""
        wanted = normalize_key(key)
        return tuple(
            record
            for stored, record in zip(self._keys, self._records, strict=True)
            if stored == wanted
        )

    def save(self, path: Path) -> None:
        """Write the store as a generator-compatible table file, atomically.

        Parameters
        ----------
        path : Path
            Destination file.

        Raises
        ------
        SerializationError
            If the file cannot be written.
        """
        text = dump_search_data(self._records)
        try:
            atomic_write(path, text)
        except OSError as exc:
            msg = f"Failed to write search table to {path}: {exc}"
            raise SerializationError(msg, cause=exc, context={"path": str(path)}) from exc
        logger.info(
            "Search table written",
            extra={
                "operation": "save",
                "path": str(path),
                "record_count": len(self._records),
                "size_bytes": len(text.encode("utf-8")),
            },
        )
