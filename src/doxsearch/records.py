"""Immutable value types for generated search table entries.

A :class:`SearchIndexRecord` maps one search key to every documentation
location the generator resolved it to. Records are frozen; a table is rebuilt
wholesale on every documentation build and never edited in place.
"""

from __future__ import annotations

import html
from dataclasses import dataclass

from doxsearch_common.errors import MalformedIndexError

__all__ = [
    "Reference",
    "SearchIndexRecord",
]


@dataclass(frozen=True, slots=True)
class Reference:
    """One documentation location for a symbol.

    ``target`` and ``scope_label`` hold the generator's text verbatim, HTML
    entities included, so a table can be written back unchanged.
    """

    target: str
    """Page path plus optional in-page anchor, e.g. ``../classfoo.html#a1b2``."""
    scope_label: str
    """Fully qualified owning scope, e.g. ``mlclient::SearchResult::SearchResult()``."""
    parent_frame: bool = True
    """Whether the UI opens the link in the parent frame (generator flag ``1``)."""

    @property
    def page(self) -> str:
        """Target without its ``#anchor`` part."""
        return self.target.partition("#")[0]

    @property
    def anchor(self) -> str:
        """In-page anchor without the ``#``, or ``""`` for whole-page links."""
        return self.target.partition("#")[2]

    @property
    def display_scope(self) -> str:
        """Scope label with HTML entities decoded."""
        return html.unescape(self.scope_label)


@dataclass(frozen=True, slots=True)
class SearchIndexRecord:
    """A searchable symbol and the documentation locations it resolves to.

    Raises
    ------
    MalformedIndexError
        If ``references`` is empty or any field has the wrong type.
    """

    id: str
    """Search key in the generator's encoded form (``searchdescription_2ehpp``)."""
    label: str
    """Display name with original casing (``SearchDescription.hpp``)."""
    references: tuple[Reference, ...]
    """Documentation locations in generation order; never empty."""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            msg = f"record id must be a string, got {type(self.id).__name__}"
            raise MalformedIndexError(msg)
        if not isinstance(self.label, str):
            msg = f"record {self.id!r}: label must be a string, got {type(self.label).__name__}"
            raise MalformedIndexError(msg)
        if isinstance(self.references, list):
            object.__setattr__(self, "references", tuple(self.references))
        elif not isinstance(self.references, tuple):
            msg = (
                f"record {self.id!r}: references must be a list, "
                f"got {type(self.references).__name__}"
            )
            raise MalformedIndexError(msg)
        if not self.references:
            msg = f"record {self.id!r}: references list is empty"
            raise MalformedIndexError(msg)
        for ref in self.references:
            if not isinstance(ref, Reference):
                msg = f"record {self.id!r}: expected Reference, got {type(ref).__name__}"
                raise MalformedIndexError(msg)

    @property
    def display_label(self) -> str:
        """Label with HTML entities decoded."""
        return html.unescape(self.label)
