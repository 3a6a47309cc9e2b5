"""Response models for the lookup API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from doxsearch.records import Reference, SearchIndexRecord

__all__ = [
    "HealthResponse",
    "LookupResponse",
    "LookupResult",
    "ReferenceModel",
]


class ReferenceModel(BaseModel):
    """One documentation location of a lookup result."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    scope_label: str
    """Qualified owning scope as written by the generator."""
    target: str
    """Page path plus optional in-page anchor."""

    @classmethod
    def from_reference(cls, reference: Reference) -> ReferenceModel:
        """Build the wire model from a store reference."""
        return cls(scope_label=reference.scope_label, target=reference.target)


class LookupResult(BaseModel):
    """A matching record with its documentation locations."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    label: str
    references: list[ReferenceModel] = Field(min_length=1)

    @classmethod
    def from_record(cls, record: SearchIndexRecord) -> LookupResult:
        """Build the wire model from a store record."""
        return cls(
            id=record.id,
            label=record.label,
            references=[ReferenceModel.from_reference(ref) for ref in record.references],
        )


class LookupResponse(BaseModel):
    """Lookup envelope; ``results`` keep generation order."""

    model_config = ConfigDict(extra="forbid")

    prefix: str
    results: list[LookupResult] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Service health and the size of the loaded table."""

    model_config = ConfigDict(extra="forbid")

    status: str
    records: int | None = None
    source: str | None = None
    error: str | None = None
