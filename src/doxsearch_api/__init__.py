"""HTTP lookup service over a loaded search table."""

from __future__ import annotations

__all__ = ["app", "schemas"]
