"""Pydantic schemas for page-time validation.

Page-time maps cross the boundary between the ledger and whatever store
holds them; these schemas reject malformed pages and seconds before they
reach the ledger.
"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import InvalidPageTimeError


class PageTimeEntry(BaseModel):
    """Seconds spent on a single page."""

    page_number: int = Field(..., ge=1, description="1-based page number")
    seconds: float = Field(
        ..., ge=0, allow_inf_nan=False, description="Accumulated seconds on the page"
    )

    @field_validator("page_number", "seconds", mode="before")
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        """Reject booleans, which would otherwise coerce to 0/1."""
        if isinstance(v, bool):
            raise ValueError("boolean is not a valid number")
        return v


class DocumentSummary(BaseModel):
    """Totals for one document's ledger."""

    document_id: str
    pages_timed: int = Field(0, ge=0)
    total_seconds: float = Field(0.0, ge=0)
    last_updated: Optional[str] = None


def validate_page_times(raw: Optional[Mapping[Any, Any]]) -> dict[int, float]:
    """Validate a page -> seconds mapping.

    Keys may be ints or numeric strings (as produced by JSON stores).

    Args:
        raw: Mapping to validate; None is treated as empty

    Returns:
        A plain dict with int keys and float values

    Raises:
        InvalidPageTimeError: If any page or seconds value is invalid
    """
    if not raw:
        return {}

    pages: dict[int, float] = {}
    for key, value in raw.items():
        try:
            entry = PageTimeEntry(page_number=key, seconds=value)
        except ValidationError as e:
            raise InvalidPageTimeError(
                f"Invalid page time {key!r}: {value!r} ({e.error_count()} error(s))"
            ) from e
        pages[entry.page_number] = pages.get(entry.page_number, 0.0) + entry.seconds
    return pages
