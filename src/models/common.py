"""Shared types and base models used across the scorecard domain models."""

from datetime import datetime, timezone
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]

#: A single cell value as handed out by a table accessor.
Scalar = int | float | str | None


class ScorecardBase(BaseModel):
    """Base model with common configuration for all scorecard Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
