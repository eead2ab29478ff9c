"""Shared base fields for all models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

# Naive UTC storage. Set per column: newer sqlmodel releases map a bare
# ``datetime`` to an offset-aware type that rejects naive values.
NaiveUTCDateTime = DateTime(timezone=False)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class CreatedAtMixin(SQLModel):
    """Creation timestamp for append-only tables."""

    created_at: datetime = Field(default_factory=utcnow, sa_type=NaiveUTCDateTime, nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Created / updated timestamps injected into every mutable table."""

    updated_at: datetime = Field(default_factory=utcnow, sa_type=NaiveUTCDateTime, nullable=False)
