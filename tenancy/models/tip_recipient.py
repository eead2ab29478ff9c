"""Tip recipients — the shared shift pool or an individual waiter."""

import uuid
from enum import StrEnum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from tenancy.models.base import TimestampMixin, new_uuid


class TipRecipientKind(StrEnum):
    POOL = "pool"
    PERSON = "person"


class TipRecipient(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tip_recipients"
    __table_args__ = (
        # At most one person recipient per (tenant, profile); pools have no profile
        UniqueConstraint("tenant_id", "profile_id", name="uq_tip_recipients_tenant_profile"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    kind: TipRecipientKind = Field(nullable=False)
    name: str = Field(max_length=255, nullable=False)
    profile_id: uuid.UUID | None = Field(default=None, foreign_key="profiles.id")
    is_active: bool = Field(default=True)


SHIFT_POOL_NAME = "Shift Pool"


# ── Pydantic schemas ─────────────────────────────────────────

class TipRecipientRead(SQLModel):
    id: uuid.UUID
    name: str
    kind: TipRecipientKind
