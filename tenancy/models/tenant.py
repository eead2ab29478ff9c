"""Tenant model — top-level isolation boundary."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from tenancy.models.base import TimestampMixin, new_uuid


class TenantStatus(StrEnum):
    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    # Immutable once assigned; the unique index arbitrates concurrent sign-ups
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    status: TenantStatus = Field(default=TenantStatus.TRIAL)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    status: TenantStatus
    created_at: datetime
