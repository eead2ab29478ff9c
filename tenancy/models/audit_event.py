"""AuditEvent model — append-only record of state changes."""

import uuid
from enum import StrEnum

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from tenancy.models.base import CreatedAtMixin, new_uuid


class AuditEventType(StrEnum):
    CONFIG_CHANGED = "CONFIG_CHANGED"
    INVITATION_CREATED = "INVITATION_CREATED"
    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"


class AuditEvent(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "audit_events"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    event_type: AuditEventType = Field(nullable=False)
    origin_type: str | None = Field(default=None, max_length=50)
    origin_id: uuid.UUID | None = Field(default=None)
    payload: str = Field(sa_column=Column(Text, nullable=False))  # JSON object
    created_by: uuid.UUID = Field(nullable=False)
