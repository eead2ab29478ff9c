"""Invitation model — single-use, time-limited token to join a tenant."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from tenancy.models.base import NaiveUTCDateTime, TimestampMixin, new_uuid, utcnow


class InvitationStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class Invitation(TimestampMixin, SQLModel, table=True):
    __tablename__ = "invitations"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    email: str = Field(max_length=320, nullable=False, index=True)
    role: str = Field(max_length=32, nullable=False)

    # 64 hex chars; returned to the inviter exactly once, at creation
    token: str = Field(max_length=64, nullable=False, unique=True, index=True)

    expires_at: datetime = Field(sa_type=NaiveUTCDateTime, nullable=False)
    # Set exactly once, by a conditional update, on acceptance
    accepted_at: datetime | None = Field(default=None, sa_type=NaiveUTCDateTime)
    created_by: uuid.UUID = Field(foreign_key="profiles.id", nullable=False)

    def status_at(self, now: datetime | None = None) -> InvitationStatus:
        """Derive the lifecycle state; expiry is never stored."""
        if self.accepted_at is not None:
            return InvitationStatus.ACCEPTED
        if (now or utcnow()) >= self.expires_at:
            return InvitationStatus.EXPIRED
        return InvitationStatus.PENDING


# ── Pydantic schemas ─────────────────────────────────────────

class InvitationRead(SQLModel):
    """Returned on reads. Never includes the token."""
    id: uuid.UUID
    tenant_id: uuid.UUID
    email: str
    role: str
    status: InvitationStatus
    expires_at: datetime
    accepted_at: datetime | None
    created_at: datetime


class InvitationCreated(InvitationRead):
    """Returned exactly once, at creation time, with the token."""
    token: str


class InvitationAccepted(SQLModel):
    tenant_id: uuid.UUID
    role: str
