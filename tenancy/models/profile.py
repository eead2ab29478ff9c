"""Profile model — binds an identity-provider principal to a tenant."""

import uuid

from sqlmodel import Field, SQLModel

from tenancy.models.base import TimestampMixin


class Profile(TimestampMixin, SQLModel, table=True):
    __tablename__ = "profiles"

    # Same id as the principal in the identity provider
    id: uuid.UUID = Field(primary_key=True)
    email: str | None = Field(default=None, max_length=320, index=True)
    full_name: str = Field(default="", max_length=255)

    # Unset until onboarding completes; never reassigned afterwards
    tenant_id: uuid.UUID | None = Field(default=None, foreign_key="tenants.id", index=True)
    role: str | None = Field(default=None, max_length=32)
    is_active: bool = Field(default=True)

    @property
    def onboarding_pending(self) -> bool:
        return self.tenant_id is None


# ── Pydantic schemas ─────────────────────────────────────────

class ProfileRead(SQLModel):
    id: uuid.UUID
    email: str | None
    full_name: str
    tenant_id: uuid.UUID | None
    role: str | None
    is_active: bool
