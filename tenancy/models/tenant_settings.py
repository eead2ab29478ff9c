"""Per-tenant settings row, created once at provisioning."""

import uuid

from sqlmodel import Field, SQLModel

from tenancy.models.base import TimestampMixin, new_uuid


class TenantSettings(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenant_settings"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, unique=True, index=True)

    currency: str = Field(default="BRL", max_length=3)
    timezone: str = Field(default="America/Sao_Paulo", max_length=64)
    default_tip_percent: int = Field(default=10, ge=0, le=100)
    require_open_register: bool = Field(default=True)
