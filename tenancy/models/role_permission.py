"""Per-tenant copy of the role → permission matrix."""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from tenancy.models.base import TimestampMixin, new_uuid


class RolePermission(TimestampMixin, SQLModel, table=True):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("tenant_id", "role", "permission_key", name="uq_role_permissions_grant"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    role: str = Field(max_length=32, nullable=False)
    permission_key: str = Field(max_length=64, nullable=False)
    allowed: bool = Field(default=True)
