"""Cash register model — each tenant starts with one per business line."""

import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel

from tenancy.models.base import TimestampMixin, new_uuid


class CashRegisterKind(StrEnum):
    BAR = "bar"
    CAR_WASH = "car-wash"


class CashRegister(TimestampMixin, SQLModel, table=True):
    __tablename__ = "cash_registers"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    kind: CashRegisterKind = Field(nullable=False)
    is_active: bool = Field(default=True)


# Registers every new tenant is provisioned with.
DEFAULT_CASH_REGISTERS: tuple[tuple[str, CashRegisterKind], ...] = (
    ("Bar Register", CashRegisterKind.BAR),
    ("Car Wash Register", CashRegisterKind.CAR_WASH),
)


# ── Pydantic schemas ─────────────────────────────────────────

class CashRegisterRead(SQLModel):
    id: uuid.UUID
    name: str
    kind: CashRegisterKind
