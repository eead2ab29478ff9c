"""Import all models so SQLModel.metadata picks them up."""

from tenancy.models.audit_event import AuditEvent, AuditEventType
from tenancy.models.cash_register import (
    DEFAULT_CASH_REGISTERS,
    CashRegister,
    CashRegisterKind,
    CashRegisterRead,
)
from tenancy.models.invitation import (
    Invitation,
    InvitationAccepted,
    InvitationCreated,
    InvitationRead,
    InvitationStatus,
)
from tenancy.models.profile import Profile, ProfileRead
from tenancy.models.role_permission import RolePermission
from tenancy.models.tenant import Tenant, TenantRead, TenantStatus
from tenancy.models.tenant_settings import TenantSettings
from tenancy.models.tip_recipient import (
    SHIFT_POOL_NAME,
    TipRecipient,
    TipRecipientKind,
    TipRecipientRead,
)

__all__ = [
    "DEFAULT_CASH_REGISTERS",
    "SHIFT_POOL_NAME",
    "AuditEvent",
    "AuditEventType",
    "CashRegister",
    "CashRegisterKind",
    "CashRegisterRead",
    "Invitation",
    "InvitationAccepted",
    "InvitationCreated",
    "InvitationRead",
    "InvitationStatus",
    "Profile",
    "ProfileRead",
    "RolePermission",
    "Tenant",
    "TenantRead",
    "TenantSettings",
    "TenantStatus",
    "TipRecipient",
    "TipRecipientKind",
    "TipRecipientRead",
]
