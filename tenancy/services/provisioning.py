"""Tenant provisioning — create a tenant and everything it needs to operate.

Steps, in order:

1. check the slug is free
2. insert the tenant (status ``trial``)
3. insert its settings row
4. insert the default cash registers
5. bind the caller's profile as ``owner``
6. insert the shared tip pool
7. seed the role → permission matrix from the catalog
8. record a ``CONFIG_CHANGED`` audit event (best-effort)

Steps 2–7 share one transaction: a failure at any of them leaves no rows
behind, so a tenant is either fully usable or absent.
"""

import logging

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenancy.core.errors import slug_unavailable
from tenancy.core.permissions import OWNER, catalog_grants
from tenancy.core.security import Principal
from tenancy.models.audit_event import AuditEventType
from tenancy.models.cash_register import DEFAULT_CASH_REGISTERS, CashRegister, CashRegisterRead
from tenancy.models.profile import Profile
from tenancy.models.role_permission import RolePermission
from tenancy.models.tenant import Tenant, TenantRead, TenantStatus
from tenancy.models.tenant_settings import TenantSettings
from tenancy.models.tip_recipient import (
    SHIFT_POOL_NAME,
    TipRecipient,
    TipRecipientKind,
    TipRecipientRead,
)
from tenancy.services.audit import record_event
from tenancy.services.profiles import ensure_bindable, upsert_profile
from tenancy.services.store import atomic, store_step

logger = logging.getLogger(__name__)


class ProvisionedTenant(BaseModel):
    """Everything the caller needs to render the new workspace."""
    tenant: TenantRead
    cash_registers: list[CashRegisterRead]
    tip_pool: TipRecipientRead


async def provision_tenant(
    session: AsyncSession,
    principal: Principal,
    tenant_name: str,
    slug: str,
    owner_full_name: str,
) -> ProvisionedTenant:
    """Create a tenant owned by ``principal``.

    Inputs are expected to be validated already (trimmed, slug lowercased).
    Raises Conflict when the slug is taken or the caller already belongs
    to a tenant, StoreFailure when a read or write fails.
    """
    async with store_step(session, "check_slug"):
        existing = await session.execute(select(Tenant.id).where(Tenant.slug == slug))
        taken = existing.first() is not None
        profile = await session.get(Profile, principal.id)
    if taken:
        raise slug_unavailable(slug)
    ensure_bindable(profile)

    async with atomic(session):
        async with store_step(session, "create_tenant", on_conflict=lambda: slug_unavailable(slug)):
            tenant = Tenant(name=tenant_name, slug=slug, status=TenantStatus.TRIAL)
            session.add(tenant)

        async with store_step(session, "create_settings"):
            session.add(TenantSettings(tenant_id=tenant.id))

        async with store_step(session, "create_cash_registers"):
            registers = [
                CashRegister(tenant_id=tenant.id, name=name, kind=kind)
                for name, kind in DEFAULT_CASH_REGISTERS
            ]
            session.add_all(registers)

        async with store_step(session, "bind_owner_profile"):
            await upsert_profile(
                session,
                principal,
                tenant_id=tenant.id,
                full_name=owner_full_name,
                role=OWNER,
                is_active=True,
            )

        async with store_step(session, "create_tip_pool"):
            pool = TipRecipient(
                tenant_id=tenant.id,
                kind=TipRecipientKind.POOL,
                name=SHIFT_POOL_NAME,
                profile_id=None,
            )
            session.add(pool)

        async with store_step(session, "seed_permissions"):
            session.add_all([
                RolePermission(tenant_id=tenant.id, role=role, permission_key=key, allowed=True)
                for role, key in catalog_grants()
            ])

    # Snapshot before the audit write, which may roll the session back
    result = ProvisionedTenant(
        tenant=TenantRead.model_validate(tenant),
        cash_registers=[CashRegisterRead.model_validate(r) for r in registers],
        tip_pool=TipRecipientRead.model_validate(pool),
    )
    logger.info("Provisioned tenant %s (%s) for owner %s", tenant.id, slug, principal.id)

    await record_event(
        session,
        tenant_id=result.tenant.id,
        event_type=AuditEventType.CONFIG_CHANGED,
        actor_id=principal.id,
        payload={"action": "create_tenant", "slug": slug},
        origin_type="onboarding",
    )
    return result
