"""Profile upserts shared by onboarding and invitation acceptance."""

import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.errors import profile_already_bound
from tenancy.core.security import Principal
from tenancy.models.base import utcnow
from tenancy.models.profile import Profile
from tenancy.services.store import atomic, store_step

logger = logging.getLogger(__name__)


async def upsert_profile(
    session: AsyncSession, principal: Principal, **fields: Any
) -> Profile:
    """Insert or update the principal's profile.

    The email reported by the identity provider is copied over when known.
    """
    if principal.email is not None:
        fields.setdefault("email", principal.email)
    profile = await session.get(Profile, principal.id)
    if profile is None:
        profile = Profile(id=principal.id, **fields)
    else:
        for field, value in fields.items():
            setattr(profile, field, value)
        profile.updated_at = utcnow()
    session.add(profile)
    return profile


def ensure_bindable(profile: Profile | None, tenant_id: uuid.UUID | None = None) -> None:
    """Reject binding a profile that already belongs to another tenant.

    With ``tenant_id`` unset any existing binding is rejected.
    """
    if profile is None or profile.tenant_id is None:
        return
    if tenant_id is None or profile.tenant_id != tenant_id:
        raise profile_already_bound(profile.tenant_id)


async def ensure_profile(
    session: AsyncSession,
    principal: Principal,
    full_name: str | None = None,
) -> Profile:
    """Make sure the principal has a profile row and return it.

    New profiles start active. Existing profiles keep their tenant, role
    and active flag; only email and (when given) full name are refreshed.
    """
    async with atomic(session):
        async with store_step(session, "upsert_profile"):
            existing = await session.get(Profile, principal.id)
            fields: dict[str, Any] = {}
            if full_name:
                fields["full_name"] = full_name
            if existing is None:
                fields["is_active"] = True
                logger.info("Creating profile for principal %s", principal.id)
            profile = await upsert_profile(session, principal, **fields)

    async with store_step(session, "read_profile"):
        await session.refresh(profile)
    return profile
