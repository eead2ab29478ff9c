"""Invitation lifecycle: issue a single-use token, then consume it.

An invitation is ``pending`` until it is either accepted (stored, terminal)
or its expiry passes (derived, terminal). Acceptance is claimed with a
conditional update on ``accepted_at IS NULL`` so two concurrent requests
with the same token cannot both succeed.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenancy.core.config import get_settings
from tenancy.core.errors import Conflict, Forbidden, Gone, NotFound, ValidationFailed
from tenancy.core.permissions import INVITER_ROLES, ROLES, WAITER
from tenancy.core.security import Principal, generate_invitation_token
from tenancy.models.audit_event import AuditEventType
from tenancy.models.base import utcnow
from tenancy.models.invitation import (
    Invitation,
    InvitationAccepted,
    InvitationCreated,
    InvitationStatus,
)
from tenancy.models.profile import Profile
from tenancy.models.tip_recipient import TipRecipient, TipRecipientKind
from tenancy.services.audit import record_event
from tenancy.services.profiles import ensure_bindable, upsert_profile
from tenancy.services.store import atomic, store_step

logger = logging.getLogger(__name__)

MIN_VALIDITY_DAYS = 1
MIN_TOKEN_LENGTH = 20
WAITER_FALLBACK_NAME = "Waiter"


def clamp_validity_days(value: Any) -> float:
    """Default non-numeric or non-finite input, then clamp to the allowed range."""
    settings = get_settings()
    if isinstance(value, bool) or not isinstance(value, int | float):
        value = settings.invitation_default_days
    elif isinstance(value, float) and not math.isfinite(value):
        value = settings.invitation_default_days
    # Clamp before converting: arbitrarily large ints do not fit a float
    return float(max(MIN_VALIDITY_DAYS, min(settings.invitation_max_days, value)))


def _already_used() -> Conflict:
    return Conflict("This invitation has already been used", code="INVITATION_ALREADY_USED")


def _created(invitation: Invitation, now: datetime) -> InvitationCreated:
    return InvitationCreated(
        id=invitation.id,
        tenant_id=invitation.tenant_id,
        email=invitation.email,
        role=invitation.role,
        status=invitation.status_at(now),
        expires_at=invitation.expires_at,
        accepted_at=invitation.accepted_at,
        created_at=invitation.created_at,
        token=invitation.token,
    )


# ── Issue ─────────────────────────────────────────────────────

async def require_inviter(session: AsyncSession, principal: Principal) -> Profile:
    """Return the caller's profile if it may issue invitations.

    Only active owners and managers of a tenant may invite.
    """
    async with store_step(session, "load_inviter"):
        inviter = await session.get(Profile, principal.id)

    if inviter is None or inviter.tenant_id is None:
        raise Forbidden("Caller has not joined a tenant yet", code="ONBOARDING_PENDING")
    if not inviter.is_active:
        raise Forbidden("Caller is inactive", code="INACTIVE_PRINCIPAL")
    if inviter.role not in INVITER_ROLES:
        raise Forbidden("Only owners and managers can invite users")
    return inviter


async def create_invitation(
    session: AsyncSession,
    inviter: Profile,
    email: str,
    role: str,
    validity_days: Any = None,
) -> InvitationCreated:
    """Invite ``email`` to the inviter's tenant with ``role``.

    ``inviter`` must come from :func:`require_inviter`. The token is
    included in the result and is not retrievable afterwards.
    """
    if role not in ROLES:
        raise ValidationFailed("Unknown role", details={"role": role, "allowed": list(ROLES)})

    tenant_id = inviter.tenant_id
    inviter_id = inviter.id
    days = clamp_validity_days(validity_days)
    now = utcnow()

    async with atomic(session):
        async with store_step(session, "create_invitation"):
            invitation = Invitation(
                tenant_id=tenant_id,
                email=email,
                role=role,
                token=generate_invitation_token(),
                expires_at=now + timedelta(days=days),
                created_by=inviter_id,
            )
            session.add(invitation)

    result = _created(invitation, now)
    logger.info("Invitation %s issued for tenant %s (role %s)", result.id, tenant_id, role)

    await record_event(
        session,
        tenant_id=tenant_id,
        event_type=AuditEventType.INVITATION_CREATED,
        actor_id=inviter_id,
        payload={"email": email, "role": role, "expires_at": result.expires_at.isoformat()},
        origin_type="invitation",
        origin_id=result.id,
    )
    return result


# ── Consume ───────────────────────────────────────────────────

async def accept_invitation(
    session: AsyncSession,
    principal: Principal,
    token: str,
) -> InvitationAccepted:
    """Bind ``principal`` to the invitation's tenant with its role."""
    if len(token) < MIN_TOKEN_LENGTH:
        raise ValidationFailed("Invalid invitation token")

    async with store_step(session, "load_invitation"):
        found = await session.execute(
            select(Invitation)
            .where(Invitation.token == token)
            .execution_options(populate_existing=True)
        )
        invitation = found.scalar_one_or_none()

    if invitation is None:
        raise NotFound("Invitation not found", code="INVITATION_NOT_FOUND")

    now = utcnow()
    state = invitation.status_at(now)
    if state is InvitationStatus.ACCEPTED:
        raise _already_used()
    if state is InvitationStatus.EXPIRED:
        raise Gone("This invitation has expired", code="INVITATION_EXPIRED")

    if principal.email is not None and invitation.email.lower() != principal.email.lower():
        raise Forbidden(
            "This invitation was issued for another email",
            code="EMAIL_MISMATCH",
            details={"invitation_email": invitation.email, "principal_email": principal.email},
        )

    invitation_id = invitation.id
    tenant_id = invitation.tenant_id
    role = invitation.role

    async with store_step(session, "load_profile"):
        profile = await session.get(Profile, principal.id)
    ensure_bindable(profile, tenant_id)

    async with atomic(session):
        async with store_step(session, "bind_profile"):
            await upsert_profile(
                session,
                principal,
                tenant_id=tenant_id,
                role=role,
                is_active=True,
            )

        async with store_step(session, "mark_accepted"):
            claimed = await session.execute(
                update(Invitation)
                .where(
                    Invitation.id == invitation_id,
                    Invitation.accepted_at.is_(None),  # type: ignore[union-attr]
                )
                .values(accepted_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                raise _already_used()

        if role == WAITER:
            async with store_step(session, "create_tip_recipient"):
                existing = await session.execute(
                    select(TipRecipient.id).where(
                        TipRecipient.tenant_id == tenant_id,
                        TipRecipient.profile_id == principal.id,
                    )
                )
                if existing.first() is None:
                    session.add(TipRecipient(
                        tenant_id=tenant_id,
                        kind=TipRecipientKind.PERSON,
                        name=principal.email or WAITER_FALLBACK_NAME,
                        profile_id=principal.id,
                    ))

    logger.info("Invitation %s accepted by %s", invitation_id, principal.id)

    await record_event(
        session,
        tenant_id=tenant_id,
        event_type=AuditEventType.INVITATION_ACCEPTED,
        actor_id=principal.id,
        payload={"role": role, "email": principal.email},
        origin_type="invitation",
        origin_id=invitation_id,
    )
    return InvitationAccepted(tenant_id=tenant_id, role=role)
