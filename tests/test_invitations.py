"""Invitation issue / accept tests."""

import json
import re
import uuid
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select

from tenancy.models import (
    AuditEvent,
    AuditEventType,
    Invitation,
    InvitationStatus,
    Profile,
    TipRecipient,
    TipRecipientKind,
)
from tenancy.models.base import utcnow
from tenancy.services.invitations import clamp_validity_days


async def _bootstrap(client: AsyncClient, make_principal, slug: str = "riverside"):
    """Helper: provision a tenant and return (owner_headers, tenant)."""
    _, headers = make_principal(f"owner@{slug}.com")
    resp = await client.post("/v1/onboarding/tenant", json={
        "tenant_name": f"{slug} Pub",
        "slug": slug,
        "owner_full_name": "Alex Doe",
    }, headers=headers)
    assert resp.status_code == 200, resp.text
    return headers, resp.json()["data"]["tenant"]


async def _invite(client: AsyncClient, headers, email="new@x.com", role="waiter", **extra):
    resp = await client.post(
        "/v1/invitations", json={"email": email, "role": role, **extra}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def _add_member(session, tenant: dict, role: str, is_active: bool = True) -> uuid.UUID:
    """Insert a profile bound to ``tenant`` directly; returns its id."""
    profile = Profile(
        id=uuid.uuid4(),
        email=f"{role}@member.com",
        tenant_id=uuid.UUID(tenant["id"]),
        role=role,
        is_active=is_active,
    )
    session.add(profile)
    await session.commit()
    return profile.id


def _validity(invitation: dict) -> timedelta:
    return (
        datetime.fromisoformat(invitation["expires_at"])
        - datetime.fromisoformat(invitation["created_at"])
    )


async def _invitation_count(session) -> int:
    result = await session.execute(select(func.count()).select_from(Invitation))
    return result.scalar_one()


# ── Issue ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_owner_creates_invitation(client: AsyncClient, session, make_principal):
    headers, tenant = await _bootstrap(client, make_principal)

    data = await _invite(client, headers, email="  New@X.com ", role="Waiter")

    assert re.fullmatch(r"[0-9a-f]{64}", data["token"])
    assert data["email"] == "new@x.com"
    assert data["role"] == "waiter"
    assert data["status"] == "pending"
    assert data["tenant_id"] == tenant["id"]
    assert data["accepted_at"] is None

    result = await session.execute(
        select(AuditEvent).where(AuditEvent.event_type == AuditEventType.INVITATION_CREATED)
    )
    event = result.scalar_one()
    assert event.origin_type == "invitation"
    assert str(event.origin_id) == data["id"]
    assert json.loads(event.payload)["email"] == "new@x.com"


@pytest.mark.asyncio
async def test_manager_can_invite(client: AsyncClient, session, make_principal):
    _, tenant = await _bootstrap(client, make_principal)
    manager_id = await _add_member(session, tenant, "manager")
    _, headers = make_principal("manager@member.com", principal_id=manager_id)

    data = await _invite(client, headers, role="employee")
    assert data["role"] == "employee"


@pytest.mark.asyncio
async def test_role_defaults_to_employee(client: AsyncClient, make_principal):
    headers, _ = await _bootstrap(client, make_principal)
    resp = await client.post("/v1/invitations", json={"email": "new@x.com"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "employee"


@pytest.mark.asyncio
@pytest.mark.parametrize(("requested", "expected_days"), [
    (0, 1),
    (90, 30),
    (-5, 1),
    (12, 12),
    (2.5, 2.5),
    ("10", 7),
    (True, 7),
    (None, 7),
])
async def test_validity_days_clamped(client: AsyncClient, make_principal, requested, expected_days):
    headers, _ = await _bootstrap(client, make_principal)
    data = await _invite(client, headers, validity_days=requested)
    assert abs(_validity(data) - timedelta(days=expected_days)) < timedelta(seconds=5)


@pytest.mark.asyncio
async def test_validity_days_absent_defaults_to_seven(client: AsyncClient, make_principal):
    headers, _ = await _bootstrap(client, make_principal)
    data = await _invite(client, headers)
    assert abs(_validity(data) - timedelta(days=7)) < timedelta(seconds=5)


@pytest.mark.asyncio
async def test_employee_cannot_invite(client: AsyncClient, session, make_principal):
    _, tenant = await _bootstrap(client, make_principal)
    employee_id = await _add_member(session, tenant, "employee")
    _, headers = make_principal("employee@member.com", principal_id=employee_id)

    resp = await client.post(
        "/v1/invitations", json={"email": "new@x.com", "role": "waiter"}, headers=headers
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"
    assert await _invitation_count(session) == 0


@pytest.mark.asyncio
async def test_inactive_owner_cannot_invite(client: AsyncClient, session, make_principal):
    _, tenant = await _bootstrap(client, make_principal)
    owner_id = await _add_member(session, tenant, "owner", is_active=False)
    _, headers = make_principal("owner@member.com", principal_id=owner_id)

    resp = await client.post("/v1/invitations", json={"email": "new@x.com"}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "INACTIVE_PRINCIPAL"
    assert await _invitation_count(session) == 0


@pytest.mark.asyncio
async def test_caller_without_tenant_cannot_invite(client: AsyncClient, make_principal):
    _, headers = make_principal("drifter@example.com")

    resp = await client.post("/v1/invitations", json={"email": "new@x.com"}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "ONBOARDING_PENDING"

    # Same answer once a tenant-less profile exists
    resp = await client.post("/v1/onboarding/profile", json={}, headers=headers)
    assert resp.status_code == 200
    resp = await client.post("/v1/invitations", json={"email": "new@x.com"}, headers=headers)
    assert resp.json()["error"]["code"] == "ONBOARDING_PENDING"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"email": "not-an-email"},
    {"email": "a@b.c"},
    {"email": "new@x.com", "role": "bartender"},
    {"role": "waiter"},
])
async def test_invalid_invitation_input(client: AsyncClient, session, make_principal, body):
    headers, _ = await _bootstrap(client, make_principal)
    resp = await client.post("/v1/invitations", json=body, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_FAILED"
    assert await _invitation_count(session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"email": "bad"},
    {"email": "new@x.com", "role": "bartender"},
    {},
])
async def test_employee_forbidden_whatever_the_body(client: AsyncClient, session, make_principal, body):
    _, tenant = await _bootstrap(client, make_principal)
    employee_id = await _add_member(session, tenant, "employee")
    _, headers = make_principal("employee@member.com", principal_id=employee_id)

    resp = await client.post("/v1/invitations", json=body, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_caller_without_tenant_gets_onboarding_pending_on_bad_body(
    client: AsyncClient, make_principal
):
    _, headers = make_principal("drifter@example.com")

    resp = await client.post("/v1/invitations", json={"email": "bad"}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "ONBOARDING_PENDING"


@pytest.mark.asyncio
async def test_huge_validity_days_clamped_to_max(client: AsyncClient, make_principal):
    headers, _ = await _bootstrap(client, make_principal)
    data = await _invite(client, headers, validity_days=10**400)
    assert abs(_validity(data) - timedelta(days=30)) < timedelta(seconds=5)


@pytest.mark.parametrize(("value", "expected"), [
    (10**400, 30.0),
    (-(10**400), 1.0),
    (float("inf"), 7.0),
    (float("nan"), 7.0),
    (3, 3.0),
])
def test_clamp_validity_days(value, expected):
    assert clamp_validity_days(value) == expected


# ── Accept ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_accept_binds_profile(client: AsyncClient, session, make_principal):
    owner_headers, tenant = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, email="new@x.com", role="employee")
    invitee, headers = make_principal("new@x.com")

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    assert resp.json() == {
        "success": True,
        "data": {"tenant_id": tenant["id"], "role": "employee"},
    }

    profile = await session.get(Profile, invitee.id)
    assert str(profile.tenant_id) == tenant["id"]
    assert profile.role == "employee"
    assert profile.is_active is True
    assert profile.email == "new@x.com"

    stored = (await session.execute(
        select(Invitation).where(Invitation.id == uuid.UUID(invitation["id"]))
    )).scalar_one()
    await session.refresh(stored)
    assert stored.accepted_at is not None
    assert stored.status_at() is InvitationStatus.ACCEPTED

    # Employees get no personal tip recipient
    result = await session.execute(
        select(TipRecipient).where(TipRecipient.profile_id == invitee.id)
    )
    assert result.first() is None

    result = await session.execute(
        select(AuditEvent).where(AuditEvent.event_type == AuditEventType.INVITATION_ACCEPTED)
    )
    event = result.scalar_one()
    assert event.created_by == invitee.id
    assert json.loads(event.payload) == {"role": "employee", "email": "new@x.com"}


@pytest.mark.asyncio
async def test_waiter_gets_a_single_tip_recipient(client: AsyncClient, session, make_principal):
    owner_headers, tenant = await _bootstrap(client, make_principal)
    first = await _invite(client, owner_headers, email="new@x.com", role="waiter")
    second = await _invite(client, owner_headers, email="new@x.com", role="waiter")
    invitee, headers = make_principal("new@x.com")

    for invitation in (first, second):
        resp = await client.post(
            "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
        )
        assert resp.status_code == 200, resp.text

    result = await session.execute(
        select(TipRecipient).where(TipRecipient.profile_id == invitee.id)
    )
    recipients = result.scalars().all()
    assert len(recipients) == 1
    assert recipients[0].kind == TipRecipientKind.PERSON
    assert recipients[0].name == "new@x.com"
    assert str(recipients[0].tenant_id) == tenant["id"]
    assert recipients[0].is_active is True


@pytest.mark.asyncio
async def test_second_accept_conflicts(client: AsyncClient, session, make_principal):
    owner_headers, _ = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, role="waiter")
    invitee, headers = make_principal("new@x.com")

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 200

    profile = await session.get(Profile, invitee.id)
    profile.role = "manager"
    session.add(profile)
    await session.commit()

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "INVITATION_ALREADY_USED"

    await session.refresh(profile)
    assert profile.role == "manager"


@pytest.mark.asyncio
async def test_lost_acceptance_race_rolls_back(client: AsyncClient, session, make_principal):
    """If another request claimed the token first, nothing is written."""
    owner_headers, _ = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, role="waiter")
    _, winner_headers = make_principal("new@x.com")
    loser, loser_headers = make_principal("new@x.com")

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=winner_headers
    )
    assert resp.status_code == 200

    # Simulate the loser having read the row before the winner committed
    with patch.object(Invitation, "status_at", return_value=InvitationStatus.PENDING):
        resp = await client.post(
            "/v1/invitations/accept", json={"token": invitation["token"]}, headers=loser_headers
        )

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "INVITATION_ALREADY_USED"
    assert await session.get(Profile, loser.id) is None
    result = await session.execute(
        select(TipRecipient).where(TipRecipient.profile_id == loser.id)
    )
    assert result.first() is None


@pytest.mark.asyncio
async def test_expired_invitation_gone(client: AsyncClient, session, make_principal):
    owner_headers, _ = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers)
    invitee, headers = make_principal("new@x.com")

    stored = (await session.execute(
        select(Invitation).where(Invitation.id == uuid.UUID(invitation["id"]))
    )).scalar_one()
    stored.expires_at = utcnow() - timedelta(seconds=1)
    session.add(stored)
    await session.commit()

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 410
    assert resp.json()["error"]["code"] == "INVITATION_EXPIRED"
    assert await session.get(Profile, invitee.id) is None


@pytest.mark.asyncio
async def test_unknown_token_not_found(client: AsyncClient, make_principal):
    _, headers = make_principal("new@x.com")
    resp = await client.post("/v1/invitations/accept", json={"token": "a" * 64}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"token": "short"}, {"token": "   " + "a" * 10 + "   "}])
async def test_malformed_token_rejected(client: AsyncClient, make_principal, body):
    _, headers = make_principal("new@x.com")
    resp = await client.post("/v1/invitations/accept", json=body, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_FAILED"


@pytest.mark.asyncio
async def test_email_mismatch_forbidden(client: AsyncClient, session, make_principal):
    owner_headers, _ = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, email="new@x.com")
    intruder, headers = make_principal("other@x.com")

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 403
    error = resp.json()["error"]
    assert error["code"] == "EMAIL_MISMATCH"
    assert error["details"] == {
        "invitation_email": "new@x.com",
        "principal_email": "other@x.com",
    }
    assert await session.get(Profile, intruder.id) is None


@pytest.mark.asyncio
async def test_email_match_ignores_case(client: AsyncClient, make_principal):
    owner_headers, _ = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, email="new@x.com")
    _, headers = make_principal("NEW@X.com")

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_principal_without_email_can_accept(client: AsyncClient, session, make_principal):
    owner_headers, _ = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, role="waiter")
    invitee, headers = make_principal(None)

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
    )
    assert resp.status_code == 200

    result = await session.execute(
        select(TipRecipient).where(TipRecipient.profile_id == invitee.id)
    )
    assert result.scalar_one().name == "Waiter"


@pytest.mark.asyncio
async def test_member_of_other_tenant_cannot_accept(client: AsyncClient, make_principal):
    owner_headers, _ = await _bootstrap(client, make_principal, slug="riverside")
    invitation = await _invite(client, owner_headers, email="owner@harbour.com")
    other_owner_headers, _ = await _bootstrap(client, make_principal, slug="harbour")

    resp = await client.post(
        "/v1/invitations/accept", json={"token": invitation["token"]}, headers=other_owner_headers
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "PROFILE_ALREADY_BOUND"


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_accept(client: AsyncClient, session, make_principal):
    owner_headers, tenant = await _bootstrap(client, make_principal)
    invitation = await _invite(client, owner_headers, role="employee")
    invitee, headers = make_principal("new@x.com")

    with patch("tenancy.services.audit.AuditEvent", side_effect=RuntimeError("audit down")):
        resp = await client.post(
            "/v1/invitations/accept", json={"token": invitation["token"]}, headers=headers
        )

    assert resp.status_code == 200
    profile = await session.get(Profile, invitee.id)
    assert str(profile.tenant_id) == tenant["id"]


@pytest.mark.asyncio
async def test_get_is_not_allowed(client: AsyncClient, make_principal):
    _, headers = make_principal()
    resp = await client.get("/v1/invitations/accept", headers=headers)
    assert resp.status_code == 405
    assert resp.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
