"""Invitation endpoints — issue and accept tenant invitations."""

from typing import Annotated, Any

from fastapi import APIRouter
from pydantic import BaseModel, StringConstraints, field_validator

from tenancy.api.deps import CurrentPrincipal, Inviter, Session
from tenancy.api.envelope import Envelope, ok
from tenancy.core.permissions import EMPLOYEE, ROLES
from tenancy.models.invitation import InvitationAccepted, InvitationCreated
from tenancy.services.invitations import MIN_TOKEN_LENGTH, accept_invitation, create_invitation

router = APIRouter(prefix="/invitations", tags=["invitations"])


# ── Request schemas ──────────────────────────────────────────

class CreateInvitationRequest(BaseModel):
    email: Annotated[
        str,
        StringConstraints(strip_whitespace=True, to_lower=True, min_length=6, max_length=320),
    ]
    role: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True)] = EMPLOYEE
    # Clamped by the service; anything non-numeric falls back to the default
    validity_days: Any = None

    @field_validator("email")
    @classmethod
    def _has_at_sign(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value: Any) -> Any:
        return EMPLOYEE if value is None else value

    @field_validator("role")
    @classmethod
    def _known_role(cls, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"role must be one of {', '.join(ROLES)}")
        return value


class AcceptInvitationRequest(BaseModel):
    token: Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=MIN_TOKEN_LENGTH, max_length=128),
    ]


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "",
    response_model=Envelope[InvitationCreated],
    summary="Invite someone to the caller's tenant",
)
async def issue_invitation(
    body: CreateInvitationRequest,
    inviter: Inviter,
    session: Session,
) -> Envelope[InvitationCreated]:
    """Create an invitation for an email and role.

    The token is returned only here; deliver it to the invitee.
    """
    invitation = await create_invitation(
        session,
        inviter,
        email=body.email,
        role=body.role,
        validity_days=body.validity_days,
    )
    return ok(invitation)


@router.post(
    "/accept",
    response_model=Envelope[InvitationAccepted],
    summary="Accept an invitation and join its tenant",
)
async def consume_invitation(
    body: AcceptInvitationRequest,
    principal: CurrentPrincipal,
    session: Session,
) -> Envelope[InvitationAccepted]:
    result = await accept_invitation(session, principal, body.token)
    return ok(result)
