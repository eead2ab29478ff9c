"""Onboarding endpoints — tenant creation and profile bootstrap."""

from typing import Annotated, Any

from fastapi import APIRouter
from pydantic import BaseModel, Field, StringConstraints, field_validator

from tenancy.api.deps import CurrentPrincipal, Session
from tenancy.api.envelope import Envelope, ok
from tenancy.models.profile import ProfileRead
from tenancy.services.profiles import ensure_profile
from tenancy.services.provisioning import ProvisionedTenant, provision_tenant

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

MIN_FULL_NAME_LENGTH = 3


# ── Request / response schemas ───────────────────────────────

class ProvisionTenantRequest(BaseModel):
    """Everything needed to create a tenant owned by the caller."""
    tenant_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=255)]
    slug: Annotated[
        str,
        StringConstraints(min_length=2, max_length=100, pattern=r"^[a-z0-9-]+$"),
    ]
    owner_full_name: Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=MIN_FULL_NAME_LENGTH, max_length=255),
    ]

    @field_validator("slug", mode="before")
    @classmethod
    def _normalize_slug(cls, value: Any) -> Any:
        # Normalize before the pattern check runs
        return value.strip().lower() if isinstance(value, str) else value


class EnsureProfileRequest(BaseModel):
    full_name: Any = Field(default=None, description="Ignored unless at least 3 characters")

    @field_validator("full_name")
    @classmethod
    def _usable_name(cls, value: Any) -> str | None:
        if isinstance(value, str) and len(value.strip()) >= MIN_FULL_NAME_LENGTH:
            return value.strip()
        return None


class ProfileState(BaseModel):
    profile: ProfileRead
    onboarding_pending: bool


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "/tenant",
    response_model=Envelope[ProvisionedTenant],
    summary="Create a tenant owned by the caller",
)
async def create_tenant(
    body: ProvisionTenantRequest,
    principal: CurrentPrincipal,
    session: Session,
) -> Envelope[ProvisionedTenant]:
    """Provision a tenant with its settings, registers, tip pool and permissions.

    The caller becomes the tenant's owner.
    """
    result = await provision_tenant(
        session,
        principal,
        tenant_name=body.tenant_name,
        slug=body.slug,
        owner_full_name=body.owner_full_name,
    )
    return ok(result)


@router.post(
    "/profile",
    response_model=Envelope[ProfileState],
    summary="Ensure the caller has a profile",
)
async def ensure_caller_profile(
    principal: CurrentPrincipal,
    session: Session,
    body: EnsureProfileRequest | None = None,
) -> Envelope[ProfileState]:
    full_name = body.full_name if body is not None else None
    profile = await ensure_profile(session, principal, full_name=full_name)
    return ok(ProfileState(
        profile=ProfileRead.model_validate(profile),
        onboarding_pending=profile.onboarding_pending,
    ))
