"""FastAPI dependencies for authentication and store access."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.database import get_session
from tenancy.core.errors import Unauthenticated
from tenancy.core.security import IdentityResolver, JwtIdentityResolver, Principal
from tenancy.models.profile import Profile
from tenancy.services.invitations import require_inviter

# auto_error=False so a missing header is reported in our own envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_resolver() -> IdentityResolver:
    """Identity provider adapter; overridden in tests."""
    return JwtIdentityResolver()


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver)],
) -> Principal:
    """Resolve the bearer credential to the calling principal."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Send Authorization: Bearer <token>")
    return resolver.resolve(credentials.credentials)


# Typed shorthand for use in route signatures
CurrentPrincipal = Annotated[Principal, Depends(get_principal)]
Session = Annotated[AsyncSession, Depends(get_session)]


async def get_inviter(principal: CurrentPrincipal, session: Session) -> Profile:
    """Gate invitation issuing on the caller's profile.

    Resolved before the request body is validated: a caller who may not
    invite gets 403 whatever the body holds.
    """
    return await require_inviter(session, principal)


Inviter = Annotated[Profile, Depends(get_inviter)]
