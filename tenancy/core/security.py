"""Security utilities: identity resolution and token helpers."""

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from jose import JWTError, jwt

from tenancy.core.config import get_settings
from tenancy.core.errors import ServerMisconfigured, Unauthenticated

settings = get_settings()


# ── Principal ─────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller as reported by the identity provider."""

    id: uuid.UUID
    email: str | None = None


class IdentityResolver(Protocol):
    def resolve(self, credential: str) -> Principal: ...


# ── Invitation tokens ─────────────────────────────────────────

def generate_invitation_token() -> str:
    """Return a single-use invitation token: 32 random bytes as 64 hex chars."""
    return secrets.token_hex(32)


# ── JWT ───────────────────────────────────────────────────────

def _secret() -> str:
    if not settings.jwt_secret_key:
        raise ServerMisconfigured("JWT_SECRET_KEY is not configured")
    return settings.jwt_secret_key


def create_jwt(
    subject: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint an access token shaped like the identity provider's.

    Used by tooling and tests; production tokens come from the provider.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    payload = {
        "sub": subject,
        "aud": settings.jwt_audience,
        "exp": expire,
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jose.JWTError on failure."""
    return jwt.decode(
        token,
        _secret(),
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )


class JwtIdentityResolver:
    """Resolve provider-issued JWT access tokens into a Principal."""

    def resolve(self, credential: str) -> Principal:
        try:
            claims = decode_jwt(credential)
        except JWTError as exc:
            raise Unauthenticated("Invalid or expired token") from exc

        try:
            principal_id = uuid.UUID(claims["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise Unauthenticated("Malformed token subject") from exc

        email = claims.get("email")
        if isinstance(email, str) and email.strip():
            return Principal(id=principal_id, email=email.strip().lower())
        return Principal(id=principal_id)
