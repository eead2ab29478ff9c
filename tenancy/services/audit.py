"""Audit event emitter — best-effort, append-only."""

import json
import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.models.audit_event import AuditEvent, AuditEventType

logger = logging.getLogger(__name__)


async def record_event(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    event_type: AuditEventType,
    actor_id: uuid.UUID,
    payload: dict[str, Any],
    origin_type: str | None = None,
    origin_id: uuid.UUID | None = None,
) -> None:
    """Append an audit event in its own commit. Never raises.

    Called after the primary operation has committed, so a failure here
    is logged for monitoring and leaves the caller's result untouched.
    """
    try:
        event = AuditEvent(
            tenant_id=tenant_id,
            event_type=event_type,
            origin_type=origin_type,
            origin_id=origin_id,
            payload=json.dumps(payload, default=str),
            created_by=actor_id,
        )
        session.add(event)
        await session.commit()
    except Exception:
        logger.exception(
            "Audit event %s could not be recorded for tenant %s", event_type, tenant_id
        )
        try:
            await session.rollback()
        except Exception:
            logger.exception("Rollback after audit failure also failed")
