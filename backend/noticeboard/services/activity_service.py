import json
import logging
from typing import Any, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from noticeboard.models.activity_log import ActivityLog
from noticeboard.utils.clock import ensure_aware_utc

logger = logging.getLogger(__name__)


def client_ip(request: Optional[Request]) -> str:
    if request is None:
        return "unknown"
    forwarded = request.headers.get("cf-connecting-ip") or request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def log_activity(
    db: Session,
    request: Optional[Request],
    *,
    user_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    metadata: Optional[dict] = None,
) -> Optional[ActivityLog]:
    """Append an audit entry. Never raises: a failed write is logged and dropped."""
    try:
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            meta=json.dumps(metadata) if metadata else None,
            ip_address=client_ip(request),
            user_agent=(request.headers.get("user-agent") if request is not None else None) or "unknown",
        )
        db.add(entry)
        db.commit()
        return entry
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to log activity %s for user %s", action, user_id)
        return None


def activity_to_payload(entry: ActivityLog) -> dict:
    return {
        "id": entry.id,
        "userId": entry.user_id,
        "action": entry.action,
        "entityType": entry.entity_type,
        "entityId": entry.entity_id,
        "metadata": json.loads(entry.meta) if entry.meta else None,
        "ipAddress": entry.ip_address,
        "userAgent": entry.user_agent,
        "createdAt": entry.created_at and ensure_aware_utc(entry.created_at).isoformat(),
    }
