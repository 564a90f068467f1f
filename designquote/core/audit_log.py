"""Audit trail for mutating operations"""
import hashlib
import json
import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from designquote.models.audit import Audit
from designquote.core.enums import AuditAction
from designquote.core.metrics import audit_logs_created

logger = logging.getLogger(__name__)


def payload_hash(payload: Any) -> str:
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump(exclude_unset=True)
    elif not isinstance(payload, dict):
        payload = {}
    payload_str = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(payload_str.encode()).hexdigest()


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Optional[Any] = None,
    entity_id: Optional[int] = None,
) -> None:
    """Stage an audit row in the caller's transaction.

    The row is committed together with the change it describes. Failures are
    logged and never interrupt the operation being audited.
    """
    try:
        audit_record = Audit(
            user_id=int(user_id),
            action=str(action),
            entity_id=entity_id,
            payload_hash=payload_hash(payload or {}),
        )
        db.add(audit_record)
        audit_logs_created.labels(action=str(action)).inc()
    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
