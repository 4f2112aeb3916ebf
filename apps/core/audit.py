"""
Audit trail service.

Every privileged action (workflow moves, moderation, logins, purges)
goes through record_audit so the admin log has one shape.
"""

import logging
from typing import Any, Dict, Optional

from apps.core.middleware import get_request_context
from apps.core.models import AuditLog

logger = logging.getLogger(__name__)


def record_audit(
    actor,
    action: str,
    entity_type: str,
    entity_id: Any = '',
    changes: Optional[Dict[str, Any]] = None,
    details: str = '',
    success: bool = True,
) -> AuditLog:
    """
    Persist an audit entry.

    The client address and user agent come from the current request
    context, so callers outside a request (Celery, management commands)
    get empty values.
    """
    context = get_request_context()
    if actor is not None and not getattr(actor, 'is_authenticated', False):
        actor = None

    entry = AuditLog.objects.create(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else '',
        changes=changes or {},
        ip_address=context.get('ip_address'),
        user_agent=context.get('user_agent') or '',
        details=details,
        success=success,
    )

    logger.info(
        f"Audit: {entity_type}:{entity_id} {action} by "
        f"{actor.username if actor else 'system'}"
    )
    return entry
