import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError

from cms.models import AuditEvent

logger = logging.getLogger(__name__)


def actor_label(user) -> str:
    if user is None or not getattr(user, 'is_authenticated', False):
        return ''
    return user.get_username()


def log_action(*, user, action: str, object_type: Optional[str]=None, object_id: Optional[str]=None, detail: Optional[Dict[str, Any]]=None) -> Optional[AuditEvent]:
    try:
        return AuditEvent.objects.create(
            actor=actor_label(user),
            action=action,
            object_type=object_type,
            object_id=str(object_id) if object_id is not None else None,
            detail=detail or {},
        )
    except DatabaseError:
        logger.exception("audit write failed action=%s %s:%s", action, object_type, object_id)
        return None
