from typing import Any, Dict, Optional

from clinic.models import AuditEvent


def log_action(*, actor: str = '', action: str, object_type: Optional[str] = None,
               object_id: Any = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    return AuditEvent.objects.create(
        actor=(actor or '')[:150],
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
