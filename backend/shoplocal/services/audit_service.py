# Overview: Append-only security event log.

from ..extensions import db
from ..models import SecurityEvent
from shoplocal.time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Append a security event and commit it.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )
    db.session.add(event)
    db.session.commit()
    return event
