import logging
from typing import Optional

from coursehub_backend.auth.sessions import AdminSessionRegistry
from coursehub_backend.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def force_logout(
    registry: AdminSessionRegistry,
    audit: AuditService,
    session_id: str,
    forced_by: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> bool:
    """Terminate another admin session. Returns False when no such session exists."""
    session = registry.destroy_session(session_id)
    if session is None:
        return False

    audit.record(
        "force_logout",
        user_id=session.user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        details={"forced_by": forced_by, "session_id": session_id}
    )
    logger.info(f"Admin session of user {session.user_id} terminated by {forced_by}")
    return True
