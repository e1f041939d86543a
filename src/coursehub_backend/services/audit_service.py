import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from coursehub_backend.model.auth import AuditLog
from coursehub_backend.repositories.user import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Persists admin authentication events."""

    def __init__(self, db: Session):
        self.logs = AuditLogRepository(db)

    def record(
        self,
        action: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditLog:
        entry = self.logs.create(AuditLog(
            action=action,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            details=details or {}
        ))
        logger.info(f"Audit: {action} by {user_id}")
        return entry
