"""
Audit Log Repository

Append-only log of sensitive user actions. Writing an audit entry must
never break the action being audited, so failures are logged and swallowed.
"""
import logging
from typing import Optional, List, Dict, Any
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from bidguard.domain.constants import AuditAction
from bidguard.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AuditLogRepository(BaseRepository[Dict[str, Any]]):
    """Repository for audit log entries."""

    collection_name = "audit_logs"

    def log(
        self,
        user_id: str,
        action: AuditAction,
        resource_type: str,
        resource_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        try:
            self.insert_one({
                "user_id": user_id,
                "action_type": AuditAction(action).value,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "metadata": metadata or {},
            })
            return True
        except PyMongoError as e:
            logger.error(f"[AUDIT] Failed to log {action}: {e}")
            return False

    def list_for_user(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        return self.find_many({"user_id": user_id}, limit=limit, sort=[("created_at", DESCENDING)])


_audit_repo: Optional[AuditLogRepository] = None


def get_audit_repo() -> AuditLogRepository:
    global _audit_repo
    if _audit_repo is None:
        _audit_repo = AuditLogRepository()
    return _audit_repo
