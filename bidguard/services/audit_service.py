"""
Audit Service

Typed helpers over the audit log. Audit writes never fail the caller.
"""
import logging
from typing import Any, Dict, List, Optional

from bidguard.domain.constants import AuditAction
from bidguard.infra.mongodb.repositories.audit_repo import AuditLogRepository, get_audit_repo

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, audit_repo: Optional[AuditLogRepository] = None):
        self.audit_repo = audit_repo or get_audit_repo()

    def log_proposal_created(self, user_id: str, proposal_id: str, tender_id: str, tender_title: str) -> bool:
        return self.audit_repo.log(
            user_id,
            AuditAction.PROPOSAL_CREATED,
            "proposal",
            proposal_id,
            {"tender_id": tender_id, "tender_title": tender_title},
        )

    def log_proposal_completed(self, user_id: str, proposal_id: str, score: Optional[float]) -> bool:
        return self.audit_repo.log(user_id, AuditAction.PROPOSAL_COMPLETED, "proposal", proposal_id, {"score": score})

    def log_proposal_exported(self, user_id: str, proposal_id: str, export_format: str = "markdown") -> bool:
        return self.audit_repo.log(
            user_id, AuditAction.PROPOSAL_EXPORTED, "proposal", proposal_id, {"format": export_format}
        )

    def log_profile_updated(self, user_id: str, fields: List[str]) -> bool:
        return self.audit_repo.log(user_id, AuditAction.PROFILE_UPDATED, "profile", user_id, {"fields": fields})

    def log_tender_saved(self, user_id: str, tender_id: str, metadata: Optional[Dict[str, Any]] = None) -> bool:
        return self.audit_repo.log(user_id, AuditAction.TENDER_SAVED, "tender", tender_id, metadata)


_audit_service: Optional[AuditService] = None


def get_audit_service() -> AuditService:
    global _audit_service
    if _audit_service is None:
        _audit_service = AuditService()
    return _audit_service
