"""
Proposal Service

Business logic behind the proposal endpoints:
- Starting autonomous generation (credit check, record, event)
- Owner-scoped reads and edits of generated proposals
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bidguard.domain.errors import InsufficientCreditsError, NotFoundError
from bidguard.infra.mongodb.repositories.proposal_repo import ProposalRepository, get_proposal_repo
from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository, get_profile_repo
from bidguard.jobs import send_event
from bidguard.jobs.events import AutonomousProposalRequested
from bidguard.services.audit_service import AuditService, get_audit_service

logger = logging.getLogger(__name__)


@dataclass
class StartProposalRequest:
    """Input for autonomous generation."""
    tender_id: str
    tender_title: str
    tender_buyer: Optional[str] = None
    idea_injection: Optional[str] = None


class ProposalService:
    def __init__(
        self,
        proposal_repo: Optional[ProposalRepository] = None,
        profile_repo: Optional[ProfileRepository] = None,
        audit_service: Optional[AuditService] = None,
        dispatch=None,
    ):
        """
        Args:
            dispatch: Callable that sends a job event (defaults to bidguard.jobs.send_event)
        """
        self.proposals = proposal_repo or get_proposal_repo()
        self.profiles = profile_repo or get_profile_repo()
        self.audit = audit_service or get_audit_service()
        self.dispatch = dispatch or send_event

    def start(self, user_id: str, request: StartProposalRequest) -> Dict[str, Any]:
        """
        Queue autonomous generation for a tender.

        Raises:
            InsufficientCreditsError: the user has no credits left
        """
        if not self.profiles.use_credit(user_id):
            raise InsufficientCreditsError("No credits remaining. Please upgrade to continue.")

        proposal = self.proposals.create(
            user_id=user_id,
            tender_id=request.tender_id,
            tender_title=request.tender_title,
            tender_buyer=request.tender_buyer,
            idea_injection=request.idea_injection,
        )
        proposal_id = proposal["proposal_id"]
        self.audit.log_proposal_created(user_id, proposal_id, request.tender_id, request.tender_title)

        event = AutonomousProposalRequested(
            proposal_id=proposal_id,
            user_id=user_id,
            tender_id=request.tender_id,
            tender_title=request.tender_title,
            tender_buyer=proposal["tender_buyer"],
            idea_injection=request.idea_injection,
        ).to_event()
        try:
            self.dispatch(event)
        except Exception as e:
            logger.error(f"[ProposalService] Could not dispatch {proposal_id}: {str(e)}")
            if self.proposals.mark_failed(proposal_id, f"Could not queue generation: {e}"):
                self.profiles.refund_credit(user_id)
            raise

        logger.info(f"[ProposalService] Queued {proposal_id} for user {user_id}")
        return {
            "success": True,
            "proposal_id": proposal_id,
            "message": "Proposal generation started",
        }

    def get(self, user_id: str, proposal_id: str) -> Dict[str, Any]:
        proposal = self.proposals.get_for_user(proposal_id, user_id)
        if not proposal:
            raise NotFoundError("Proposal not found")
        return proposal

    def list(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        return self.proposals.list_for_user(user_id, limit=limit)

    def update_final_content(self, user_id: str, proposal_id: str, final_content: str) -> Dict[str, Any]:
        if not self.proposals.update_final_content(proposal_id, user_id, final_content):
            raise NotFoundError("Proposal not found")
        return self.get(user_id, proposal_id)

    def export(self, user_id: str, proposal_id: str) -> str:
        """Final markdown of a proposal, recorded in the audit log."""
        proposal = self.get(user_id, proposal_id)
        content = proposal.get("final_content") or proposal.get("draft_content")
        if not content:
            raise NotFoundError("Proposal has no content to export yet")
        self.audit.log_proposal_exported(user_id, proposal_id, "markdown")
        return content


_proposal_service: Optional[ProposalService] = None


def get_proposal_service() -> ProposalService:
    global _proposal_service
    if _proposal_service is None:
        _proposal_service = ProposalService()
    return _proposal_service
