"""
Proposal Repository

Handles the proposals collection (autonomous pipeline) and the jobs
collection (single-shot writer jobs). Status changes go through
`transition`, which enforces the proposal state machine atomically.
"""
import logging
import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime
from pymongo import DESCENDING, ReturnDocument

from bidguard.domain.constants import (
    ProposalStatus,
    JobStatus,
    ALLOWED_PREDECESSORS,
    TERMINAL_STATUSES,
)
from bidguard.domain.errors import InvalidTransitionError
from bidguard.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProposalRepository(BaseRepository[Dict[str, Any]]):
    """Repository for autonomously generated proposals."""

    collection_name = "proposals"

    def create(
        self,
        user_id: str,
        tender_id: str,
        tender_title: str,
        tender_buyer: Optional[str] = None,
        idea_injection: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a queued proposal record.

        Returns:
            The stored proposal document
        """
        now = datetime.utcnow()
        document = {
            "proposal_id": f"prop_{uuid.uuid4().hex[:12]}",
            "user_id": user_id,
            "tender_id": tender_id,
            "tender_title": tender_title,
            "tender_buyer": tender_buyer or "Unknown",
            "idea_injection": idea_injection or None,
            "status": ProposalStatus.QUEUED.value,
            "status_history": [{"status": ProposalStatus.QUEUED.value, "at": now}],
            "research": None,
            "qualification": None,
            "strategies": None,
            "selected_strategy": None,
            "draft_content": None,
            "critiques": [],
            "score": None,
            "feedback": [],
            "final_content": None,
            "error": None,
            "created_at": now,
            "updated_at": now,
        }
        stored = self.insert_one(document)
        logger.info(f"[Proposals] Created {stored['proposal_id']} for tender {tender_id}")
        return stored

    def get(self, proposal_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"proposal_id": proposal_id})

    def get_for_user(self, proposal_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a proposal only if it belongs to the user."""
        return self.find_one({"proposal_id": proposal_id, "user_id": user_id})

    def list_for_user(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Newest proposals first."""
        return self.find_many(
            {"user_id": user_id},
            limit=limit,
            sort=[("created_at", DESCENDING)],
        )

    def update_final_content(self, proposal_id: str, user_id: str, final_content: str) -> bool:
        return self.update_one(
            {"proposal_id": proposal_id, "user_id": user_id},
            {"final_content": final_content},
        )

    def save_fields(self, proposal_id: str, **fields) -> bool:
        """Persist intermediate pipeline output without changing status."""
        return self.update_one({"proposal_id": proposal_id}, dict(fields))

    def transition(self, proposal_id: str, new_status: str, **fields) -> Dict[str, Any]:
        """
        Move a proposal to `new_status`, optionally setting extra fields.

        The update only matches when the stored status is a legal
        predecessor of the target, so two workers can never regress a
        proposal.

        Raises:
            InvalidTransitionError: the current status does not allow the move
        """
        target = ProposalStatus(new_status)
        allowed = [s.value for s in ALLOWED_PREDECESSORS[target]]
        now = datetime.utcnow()

        updated = self.collection.find_one_and_update(
            {"proposal_id": proposal_id, "status": {"$in": allowed}},
            {
                "$set": {"status": target.value, "updated_at": now, **fields},
                "$push": {"status_history": {"status": target.value, "at": now}},
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            current = self.collection.find_one({"proposal_id": proposal_id}, {"status": 1})
            raise InvalidTransitionError(
                proposal_id, target.value, current.get("status") if current else None
            )

        logger.info(f"[Proposals] {proposal_id} -> {target.value}")
        return self._clean(updated)

    def mark_failed(self, proposal_id: str, error: str) -> bool:
        """
        Move a proposal to `failed`. A proposal that already reached a
        terminal status is left untouched.

        Returns:
            True if the proposal was marked failed
        """
        try:
            self.transition(
                proposal_id,
                ProposalStatus.FAILED.value,
                error=error,
                final_content=f"## Generation Failed\n\nSystem encountered an error during processing: {error}",
            )
            return True
        except InvalidTransitionError as e:
            if e.current in {s.value for s in TERMINAL_STATUSES}:
                logger.warning(f"[Proposals] {proposal_id} already {e.current}, not marking failed")
                return False
            raise


class GenerationJobRepository(BaseRepository[Dict[str, Any]]):
    """Repository for single-shot proposal writing jobs."""

    collection_name = "jobs"

    def create(self, job_id: Optional[str] = None) -> Dict[str, Any]:
        document = {
            "job_id": job_id or str(uuid.uuid4()),
            "status": JobStatus.PENDING.value,
            "result": None,
        }
        return self.insert_one(document)

    def get(self, job_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"job_id": job_id})

    def set_status(self, job_id: str, status: str, result: Optional[str] = None) -> bool:
        update = {"status": JobStatus(status).value}
        if result is not None:
            update["result"] = result
        return self.update_one({"job_id": job_id}, update)


# Singleton instances
_proposal_repo: Optional[ProposalRepository] = None
_job_repo: Optional[GenerationJobRepository] = None


def get_proposal_repo() -> ProposalRepository:
    global _proposal_repo
    if _proposal_repo is None:
        _proposal_repo = ProposalRepository()
    return _proposal_repo


def get_job_repo() -> GenerationJobRepository:
    global _job_repo
    if _job_repo is None:
        _job_repo = GenerationJobRepository()
    return _job_repo
