"""Single-shot proposal writing jobs."""
import logging
import uuid
from typing import Any, Dict, Optional

from bidguard.domain.errors import NotFoundError
from bidguard.infra.mongodb.repositories.proposal_repo import GenerationJobRepository, get_job_repo
from bidguard.jobs import send_event
from bidguard.jobs.events import ProposalJobRequested

logger = logging.getLogger(__name__)


class JobService:
    def __init__(self, job_repo: Optional[GenerationJobRepository] = None, dispatch=None):
        self.jobs = job_repo or get_job_repo()
        self.dispatch = dispatch or send_event

    def trigger(
        self,
        strategy_name: str,
        executive_summary: str,
        project_name: str,
        client_name: str,
        research_summary: str = "",
    ) -> str:
        """Create a pending job and send app/generate-proposal. Returns the job id."""
        job_id = str(uuid.uuid4())
        self.jobs.create(job_id)
        self.dispatch(ProposalJobRequested(
            job_id=job_id,
            strategy_name=strategy_name,
            executive_summary=executive_summary,
            project_name=project_name,
            client_name=client_name,
            research_summary=research_summary,
        ).to_event())
        logger.info(f"[Jobs] Triggered proposal job {job_id} ({strategy_name})")
        return job_id

    def status(self, job_id: str) -> Dict[str, Any]:
        job = self.jobs.get(job_id)
        if not job:
            raise NotFoundError("Job not found")
        return {"status": job["status"], "result": job.get("result")}


_job_service: Optional[JobService] = None


def get_job_service() -> JobService:
    global _job_service
    if _job_service is None:
        _job_service = JobService()
    return _job_service
