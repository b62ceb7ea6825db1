"""
Step Run Repository

Stores the output of each completed job step so that a retried run can
skip steps it already finished.
"""
import logging
from typing import Optional, Dict, Any

from bidguard.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StepRunRepository(BaseRepository[Dict[str, Any]]):
    """Memoised step outputs keyed by (run_id, step_id)."""

    collection_name = "job_steps"

    def get(self, run_id: str, step_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"run_id": run_id, "step_id": step_id})

    def save(self, run_id: str, step_id: str, output: Any) -> None:
        self.update_one(
            {"run_id": run_id, "step_id": step_id},
            {"output": output},
            upsert=True,
        )


_step_repo: Optional[StepRunRepository] = None


def get_step_repo() -> StepRunRepository:
    global _step_repo
    if _step_repo is None:
        _step_repo = StepRunRepository()
    return _step_repo
