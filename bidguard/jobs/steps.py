"""
Durable Steps

A step's output is stored under (run_id, step_id) the first time it
completes. When a run is retried the stored output is returned and the
step body is not executed again.
"""
import logging
from typing import Any, Callable, Optional, Set

from bidguard.infra.mongodb.repositories.step_repo import StepRunRepository, get_step_repo

logger = logging.getLogger(__name__)


class Step:
    """Step tool handed to job handlers for a single attempt of a run."""

    def __init__(self, run_id: str, repo: Optional[StepRunRepository] = None):
        self.run_id = run_id
        self.repo = repo or get_step_repo()
        self._seen: Set[str] = set()

    def run(self, step_id: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Execute `fn` once per run.

        Args:
            step_id: Identifier unique within the run
            fn: Step body; its return value must be JSON-serialisable

        Returns:
            The stored output if the step already completed, else the new output

        Raises:
            ValueError: the step id was already used in this attempt
        """
        if step_id in self._seen:
            raise ValueError(f"Duplicate step id '{step_id}' in run {self.run_id}")
        self._seen.add(step_id)

        stored = self.repo.get(self.run_id, step_id)
        if stored is not None:
            logger.debug(f"[Jobs] {self.run_id}/{step_id} memoised, skipping")
            return stored.get("output")

        output = fn(*args, **kwargs)
        self.repo.save(self.run_id, step_id, output)
        logger.info(f"[Jobs] {self.run_id}/{step_id} completed")
        return output
