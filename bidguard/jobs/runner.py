"""
Function Runner

Executes a job function for one event: retries failed attempts with
exponential backoff, replays memoised steps, and calls the function's
on_failure hook once retries are exhausted.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from tenacity import (
    Retrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bidguard.config import settings
from bidguard.domain.errors import NonRetriableError
from bidguard.infra.mongodb.repositories.step_repo import StepRunRepository
from bidguard.jobs.events import Event
from bidguard.jobs.registry import JobFunction
from bidguard.jobs.steps import Step

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    run_id: str
    fn_id: str
    status: str  # completed | failed
    attempts: int
    output: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"


class FunctionRunner:
    def __init__(self, step_repo: Optional[StepRunRepository] = None, backoff_seconds: Optional[float] = None):
        self.step_repo = step_repo
        self.backoff_seconds = settings.JOB_RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        self._slots: Dict[str, threading.BoundedSemaphore] = {}
        self._slots_lock = threading.Lock()

    @staticmethod
    def run_id_for(function: JobFunction, event: Event) -> str:
        return f"{function.fn_id}:{event.id}"

    def _slot(self, function: JobFunction) -> threading.BoundedSemaphore:
        with self._slots_lock:
            if function.fn_id not in self._slots:
                self._slots[function.fn_id] = threading.BoundedSemaphore(max(1, function.concurrency))
            return self._slots[function.fn_id]

    def execute(self, function: JobFunction, event: Event) -> RunResult:
        """
        Run `function` for `event` to completion or final failure.

        At most `function.concurrency` runs of the same function execute
        at once in this process; extra runs wait for a free slot.
        """
        with self._slot(function):
            return self._execute(function, event)

    def _execute(self, function: JobFunction, event: Event) -> RunResult:
        run_id = self.run_id_for(function, event)
        attempts = 0

        def attempt():
            nonlocal attempts
            attempts += 1
            logger.info(f"[Jobs] {function.fn_id} attempt {attempts} for event {event.id}")
            return function.handler(event, Step(run_id, self.step_repo))

        def log_retry(retry_state):
            logger.warning(
                f"[Jobs] {function.fn_id} attempt {retry_state.attempt_number} failed: "
                f"{retry_state.outcome.exception()}"
            )

        retrying = Retrying(
            stop=stop_after_attempt(function.retries + 1),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=self.backoff_seconds * 30),
            retry=retry_if_not_exception_type(NonRetriableError),
            before_sleep=log_retry,
            reraise=True,
        )

        try:
            output = retrying(attempt)
        except Exception as e:
            logger.error(f"[Jobs] {function.fn_id} failed after {attempts} attempt(s): {e}")
            if function.on_failure is not None:
                try:
                    function.on_failure(event, e)
                except Exception as hook_error:
                    logger.exception(f"[Jobs] on_failure hook of {function.fn_id} raised: {hook_error}")
            return RunResult(run_id=run_id, fn_id=function.fn_id, status="failed", attempts=attempts, error=str(e))

        logger.info(f"[Jobs] {function.fn_id} completed for event {event.id}")
        return RunResult(run_id=run_id, fn_id=function.fn_id, status="completed", attempts=attempts, output=output)
