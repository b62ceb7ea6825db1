"""
Job Backends

LocalBackend - in-process execution. Runs events synchronously until
               start() is called, then on a thread pool.
CeleryBackend - hands events to Celery workers (run_event_task).
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from bidguard.config import settings
from bidguard.jobs.events import Event
from bidguard.jobs.registry import FunctionRegistry
from bidguard.jobs.runner import FunctionRunner, RunResult

logger = logging.getLogger(__name__)


class LocalBackend:
    name = "local"

    def __init__(
        self,
        registry_factory: Optional[Callable[[], FunctionRegistry]] = None,
        runner: Optional[FunctionRunner] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Args:
            registry_factory: Returns the function registry (resolved lazily)
            runner: FunctionRunner shared by every run
            max_workers: Thread pool size once started
        """
        self._registry_factory = registry_factory
        self.runner = runner or FunctionRunner()
        self.max_workers = max_workers or settings.JOB_CONCURRENCY

        self._running = False
        self._executor: Optional[ThreadPoolExecutor] = None
        self._active_futures: Dict[str, Future] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> FunctionRegistry:
        if self._registry_factory is None:
            from bidguard.jobs import get_registry
            return get_registry()
        return self._registry_factory()

    def start(self) -> None:
        if self._running:
            logger.warning("[Jobs] Local backend already running")
            return
        logger.info(f"[Jobs] Starting local backend ({self.max_workers} workers)")
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="bidguard-job")
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        logger.info("[Jobs] Stopping local backend")
        self._running = False
        if self._executor:
            self._executor.shutdown(wait=True, cancel_futures=False)
            self._executor = None
        self._active_futures.clear()

    def submit(self, event: Event) -> str:
        """
        Run every function triggered by `event`.

        Returns:
            The event id
        """
        functions = self.registry.for_event(event.name)
        if not functions:
            logger.warning(f"[Jobs] No function registered for event {event.name}")

        for function in functions:
            if not self._running:
                self.runner.execute(function, event)
                continue
            future = self._executor.submit(self.runner.execute, function, event)
            run_id = FunctionRunner.run_id_for(function, event)
            with self._lock:
                self._active_futures[run_id] = future
            future.add_done_callback(lambda f, rid=run_id: self._on_done(rid, f))

        return event.id

    def _on_done(self, run_id: str, future: Future) -> None:
        with self._lock:
            self._active_futures.pop(run_id, None)
        error = future.exception()
        if error is not None:
            logger.error(f"[Jobs] Run {run_id} crashed: {error}")
            return
        result: RunResult = future.result()
        if not result.ok:
            logger.warning(f"[Jobs] Run {run_id} failed: {result.error}")

    def active_runs(self) -> List[str]:
        with self._lock:
            return list(self._active_futures)

    def health(self) -> dict:
        return {
            "healthy": True,
            "backend": self.name,
            "mode": "threaded" if self._running else "synchronous",
            "active_runs": len(self._active_futures),
            "max_workers": self.max_workers,
        }


class CeleryBackend:
    name = "celery"

    def __init__(self):
        self._celery_app = None

    def _get_celery_app(self):
        if self._celery_app is None:
            from bidguard.jobs.celery_app import celery_app
            self._celery_app = celery_app
        return self._celery_app

    def start(self) -> None:
        # Workers are started separately with `celery -A bidguard.jobs.celery_app worker`
        logger.info("[Jobs] Celery backend initialised")

    def stop(self) -> None:
        logger.info("[Jobs] Celery backend stopped")

    def submit(self, event: Event) -> str:
        from bidguard.jobs.tasks import run_event_task

        task = run_event_task.delay(event.model_dump(mode="json"))
        logger.info(f"[Jobs] Event {event.name} ({event.id}) sent to Celery task {task.id}")
        return event.id

    def health(self) -> dict:
        try:
            stats = self._get_celery_app().control.inspect().stats()
        except Exception as e:
            return {"healthy": False, "backend": self.name, "message": f"Health check failed: {str(e)}"}
        if not stats:
            return {"healthy": False, "backend": self.name, "message": "No workers available"}
        return {"healthy": True, "backend": self.name, "workers": list(stats.keys())}
