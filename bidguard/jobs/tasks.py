"""Celery tasks."""
import logging

from bidguard.jobs.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="bidguard.jobs.run_event",
    max_retries=0,  # retries are handled by FunctionRunner
    acks_late=True,
)
def run_event_task(self, payload: dict) -> list:
    """Run every job function triggered by the serialised event."""
    from bidguard.jobs import get_registry, get_runner
    from bidguard.jobs.events import Event

    event = Event(**payload)
    logger.info(f"[Jobs] Celery task {self.request.id} running event {event.name} ({event.id})")

    results = []
    runner = get_runner()
    for function in get_registry().for_event(event.name):
        result = runner.execute(function, event)
        results.append({"fn_id": result.fn_id, "status": result.status, "error": result.error})
    return results
