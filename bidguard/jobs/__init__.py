"""
Background Jobs

Event-driven execution with durable steps, retries and failure hooks.
Job handlers are registered by bidguard.services.proposal_pipeline.
"""
import logging
from typing import Optional, Union

from bidguard.config import settings
from bidguard.jobs.events import Event, AutonomousProposalRequested, ProposalJobRequested
from bidguard.jobs.steps import Step
from bidguard.jobs.registry import JobFunction, FunctionRegistry
from bidguard.jobs.runner import FunctionRunner, RunResult
from bidguard.jobs.backends import LocalBackend, CeleryBackend

logger = logging.getLogger(__name__)

Backend = Union[LocalBackend, CeleryBackend]

_registry: Optional[FunctionRegistry] = None
_runner: Optional[FunctionRunner] = None
_backend: Optional[Backend] = None


def get_registry() -> FunctionRegistry:
    """Registry with every application job function registered."""
    global _registry
    if _registry is None:
        from bidguard.services.proposal_pipeline import register_functions

        registry = FunctionRegistry()
        register_functions(registry)
        _registry = registry
    return _registry


def get_runner() -> FunctionRunner:
    global _runner
    if _runner is None:
        _runner = FunctionRunner()
    return _runner


def get_backend() -> Backend:
    """Get the configured backend instance."""
    global _backend
    if _backend is None:
        if settings.JOB_BACKEND == "celery":
            _backend = CeleryBackend()
        else:
            _backend = LocalBackend(runner=get_runner())
    return _backend


def set_backend(backend: Optional[Backend]) -> None:
    """Set the backend instance (useful for testing)."""
    global _backend
    _backend = backend


def send_event(event: Event) -> str:
    """Dispatch an event through the configured backend. Returns the event id."""
    logger.info(f"[Jobs] Sending {event.name} ({event.id})")
    return get_backend().submit(event)


__all__ = [
    "Event",
    "AutonomousProposalRequested",
    "ProposalJobRequested",
    "Step",
    "JobFunction",
    "FunctionRegistry",
    "FunctionRunner",
    "RunResult",
    "LocalBackend",
    "CeleryBackend",
    "get_registry",
    "get_runner",
    "get_backend",
    "set_backend",
    "send_event",
]
