"""Job function definitions and the event -> function registry."""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from bidguard.config import settings
from bidguard.jobs.events import Event
from bidguard.jobs.steps import Step

Handler = Callable[[Event, Step], Any]
FailureHandler = Callable[[Event, BaseException], None]


@dataclass
class JobFunction:
    fn_id: str
    trigger: str
    handler: Handler
    concurrency: int = 5
    retries: int = 3
    on_failure: Optional[FailureHandler] = None


class FunctionRegistry:
    def __init__(self):
        self._functions: Dict[str, JobFunction] = {}

    def register(self, function: JobFunction) -> JobFunction:
        if function.fn_id in self._functions:
            raise ValueError(f"Job function already registered: {function.fn_id}")
        self._functions[function.fn_id] = function
        return function

    def function(
        self,
        fn_id: str,
        trigger: str,
        concurrency: Optional[int] = None,
        retries: Optional[int] = None,
        on_failure: Optional[FailureHandler] = None,
    ):
        """Decorator form of `register`."""
        def decorator(handler: Handler) -> Handler:
            self.register(JobFunction(
                fn_id=fn_id,
                trigger=trigger,
                handler=handler,
                concurrency=settings.JOB_CONCURRENCY if concurrency is None else concurrency,
                retries=settings.JOB_MAX_RETRIES if retries is None else retries,
                on_failure=on_failure,
            ))
            return handler
        return decorator

    def get(self, fn_id: str) -> Optional[JobFunction]:
        return self._functions.get(fn_id)

    def for_event(self, name: str) -> List[JobFunction]:
        return [f for f in self._functions.values() if f.trigger == name]

    def all(self) -> List[JobFunction]:
        return list(self._functions.values())
