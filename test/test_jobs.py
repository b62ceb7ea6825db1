"""
Background job tests: durable steps, retries, failure hooks and backends
"""
import threading

import pytest

from bidguard import jobs
from bidguard.domain.errors import NonRetriableError
from bidguard.jobs import (
    Event,
    Step,
    JobFunction,
    FunctionRegistry,
    FunctionRunner,
    LocalBackend,
)


def make_function(handler, retries=2, on_failure=None, trigger="test/event", fn_id="test-fn"):
    return JobFunction(fn_id=fn_id, trigger=trigger, handler=handler, concurrency=2, retries=retries, on_failure=on_failure)


# ===================== STEPS =====================

def test_step_output_is_memoised():
    calls = []

    def body(value):
        calls.append(value)
        return {"value": value}

    assert Step("run-1").run("first", body, 1) == {"value": 1}
    # A new attempt of the same run replays the stored output
    assert Step("run-1").run("first", body, 2) == {"value": 1}
    # Another run executes the body again
    assert Step("run-2").run("first", body, 3) == {"value": 3}
    assert calls == [1, 3]


def test_step_ids_must_be_unique_within_attempt():
    step = Step("run-1")
    step.run("same", lambda: 1)
    with pytest.raises(ValueError):
        step.run("same", lambda: 2)


def test_step_failure_is_not_stored(mongo_db):
    def boom():
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        Step("run-1").run("flaky", boom)
    assert mongo_db["job_steps"].count_documents({}) == 0


# ===================== REGISTRY =====================

def test_registry_routes_events():
    registry = FunctionRegistry()

    @registry.function("one", trigger="a/b")
    def one(event, step):
        return "one"

    registry.register(make_function(lambda e, s: "two", trigger="a/b", fn_id="two"))

    assert {f.fn_id for f in registry.for_event("a/b")} == {"one", "two"}
    assert registry.for_event("x/y") == []
    assert registry.get("one").retries == 2  # JOB_MAX_RETRIES from the test environment

    with pytest.raises(ValueError):
        registry.register(make_function(lambda e, s: None, fn_id="one"))


# ===================== RUNNER =====================

def test_runner_retries_and_replays_completed_steps():
    counts = {"fetch": 0, "attempts": 0}

    def handler(event, step):
        counts["attempts"] += 1

        def fetch():
            counts["fetch"] += 1
            return "data"

        data = step.run("fetch", fetch)
        if counts["attempts"] < 3:
            raise RuntimeError("transient")
        return step.run("finish", lambda: data.upper())

    result = FunctionRunner(backoff_seconds=0).execute(make_function(handler), Event(name="test/event"))

    assert result.ok
    assert result.output == "DATA"
    assert result.attempts == 3
    assert counts["fetch"] == 1


def test_runner_exhausts_retries_and_calls_on_failure():
    failures = []

    def handler(event, step):
        raise RuntimeError("always broken")

    event = Event(name="test/event", data={"x": 1})
    function = make_function(handler, retries=2, on_failure=lambda e, err: failures.append((e.id, str(err))))
    result = FunctionRunner(backoff_seconds=0).execute(function, event)

    assert not result.ok
    assert result.attempts == 3
    assert result.error == "always broken"
    assert failures == [(event.id, "always broken")]


def test_non_retriable_error_fails_immediately():
    failures = []

    def handler(event, step):
        raise NonRetriableError("bad input")

    function = make_function(handler, retries=5, on_failure=lambda e, err: failures.append(err))
    result = FunctionRunner(backoff_seconds=0).execute(function, Event(name="test/event"))

    assert result.status == "failed"
    assert result.attempts == 1
    assert isinstance(failures[0], NonRetriableError)


def test_failing_on_failure_hook_is_contained():
    def hook(event, error):
        raise RuntimeError("hook broke")

    function = make_function(lambda e, s: 1 / 0, retries=0, on_failure=hook)
    result = FunctionRunner(backoff_seconds=0).execute(function, Event(name="test/event"))
    assert result.status == "failed"


def test_run_id_is_stable_per_event():
    function = make_function(lambda e, s: None)
    event = Event(name="test/event")
    assert FunctionRunner.run_id_for(function, event) == f"test-fn:{event.id}"


def test_runner_limits_concurrency_per_function():
    active = {"now": 0, "peak": 0}
    lock = threading.Lock()
    release = threading.Event()

    def handler(event, step):
        with lock:
            active["now"] += 1
            active["peak"] = max(active["peak"], active["now"])
        release.wait(timeout=0.2)
        with lock:
            active["now"] -= 1

    runner = FunctionRunner(backoff_seconds=0)
    function = make_function(handler)  # concurrency=2
    threads = [
        threading.Thread(target=runner.execute, args=(function, Event(name="test/event")))
        for _ in range(5)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert active["peak"] <= 2


# ===================== BACKENDS =====================

def make_backend(handler, **kwargs):
    registry = FunctionRegistry()
    registry.register(make_function(handler, **kwargs))
    return LocalBackend(registry_factory=lambda: registry, runner=FunctionRunner(backoff_seconds=0), max_workers=2)


def test_local_backend_runs_synchronously_before_start():
    seen = []
    backend = make_backend(lambda event, step: seen.append(event.data["n"]))

    event = Event(name="test/event", data={"n": 7})
    assert backend.submit(event) == event.id
    assert seen == [7]
    assert backend.health()["mode"] == "synchronous"


def test_local_backend_threaded_mode():
    seen = []
    backend = make_backend(lambda event, step: seen.append(event.data["n"]))
    backend.start()
    assert backend.health()["mode"] == "threaded"

    for n in range(4):
        backend.submit(Event(name="test/event", data={"n": n}))
    backend.stop()

    assert sorted(seen) == [0, 1, 2, 3]
    assert backend.active_runs() == []
    assert backend.health()["mode"] == "synchronous"


def test_unrouted_event_is_ignored():
    seen = []
    backend = make_backend(lambda event, step: seen.append(1))
    backend.submit(Event(name="other/event"))
    assert seen == []


def test_send_event_uses_configured_backend():
    seen = []
    jobs.set_backend(make_backend(lambda event, step: seen.append(event.name)))

    jobs.send_event(Event(name="test/event"))
    assert seen == ["test/event"]


def test_default_backend_is_local():
    backend = jobs.get_backend()
    assert backend.name == "local"
    assert backend is jobs.get_backend()


def test_application_registry_has_both_functions():
    registry = jobs.get_registry()
    assert registry.get("generate-autonomous-proposal").trigger == "app/generate-autonomous-proposal"
    assert registry.get("generate-tender-proposal").trigger == "app/generate-proposal"


def test_celery_task_runs_registered_functions(monkeypatch):
    from bidguard.jobs.tasks import run_event_task

    seen = []
    registry = FunctionRegistry()
    registry.register(make_function(lambda event, step: seen.append(event.data["n"])))
    monkeypatch.setattr(jobs, "get_registry", lambda: registry)

    payload = Event(name="test/event", data={"n": 5}).model_dump(mode="json")
    results = run_event_task.run(payload)

    assert seen == [5]
    assert results == [{"fn_id": "test-fn", "status": "completed", "error": None}]
