from __future__ import annotations

import threading
import time

from utils.background_worker import BackgroundWorker


def _direct(callback, *args):
    callback(*args)


def test_background_worker_delivers_result():
    worker = BackgroundWorker(dispatch=_direct)
    results = []

    worker.submit(lambda value: value * 2, 21, on_success=results.append)
    worker.wait()

    assert results == [42]
    worker.shutdown()


def test_background_worker_delivers_errors():
    worker = BackgroundWorker(dispatch=_direct)
    errors = []

    def failing():
        raise RuntimeError("boom")

    worker.submit(failing, on_error=errors.append)
    worker.wait()

    assert len(errors) == 1
    assert str(errors[0]) == "boom"


def test_background_worker_drops_superseded_results():
    worker = BackgroundWorker(dispatch=_direct)
    release_first = threading.Event()
    results = []

    def slow(value):
        release_first.wait(timeout=2.0)
        return value

    worker.submit(slow, "So", on_success=results.append, key="autocomplete")
    worker.submit(lambda value: value, "Sol", on_success=results.append, key="autocomplete")
    time.sleep(0.1)
    release_first.set()
    worker.wait()

    assert results == ["Sol"]


def test_background_worker_keys_are_independent():
    worker = BackgroundWorker(dispatch=_direct)
    results = []

    worker.submit(lambda: "left", on_success=results.append, key="deck:left")
    worker.submit(lambda: "right", on_success=results.append, key="deck:right")
    worker.wait()

    assert sorted(results) == ["left", "right"]


def test_background_worker_is_stopped():
    worker = BackgroundWorker()

    assert not worker.is_stopped()

    worker.shutdown()

    assert worker.is_stopped()


def test_background_worker_stops_loop():
    worker = BackgroundWorker()
    iterations = []

    def loop_task():
        while not worker.is_stopped():
            iterations.append(1)
            time.sleep(0.05)

    worker.submit(loop_task)
    time.sleep(0.2)

    worker.shutdown(timeout=2.0)

    initial_count = len(iterations)
    time.sleep(0.2)
    final_count = len(iterations)

    assert initial_count > 0
    assert initial_count == final_count


def test_background_worker_context_manager():
    result = []

    with BackgroundWorker(dispatch=_direct) as worker:
        worker.submit(lambda: result.append(1))
        worker.wait()

    assert result == [1]
    assert worker.is_stopped()


def test_background_worker_shutdown_timeout():
    worker = BackgroundWorker()
    started = threading.Event()

    def blocking_task():
        started.set()
        while True:
            time.sleep(0.1)

    worker.submit(blocking_task)
    started.wait(timeout=1.0)

    worker.shutdown(timeout=0.2)

    assert worker.is_stopped()
