from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from loguru import logger

__all__ = ["BackgroundWorker"]

Dispatcher = Callable[..., Any]


def _wx_call_after(callback: Callable, *args: Any) -> None:
    """Marshal callback to UI thread if wx is available, otherwise call directly."""
    try:
        import wx

        wx.CallAfter(callback, *args)
    except ImportError:
        callback(*args)


class BackgroundWorker:
    """Manages background worker threads with lifecycle control and graceful shutdown.

    Run blocking work in threads and marshal callbacks onto the UI thread.

    Submissions may carry a ``key``. Only the most recent submission for a key
    delivers its callbacks; results of superseded submissions are dropped, so
    a slow autocomplete for "So" can never overwrite the answer for "Sol".
    """

    def __init__(self, dispatch: Dispatcher | None = None) -> None:
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}
        self._dispatch = dispatch or _wx_call_after

    def submit(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        key: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Submit a task to run in a background thread.

        Args:
            func: The function to execute
            *args: Positional arguments for func
            on_success: Optional callback for successful completion (marshaled to UI thread)
            on_error: Optional callback for errors (marshaled to UI thread)
            key: Optional supersession key; a later submit with the same key drops this result
            **kwargs: Keyword arguments for func

        For long-running tasks, the function should periodically check self.is_stopped()
        and exit when True.
        """
        generation = self._next_generation(key)

        def wrapper():
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.exception(f"Background task failed: {exc}")
                if on_error and self._is_current(key, generation):
                    self._dispatch(on_error, exc)
                return

            if not self._is_current(key, generation):
                logger.debug(f"Dropping superseded result for '{key}'")
                return
            if on_success:
                self._dispatch(on_success, result)

        thread = threading.Thread(target=wrapper, daemon=True)
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        logger.debug(f"Started background thread: {getattr(func, '__name__', func)}")

    def _next_generation(self, key: str | None) -> int:
        if key is None:
            return 0
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
        return generation

    def _is_current(self, key: str | None, generation: int) -> bool:
        if key is None:
            return True
        with self._lock:
            return self._generations.get(key) == generation

    def is_stopped(self) -> bool:
        """Check if executor has been stopped."""
        return self._stop_event.is_set()

    def wait(self, timeout: float = 5.0) -> None:
        """Block until every submitted thread has finished (or ``timeout`` per thread)."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout=timeout)

    def shutdown(self, timeout: float = 10.0) -> None:
        """Signal all threads to stop and wait for them to finish."""
        logger.info("Shutting down background worker...")
        self._stop_event.set()

        with self._lock:
            threads = list(self._threads)

        for thread in threads:
            if thread.is_alive():
                logger.debug(f"Waiting for thread {thread.name} to finish...")
                thread.join(timeout=timeout)
                if thread.is_alive():
                    logger.warning(f"Thread {thread.name} did not finish within {timeout}s")

        logger.info("Background worker shutdown complete")

    def __enter__(self) -> BackgroundWorker:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
