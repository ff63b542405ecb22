"""Root-level pytest fixtures for all tests.

This module provides fixtures that are available to all tests in the project.
"""

import sys
from unittest import mock

# Mock wx before any imports that might need it (for Linux/headless environments)
if "wx" not in sys.modules:
    wx_mock = mock.MagicMock()
    wx_mock.ALL = 1024
    wx_mock.EXPAND = 2048
    wx_mock.OK = 131072
    wx_mock.ICON_WARNING = 524288
    wx_mock.ICON_ERROR = 1048576
    wx_mock.Colour = mock.Mock(return_value=mock.MagicMock())
    sys.modules["wx"] = wx_mock
    sys.modules["wx.adv"] = wx_mock.adv

from datetime import UTC, datetime, timedelta

import pytest
from PIL import Image
from test_helpers import reset_all_globals

from navigators.scryfall import CardArtOption
from repositories.usage_repository import UsageRepository


@pytest.fixture(autouse=True)
def reset_global_state():
    """Automatically reset all global service and repository instances after each test.

    This fixture ensures test isolation by resetting all singleton instances
    to None after each test completes, preventing state leakage between tests.
    """
    yield
    reset_all_globals()


class SteppingClock:
    """Clock that advances one minute on every call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 10, 19, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(minutes=1)
        return current


class ImmediateWorker:
    """BackgroundWorker stand-in that runs every task inline."""

    def __init__(self) -> None:
        self.keys: list[str | None] = []
        self.stopped = False

    def submit(self, func, *args, on_success=None, on_error=None, key=None, **kwargs):
        self.keys.append(key)
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            if on_error:
                on_error(exc)
            return
        if on_success:
            on_success(result)

    def shutdown(self, timeout: float = 10.0) -> None:
        self.stopped = True


class DeferredWorker:
    """BackgroundWorker stand-in that queues tasks until ``run_pending`` is called.

    Like the real worker, only the newest task per ``key`` delivers its result.
    """

    def __init__(self) -> None:
        self.queue: list[tuple] = []
        self.generations: dict[str, int] = {}
        self.stopped = False

    def submit(self, func, *args, on_success=None, on_error=None, key=None, **kwargs):
        generation = None
        if key is not None:
            generation = self.generations.get(key, 0) + 1
            self.generations[key] = generation
        self.queue.append((func, args, kwargs, on_success, on_error, key, generation))

    def run_pending(self) -> None:
        while self.queue:
            func, args, kwargs, on_success, on_error, key, generation = self.queue.pop(0)
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                outcome, callback = exc, on_error
            else:
                outcome, callback = result, on_success
            if key is not None and self.generations.get(key) != generation:
                continue
            if callback:
                callback(outcome)

    def shutdown(self, timeout: float = 10.0) -> None:
        self.stopped = True


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def usage_repo(tmp_path, clock):
    return UsageRepository(db_path=tmp_path / "usage.db", clock=clock)


@pytest.fixture
def immediate_worker():
    return ImmediateWorker()


@pytest.fixture
def deferred_worker():
    return DeferredWorker()


@pytest.fixture
def art_options():
    return [
        CardArtOption(
            "https://cards.scryfall.io/art_crop/front/a/sol1.jpg", "C21", "print-1", "Mike Bierek"
        ),
        CardArtOption(
            "https://cards.scryfall.io/art_crop/front/b/sol2.jpg", "LEA", "print-2", "Mark Tedin"
        ),
    ]


@pytest.fixture
def make_image():
    def _make(width: int = 626, height: int = 457, color: str = "#3366CC") -> Image.Image:
        return Image.new("RGBA", (width, height), color)

    return _make
