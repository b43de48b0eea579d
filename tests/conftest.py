"""
Shared test fixtures: scripted converter gateways and service/app factories.
"""

import threading
import time
from typing import Callable, Optional

import pytest

from docling_jobs.jobs import ConversionFailed, ConversionOutcome, Converted, JobService


class FakeConverter:
    """Converter gateway returning `converted:<source>` and recording every call."""

    def __init__(
        self,
        *,
        fail_with: Optional[str] = None,
        raise_exc: Optional[BaseException] = None,
        delay: float = 0.0,
        gate: Optional[threading.Event] = None,
    ) -> None:
        self.fail_with = fail_with
        self.raise_exc = raise_exc
        self.delay = delay
        self.gate = gate
        self.calls: list[tuple] = []
        self._lock = threading.Lock()

    def convert(self, source: str, *args, **kwargs) -> ConversionOutcome:
        with self._lock:
            self.calls.append((source, args, kwargs))
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            return ConversionFailed(self.fail_with)
        return Converted(f"converted:{source}")


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.01)
    raise AssertionError("condition not met in time")


@pytest.fixture
def make_service() -> Callable[..., JobService]:
    def _make(converter, **kwargs) -> JobService:
        kwargs.setdefault("workers", 2)
        return JobService(converter, **kwargs)

    return _make
