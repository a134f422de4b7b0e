"""
Tests for core.resilience.retry — bounded retry on optimistic conflicts.
"""

import pytest

from core.resilience import retry_on_conflict
from core.storage.errors import ConcurrentModificationError, StorageUnavailableError


class Flaky:
    def __init__(self, failures, exc=ConcurrentModificationError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc("conflict")
        return "ok"


class TestRetryOnConflict:
    def test_first_try_success(self):
        op = Flaky(0)
        assert retry_on_conflict(op, attempts=3) == "ok"
        assert op.calls == 1

    def test_recovers_after_conflicts(self):
        op = Flaky(2)
        delays = []
        assert retry_on_conflict(op, attempts=3, backoff_seconds=0.01, sleep=delays.append) == "ok"
        assert op.calls == 3
        assert delays == [0.01, 0.02]

    def test_gives_up_and_reraises(self):
        op = Flaky(10)
        with pytest.raises(ConcurrentModificationError):
            retry_on_conflict(op, attempts=4, sleep=lambda _: None)
        assert op.calls == 4

    def test_zero_backoff_never_sleeps(self):
        op = Flaky(1)
        delays = []
        retry_on_conflict(op, attempts=2, sleep=delays.append)
        assert delays == []

    def test_storage_unavailable_not_retried(self):
        op = Flaky(1, exc=StorageUnavailableError)
        with pytest.raises(StorageUnavailableError):
            retry_on_conflict(op, attempts=5)
        assert op.calls == 1

    @pytest.mark.parametrize("attempts", [0, -1, 1.5])
    def test_invalid_attempts(self, attempts):
        with pytest.raises(ValueError):
            retry_on_conflict(lambda: None, attempts=attempts)
