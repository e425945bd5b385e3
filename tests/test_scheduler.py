"""
Tests for the latest-wins adjustment scheduler.
"""

import threading
import time

import pytest

from editsight.preview.scheduler import AdjustmentScheduler
from editsight.processing.models import AdjustmentVector

from conftest import solid_buffer


class GatedEngine:
    """Engine stand-in whose first render blocks until released."""

    def __init__(self, fail=False):
        self.gate = threading.Event()
        self.started = threading.Event()
        self.calls = []
        self.fail = fail

    def apply(self, source, adjustments):
        self.calls.append(adjustments)
        if len(self.calls) == 1:
            self.started.set()
            self.gate.wait(5)
        if self.fail:
            raise RuntimeError("render exploded")
        return source


class Recorder:
    def __init__(self):
        self.committed = []

    def __call__(self, result, adjustments):
        self.committed.append(adjustments)


@pytest.fixture
def recorder():
    return Recorder()


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestLatestWins:

    def test_stale_result_discarded(self, recorder):
        """Test a superseded render is never committed."""
        engine = GatedEngine()
        scheduler = AdjustmentScheduler(engine, recorder, debounce_seconds=0, max_workers=1)
        source = solid_buffer(4, 4)
        try:
            first = scheduler.submit(source, AdjustmentVector(exposure=10))
            assert engine.started.wait(5)
            second = scheduler.submit(source, AdjustmentVector(exposure=20))
            engine.gate.set()
            assert scheduler.wait_idle(timeout=5)
        finally:
            scheduler.shutdown()

        assert second == first + 1
        assert recorder.committed == [AdjustmentVector(exposure=20)]
        stats = scheduler.get_stats()
        assert stats['stale_results_discarded'] == 1
        assert stats['results_committed'] == 1

    def test_debounce_collapses_requests(self, recorder):
        """Test rapid requests collapse to the latest."""
        engine = GatedEngine()
        engine.gate.set()
        scheduler = AdjustmentScheduler(engine, recorder, debounce_seconds=10)
        source = solid_buffer(4, 4)
        try:
            for value in (10, 20, 30):
                scheduler.submit(source, AdjustmentVector(contrast=value))
            assert scheduler.get_stats()['pending']

            scheduler.flush()
            assert scheduler.wait_idle(timeout=5)
        finally:
            scheduler.shutdown()

        assert engine.calls == [AdjustmentVector(contrast=30)]
        assert recorder.committed == [AdjustmentVector(contrast=30)]
        stats = scheduler.get_stats()
        assert stats['requests_submitted'] == 3
        assert stats['renders_started'] == 1

    def test_timer_dispatches(self, recorder):
        """Test the debounce timer dispatches on its own."""
        engine = GatedEngine()
        engine.gate.set()
        scheduler = AdjustmentScheduler(engine, recorder, debounce_seconds=0.01)
        try:
            scheduler.submit(solid_buffer(2, 2), AdjustmentVector(tint=5))
            assert wait_for(lambda: recorder.committed)
        finally:
            scheduler.shutdown()

        assert recorder.committed == [AdjustmentVector(tint=5)]


class TestFailuresAndShutdown:

    def test_render_error_reported(self, recorder):
        """Test engine failures reach on_error."""
        engine = GatedEngine(fail=True)
        engine.gate.set()
        errors = []
        scheduler = AdjustmentScheduler(engine, recorder, debounce_seconds=0,
                                        on_error=lambda e, gen: errors.append((e, gen)))
        try:
            generation = scheduler.submit(solid_buffer(2, 2), AdjustmentVector(exposure=1))
            assert scheduler.wait_idle(timeout=5)
        finally:
            scheduler.shutdown()

        assert recorder.committed == []
        assert len(errors) == 1
        assert errors[0][1] == generation
        assert isinstance(scheduler.last_error, RuntimeError)
        assert scheduler.get_stats()['renders_failed'] == 1

    def test_commit_error_reported(self):
        """Test exceptions from the commit callback reach on_error."""
        engine = GatedEngine()
        engine.gate.set()
        errors = []

        def failing_commit(result, adjustments):
            raise RuntimeError("history is empty")

        scheduler = AdjustmentScheduler(engine, failing_commit, debounce_seconds=0,
                                        on_error=lambda e, gen: errors.append((e, gen)))
        try:
            generation = scheduler.submit(solid_buffer(2, 2), AdjustmentVector(exposure=1))
            assert scheduler.wait_idle(timeout=5)
        finally:
            scheduler.shutdown()

        assert len(errors) == 1
        assert errors[0][1] == generation
        assert isinstance(scheduler.last_error, RuntimeError)
        stats = scheduler.get_stats()
        assert stats['commits_failed'] == 1
        assert stats['results_committed'] == 0
        assert stats['renders_failed'] == 0

    def test_submit_after_shutdown(self, recorder):
        """Test submitting after shutdown fails."""
        scheduler = AdjustmentScheduler(GatedEngine(), recorder)
        scheduler.shutdown()
        with pytest.raises(RuntimeError):
            scheduler.submit(solid_buffer(1, 1), AdjustmentVector())

    def test_shutdown_drops_pending(self, recorder):
        """Test shutdown cancels the pending request."""
        engine = GatedEngine()
        scheduler = AdjustmentScheduler(engine, recorder, debounce_seconds=10)
        scheduler.submit(solid_buffer(1, 1), AdjustmentVector(exposure=5))
        scheduler.shutdown()

        assert engine.calls == []
        assert not scheduler.get_stats()['pending']

    def test_from_config(self, recorder):
        """Test building from config."""
        config = {'scheduler': {'debounce_seconds': 0.5, 'max_workers': 2}}
        scheduler = AdjustmentScheduler.from_config(GatedEngine(), recorder, config)
        try:
            assert scheduler.debounce_seconds == 0.5
        finally:
            scheduler.shutdown()
