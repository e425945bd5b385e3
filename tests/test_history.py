"""
Tests for the undo/redo history store.
"""

import pytest

from editsight.errors import EmptyHistoryError
from editsight.processing.history import HistoryStore
from editsight.processing.models import ImageSnapshot

from conftest import solid_buffer


def snapshot(value, description=""):
    return ImageSnapshot.create(solid_buffer(2, 2, (value, value, value, 255)), description)


@pytest.fixture
def history():
    store = HistoryStore()
    store.init(snapshot(0, "original"))
    return store


class TestHistoryBasics:

    def test_uninitialized(self):
        """Test a fresh store before init."""
        store = HistoryStore()
        assert store.is_empty()
        assert store.cursor == -1
        assert not store.can_undo()
        assert not store.can_redo()
        with pytest.raises(EmptyHistoryError):
            store.current()
        with pytest.raises(EmptyHistoryError):
            store.original

    def test_append_before_init(self):
        """Test appending without an original fails."""
        with pytest.raises(EmptyHistoryError):
            HistoryStore().append(snapshot(1))

    def test_init(self, history):
        """Test init leaves only the original."""
        assert len(history) == 1
        assert history.cursor == 0
        assert history.current().description == "original"

    def test_append_moves_cursor(self, history):
        """Test append makes the new snapshot current."""
        s1 = snapshot(1)
        history.append(s1)
        assert history.cursor == 1
        assert history.current() is s1
        assert history.can_undo()
        assert not history.can_redo()

    def test_invalid_max_snapshots(self):
        """Test a limit below two is rejected."""
        with pytest.raises(ValueError):
            HistoryStore(max_snapshots=1)


class TestUndoRedo:

    def test_round_trip(self, history):
        """Test undo and redo walk the same snapshots."""
        s1, s2 = snapshot(1), snapshot(2)
        history.append(s1)
        history.append(s2)

        assert history.undo() is s1
        assert history.undo() is history.original
        assert history.redo() is s1
        assert history.redo() is s2

    def test_undo_saturates_at_original(self, history):
        """Test undo at the original is a no-op."""
        assert history.undo() is None
        assert history.cursor == 0
        assert history.current() is history.original

    def test_redo_saturates_at_newest(self, history):
        """Test redo at the newest snapshot is a no-op."""
        history.append(snapshot(1))
        assert history.redo() is None
        assert history.cursor == 1

    def test_append_discards_redo_branch(self, history):
        """Test appending after undo drops the redo branch."""
        s0 = history.original
        s1, s2, s3, s4 = snapshot(1), snapshot(2), snapshot(3), snapshot(4)
        for s in (s1, s2, s3):
            history.append(s)

        history.undo()
        history.undo()
        history.append(s4)

        assert history.snapshots == [s0, s1, s4]
        assert history.cursor == 2
        assert not history.can_redo()

    def test_snapshots_are_a_copy(self, history):
        """Test the snapshot list cannot be mutated from outside."""
        history.snapshots.append(snapshot(9))
        assert len(history) == 1


class TestResetAndLimits:

    def test_reset_keeps_original_only(self, history):
        """Test reset collapses to the original."""
        history.append(snapshot(1))
        history.append(snapshot(2))
        original = history.original

        history.reset()

        assert history.snapshots == [original]
        assert history.cursor == 0
        assert history.current() is original

    def test_reset_on_empty_history(self):
        """Test reset before init does nothing."""
        store = HistoryStore()
        store.reset()
        assert store.is_empty()

    def test_clear(self, history):
        """Test clear returns to the uninitialized state."""
        history.append(snapshot(1))
        history.clear()
        assert history.is_empty()
        assert history.cursor == -1

    def test_max_snapshots_trims_oldest_edits(self):
        """Test the limit drops oldest edits but keeps the original."""
        store = HistoryStore(max_snapshots=3)
        original = snapshot(0)
        store.init(original)
        edits = [snapshot(i) for i in range(1, 5)]
        for s in edits:
            store.append(s)

        assert store.snapshots == [original, edits[2], edits[3]]
        assert store.cursor == 2
        assert store.original is original

    def test_summary(self, history):
        """Test the history summary."""
        history.append(snapshot(1, "Adjustments"))
        history.undo()

        summary = history.get_history_summary()

        assert summary['total_snapshots'] == 2
        assert summary['current_position'] == 0
        assert summary['can_undo'] is False
        assert summary['can_redo'] is True
        assert summary['snapshots'][1]['description'] == "Adjustments"
