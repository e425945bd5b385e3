"""
History stack management for EditSight.

Implements a linear undo/redo history of immutable image snapshots.
Index 0 always holds the original upload; appending while the cursor is
behind the newest entry discards the redo branch.
"""

import logging
from typing import Dict, List, Optional, Any

from .models import ImageSnapshot
from ..errors import EmptyHistoryError

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    Ordered snapshot stack plus a cursor.

    Not safe for concurrent writers; drive it from one sequence of user
    actions. Navigation never fails, it saturates at either end.
    """

    def __init__(self, max_snapshots: Optional[int] = None):
        """
        Initialize history store.

        Args:
            max_snapshots: Maximum number of snapshots to retain, including
                the original. ``None`` keeps everything.
        """
        if max_snapshots is not None and max_snapshots < 2:
            raise ValueError("max_snapshots must be at least 2 (original plus one edit)")

        self.max_snapshots = max_snapshots
        self._snapshots: List[ImageSnapshot] = []
        self._cursor = -1

    @property
    def snapshots(self) -> List[ImageSnapshot]:
        """Copy of the snapshot sequence, oldest first."""
        return list(self._snapshots)

    @property
    def cursor(self) -> int:
        """Index of the current snapshot, -1 before ``init``."""
        return self._cursor

    @property
    def original(self) -> ImageSnapshot:
        if not self._snapshots:
            raise EmptyHistoryError("History has not been initialized")
        return self._snapshots[0]

    def __len__(self) -> int:
        return len(self._snapshots)

    def is_empty(self) -> bool:
        return not self._snapshots

    def init(self, original: ImageSnapshot) -> None:
        """
        Start a new history whose only entry is the original upload.

        Args:
            original: Snapshot of the unedited upload
        """
        self._snapshots = [original]
        self._cursor = 0
        logger.info(f"Initialized history with original {original.snapshot_id} "
                    f"({original.width}x{original.height})")

    def append(self, snapshot: ImageSnapshot) -> None:
        """
        Push a new snapshot and make it current.

        Every entry after the cursor is dropped first.
        """
        if not self._snapshots:
            raise EmptyHistoryError("Cannot append before the history is initialized")

        discarded = len(self._snapshots) - (self._cursor + 1)
        if discarded:
            del self._snapshots[self._cursor + 1:]
            logger.debug(f"Discarded {discarded} redo snapshot(s)")

        self._snapshots.append(snapshot)
        self._cursor = len(self._snapshots) - 1

        if self.max_snapshots is not None and len(self._snapshots) > self.max_snapshots:
            # Oldest edits go first; the original at index 0 stays
            removed = len(self._snapshots) - self.max_snapshots
            del self._snapshots[1:1 + removed]
            self._cursor -= removed
            logger.debug(f"Trimmed {removed} old snapshot(s) from history")

        logger.debug(f"Appended snapshot {snapshot.snapshot_id} at position {self._cursor}")

    def undo(self) -> Optional[ImageSnapshot]:
        """
        Step back one snapshot.

        Returns:
            The new current snapshot, or None if nothing to undo
        """
        if not self.can_undo():
            logger.debug("Cannot undo: at the original snapshot")
            return None

        self._cursor -= 1
        logger.debug(f"Undo: moved to position {self._cursor}")
        return self._snapshots[self._cursor]

    def redo(self) -> Optional[ImageSnapshot]:
        """
        Step forward one snapshot.

        Returns:
            The new current snapshot, or None if nothing to redo
        """
        if not self.can_redo():
            logger.debug("Cannot redo: at the newest snapshot")
            return None

        self._cursor += 1
        logger.debug(f"Redo: moved to position {self._cursor}")
        return self._snapshots[self._cursor]

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._snapshots) - 1

    def current(self) -> ImageSnapshot:
        """
        Get the snapshot at the cursor.

        Raises:
            EmptyHistoryError: If called before ``init``
        """
        if not self._snapshots:
            raise EmptyHistoryError("History has not been initialized")
        return self._snapshots[self._cursor]

    def reset(self) -> None:
        """Collapse the history back to the original snapshot."""
        if not self._snapshots:
            logger.debug("Reset ignored: history is empty")
            return

        original = self._snapshots[0]
        self._snapshots = [original]
        self._cursor = 0
        logger.info("Reset history to original snapshot")

    def clear(self) -> None:
        """Drop every snapshot, returning to the uninitialized state."""
        self._snapshots = []
        self._cursor = -1
        logger.info("Cleared history")

    def get_history_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the current history state.

        Returns:
            History summary with snapshot metadata
        """
        return {
            'total_snapshots': len(self._snapshots),
            'current_position': self._cursor,
            'can_undo': self.can_undo(),
            'can_redo': self.can_redo(),
            'snapshots': [snapshot.summary() for snapshot in self._snapshots],
        }
