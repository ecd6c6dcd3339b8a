"""
History stack management for Darkroom.

Implements undo/redo over immutable state snapshots. Because edit settings
are frozen dataclasses, a snapshot only shares references with its
neighbours; nothing is deep-copied.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar


logger = logging.getLogger(__name__)

StateT = TypeVar('StateT')


@dataclass(frozen=True)
class HistoryEntry(Generic[StateT]):
    """A committed state plus what produced it."""
    state: StateT
    description: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class HistoryStack(Generic[StateT]):
    """
    Linear undo/redo history.

    Features:
    - One entry per committed change
    - Committing after an undo drops the redo branch
    - Oldest entries are trimmed past ``max_entries``
    """

    def __init__(self, max_entries: int = 100):
        """
        Initialize history stack.

        Args:
            max_entries: Maximum number of entries to retain (including the
                initial state)
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self.entries: List[HistoryEntry[StateT]] = []
        self.position = -1

        logger.debug(f"Initialized history stack: max_entries={max_entries}")

    def initialize(self, state: StateT, description: str = "Session Start") -> None:
        """Reset the history to a single initial state."""
        self.entries = [HistoryEntry(state, description)]
        self.position = 0

    def push(self, state: StateT, description: str) -> None:
        """
        Commit a new state.

        Args:
            state: Immutable state after the change
            description: Human-readable description of the change
        """
        if self.position < len(self.entries) - 1:
            dropped = len(self.entries) - 1 - self.position
            self.entries = self.entries[:self.position + 1]
            logger.debug(f"Discarded {dropped} redo entries")

        self.entries.append(HistoryEntry(state, description))

        if len(self.entries) > self.max_entries:
            removed_count = len(self.entries) - self.max_entries
            self.entries = self.entries[removed_count:]
            logger.debug(f"Trimmed {removed_count} old entries from history")

        self.position = len(self.entries) - 1
        logger.debug(f"Added history entry: {description}")

    @property
    def current(self) -> Optional[StateT]:
        if self.position < 0:
            return None
        return self.entries[self.position].state

    def can_undo(self) -> bool:
        return self.position > 0

    def can_redo(self) -> bool:
        return 0 <= self.position < len(self.entries) - 1

    def undo(self) -> Optional[StateT]:
        """
        Step back one entry.

        Returns:
            The restored state, or None if nothing to undo
        """
        if not self.can_undo():
            logger.debug("Cannot undo: no previous entries")
            return None
        self.position -= 1
        logger.debug(f"Undo: moved to position {self.position}")
        return self.entries[self.position].state

    def redo(self) -> Optional[StateT]:
        """
        Step forward one entry.

        Returns:
            The restored state, or None if nothing to redo
        """
        if not self.can_redo():
            logger.debug("Cannot redo: no future entries")
            return None
        self.position += 1
        logger.debug(f"Redo: moved to position {self.position}")
        return self.entries[self.position].state

    def __len__(self) -> int:
        return len(self.entries)

    def get_history_summary(self) -> Dict[str, Any]:
        """Summary of the stack for display."""
        return {
            'total_entries': len(self.entries),
            'position': self.position,
            'can_undo': self.can_undo(),
            'can_redo': self.can_redo(),
            'descriptions': [entry.description for entry in self.entries],
        }
