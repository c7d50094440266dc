from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from querydeck.models.session import HistoryEntry


class OutOfRangeError(IndexError):
    """Raised when a history index does not name a stored entry."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"history index {index} out of range (size {size})")
        self.index = index
        self.size = size


class HistoryStore(Protocol):
    def append(self, entry: HistoryEntry) -> None:
        """Append an entry. Never reorders or deduplicates."""
        ...

    def all(self) -> Sequence[HistoryEntry]:
        """Return every entry in insertion order."""
        ...

    def get(self, index: int) -> HistoryEntry:
        """Return the entry at ``index``.

        Raises:
            OutOfRangeError: If ``index`` is negative or past the end.
        """
        ...

    def __len__(self) -> int: ...
