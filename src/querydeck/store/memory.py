from __future__ import annotations

from collections.abc import Sequence

from querydeck.models.session import HistoryEntry
from querydeck.store.interface import HistoryStore, OutOfRangeError


class MemoryHistoryStore(HistoryStore):
    # No eviction: entries live as long as the process.
    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def all(self) -> Sequence[HistoryEntry]:
        return list(self._entries)

    def get(self, index: int) -> HistoryEntry:
        if index < 0 or index >= len(self._entries):
            raise OutOfRangeError(index, len(self._entries))
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)
