from querydeck.store.interface import HistoryStore, OutOfRangeError
from querydeck.store.memory import MemoryHistoryStore

__all__ = ["HistoryStore", "MemoryHistoryStore", "OutOfRangeError"]
