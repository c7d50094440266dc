from querydeck.models.session import (
    ConnectionCoordinates,
    HistoryEntry,
    Notification,
    QueryResult,
    SessionPhase,
    SessionSnapshot,
    ToggleSettingRequest,
    UpdateConnectionRequest,
    UpdateQueryRequest,
)

__all__ = [
    "ConnectionCoordinates",
    "HistoryEntry",
    "Notification",
    "QueryResult",
    "SessionPhase",
    "SessionSnapshot",
    "ToggleSettingRequest",
    "UpdateConnectionRequest",
    "UpdateQueryRequest",
]
