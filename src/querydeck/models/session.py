from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Rows as returned by the gateway: column name -> value, gateway order preserved.
QueryResult = list[dict[str, Any]]


class SessionPhase(str, Enum):
    idle = "idle"
    awaiting_confirmation = "awaiting_confirmation"
    executing = "executing"


class ConnectionCoordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str = Field(default="", max_length=200)
    instance_id: str = Field(default="", max_length=200)
    database_id: str = Field(default="", max_length=200)

    @property
    def is_complete(self) -> bool:
        return bool(self.project_id and self.instance_id and self.database_id)


class HistoryEntry(BaseModel):
    """Snapshot of one successful execution."""

    model_config = ConfigDict(frozen=True)

    query: str
    results: QueryResult = Field(default_factory=list)
    timestamp: datetime


NotificationLevel = Literal["info", "success", "error"]


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: NotificationLevel
    title: str
    message: str
    created_at: datetime


class SessionSnapshot(BaseModel):
    """Read-only view of the session handed to UI callers."""

    model_config = ConfigDict(frozen=True)

    phase: SessionPhase
    query: str
    results: QueryResult
    connection: ConnectionCoordinates
    instances: list[str]
    databases: list[str]
    multiline_layout: bool
    confirm_before_execute: bool
    history_size: int
    notifications: list[Notification]


class UpdateQueryRequest(BaseModel):
    query: str


class UpdateConnectionRequest(BaseModel):
    project_id: str = Field(default="", max_length=200)
    instance_id: str = Field(default="", max_length=200)
    database_id: str = Field(default="", max_length=200)


class ToggleSettingRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    value: bool
