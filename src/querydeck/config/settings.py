from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from querydeck.models.session import ConnectionCoordinates


class FormattingSettings(BaseModel):
    multiline_layout: bool = True


class ExecutionSettings(BaseModel):
    confirm_before_execute: bool = True


class GatewayConfig(BaseModel):
    type: str = Field(default="spanner", description="Gateway type for backend selection")
    # Optional Spanner emulator address (host:port); forwarded as SPANNER_EMULATOR_HOST.
    emulator_host: str | None = None


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    formatting: FormattingSettings = Field(default_factory=FormattingSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    connection: ConnectionCoordinates = Field(default_factory=ConnectionCoordinates)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3040",
            "http://127.0.0.1:3040",
        ]
    )

    def __init__(self, **data: Any) -> None:
        super().__init__(**data)
        # Manually override from environment variables
        overrides = {
            "project_id": os.environ.get("QUERYDECK_PROJECT_ID"),
            "instance_id": os.environ.get("QUERYDECK_INSTANCE_ID"),
            "database_id": os.environ.get("QUERYDECK_DATABASE_ID"),
        }
        overrides = {key: value for key, value in overrides.items() if value}
        if overrides:
            self.connection = self.connection.model_copy(update=overrides)
