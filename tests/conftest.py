from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from querydeck.gateway.interface import GatewayError
from querydeck.models.session import QueryResult


class FakeGateway:
    """In-memory gateway recording every call."""

    def __init__(self) -> None:
        self.rows: QueryResult = [{"id": 1, "name": "alpha"}, {"id": 2, "name": "beta"}]
        self.instances: list[str] = ["instance-a", "instance-b"]
        self.databases: list[str] = ["db-1"]
        self.fail_with: BaseException | None = None
        self.fail_listing: GatewayError | None = None
        self.release: asyncio.Event | None = None
        self.listing_gates: dict[str, asyncio.Event] = {}
        self.instances_by_project: dict[str, list[str]] = {}
        self.databases_by_instance: dict[str, list[str]] = {}
        self.on_execute: Callable[[], Any] | None = None
        self.observed: list[Any] = []
        self.calls: list[tuple[str, ...]] = []

    @property
    def gateway_type(self) -> str:
        return "fake"

    async def list_instances(self, project_id: str) -> Sequence[str]:
        self.calls.append(("list_instances", project_id))
        gate = self.listing_gates.get(project_id)
        if gate is not None:
            await gate.wait()
        if self.fail_listing is not None:
            raise self.fail_listing
        return list(self.instances_by_project.get(project_id, self.instances))

    async def list_databases(self, project_id: str, instance_id: str) -> Sequence[str]:
        self.calls.append(("list_databases", project_id, instance_id))
        gate = self.listing_gates.get(f"{project_id}/{instance_id}")
        if gate is not None:
            await gate.wait()
        if self.fail_listing is not None:
            raise self.fail_listing
        return list(self.databases_by_instance.get(f"{project_id}/{instance_id}", self.databases))

    async def execute_query(
        self, project_id: str, instance_id: str, database_id: str, query_text: str
    ) -> QueryResult:
        self.calls.append(("execute_query", project_id, instance_id, database_id, query_text))
        if self.on_execute is not None:
            self.observed.append(self.on_execute())
        if self.release is not None:
            await self.release.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return [dict(row) for row in self.rows]

    @property
    def executed(self) -> list[str]:
        return [call[4] for call in self.calls if call[0] == "execute_query"]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
