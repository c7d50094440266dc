"""Cloud Spanner gateway.

Wraps the blocking google-cloud-spanner client. Calls run in a worker thread so the
session's event loop stays responsive while a query is in flight.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Sequence
from typing import Any

from querydeck.config.settings import GatewayConfig
from querydeck.gateway.interface import GatewayError
from querydeck.models.session import QueryResult

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


def _default_client_factory(project_id: str) -> Any:
    # Imported lazily; the client library is slow to import.
    from google.cloud import spanner

    return spanner.Client(project=project_id)


def _require(operation: str, **values: str) -> None:
    missing = [name for name, value in values.items() if not value or not value.strip()]
    if missing:
        raise GatewayError(operation, f"missing {', '.join(missing)}")


def _unique_columns(names: Sequence[str]) -> list[str]:
    """Suffix repeated column names (``id``, ``id_2``) so no value is dropped from a row."""
    used: set[str] = set()
    columns: list[str] = []
    for name in names:
        candidate, suffix = name, 1
        while candidate in used:
            suffix += 1
            candidate = f"{name}_{suffix}"
        if candidate != name:
            logger.warning("Duplicate result column %r renamed to %r", name, candidate)
        used.add(candidate)
        columns.append(candidate)
    return columns


class SpannerGateway:
    """Execution gateway backed by Cloud Spanner."""

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config or GatewayConfig()
        self._client_factory = client_factory or _default_client_factory
        self._clients: dict[str, Any] = {}

    @property
    def gateway_type(self) -> str:
        return "spanner"

    def _client(self, project_id: str) -> Any:
        client = self._clients.get(project_id)
        if client is None:
            if self._config.emulator_host:
                os.environ.setdefault("SPANNER_EMULATOR_HOST", self._config.emulator_host)
            client = self._client_factory(project_id)
            self._clients[project_id] = client
        return client

    async def _call(self, operation: str, func: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(func)
        except GatewayError:
            raise
        except Exception as e:
            logger.error("Spanner %s failed: %s", operation, e, exc_info=True)
            raise GatewayError(operation, str(e) or type(e).__name__) from e

    async def list_instances(self, project_id: str) -> Sequence[str]:
        _require("list_instances", project_id=project_id)

        def _list() -> list[str]:
            return [inst.instance_id for inst in self._client(project_id).list_instances()]

        instances: list[str] = await self._call("list_instances", _list)
        logger.debug("Fetched %d instances for project %s", len(instances), project_id)
        return instances

    async def list_databases(self, project_id: str, instance_id: str) -> Sequence[str]:
        _require("list_databases", project_id=project_id, instance_id=instance_id)

        def _list() -> list[str]:
            instance = self._client(project_id).instance(instance_id)
            return [db.database_id for db in instance.list_databases()]

        databases: list[str] = await self._call("list_databases", _list)
        return databases

    async def execute_query(
        self, project_id: str, instance_id: str, database_id: str, query_text: str
    ) -> QueryResult:
        _require(
            "execute_query",
            project_id=project_id,
            instance_id=instance_id,
            database_id=database_id,
            query=query_text,
        )

        def _run() -> QueryResult:
            database = self._client(project_id).instance(instance_id).database(database_id)
            with database.snapshot() as snapshot:
                results = snapshot.execute_sql(query_text)
                rows = list(results)
                # Field metadata is only populated once the stream has been consumed.
                names = [field.name for field in results.fields] if rows else []
            columns = _unique_columns(names)
            return [dict(zip(columns, row, strict=True)) for row in rows]

        rows: QueryResult = await self._call("execute_query", _run)
        logger.info("Query returned %d rows from %s/%s", len(rows), instance_id, database_id)
        return rows
