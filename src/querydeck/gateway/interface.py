"""Execution gateway interface.

The gateway performs the actual work against the remote data service. The session
manager only sees success values or ``GatewayError``; backend-specific error payloads
are never interpreted beyond that.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from querydeck.models.session import QueryResult


class GatewayError(Exception):
    """Any failure reported by an execution gateway (network, auth, bad query, backend)."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message


class ExecutionGateway(Protocol):
    """Protocol for data service backends.

    Every call returns a single logical outcome: the value, or a raised GatewayError.
    """

    @property
    def gateway_type(self) -> str:
        """Return the backend this gateway talks to (e.g., 'spanner')."""
        ...

    async def list_instances(self, project_id: str) -> Sequence[str]:
        """List instance ids visible in a project."""
        ...

    async def list_databases(self, project_id: str, instance_id: str) -> Sequence[str]:
        """List database ids in an instance."""
        ...

    async def execute_query(
        self, project_id: str, instance_id: str, database_id: str, query_text: str
    ) -> QueryResult:
        """Run a query and return its rows in backend order."""
        ...
