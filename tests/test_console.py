from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from conftest import FakeGateway
from rich.console import Console

from querydeck.cli import ui
from querydeck.cli.console import QueryConsole
from querydeck.config.settings import ExecutionSettings
from querydeck.export.clipboard import ClipboardError
from querydeck.models.session import ConnectionCoordinates, SessionPhase
from querydeck.session.manager import SessionManager, SessionState


class Harness:
    def __init__(self, gateway: FakeGateway, *, confirm: bool = False) -> None:
        self.output = io.StringIO()
        self.answers: list[bool] = []
        self.questions: list[str] = []
        self.copied: list[str] = []
        self.copy_error: ClipboardError | None = None
        state = SessionState(
            connection=ConnectionCoordinates(
                project_id="proj", instance_id="inst", database_id="db"
            ),
            execution=ExecutionSettings(confirm_before_execute=confirm),
        )
        self.manager = SessionManager(gateway, state=state)
        self.console = QueryConsole(
            self.manager,
            console=Console(file=self.output, theme=ui.theme, width=200, color_system=None),
            ask_confirm=self._ask,
            copy=self._copy,
        )

    def _ask(self, question: str) -> bool:
        self.questions.append(question)
        return self.answers.pop(0)

    def _copy(self, text: str) -> None:
        if self.copy_error is not None:
            raise self.copy_error
        self.copied.append(text)

    async def feed(self, *lines: str) -> bool:
        keep_going = True
        for line in lines:
            keep_going = await self.console.handle_line(line)
        return keep_going

    @property
    def text(self) -> str:
        return self.output.getvalue()


@pytest.mark.asyncio
async def test_statement_spanning_lines_executes_once(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    await harness.feed("select *", "from users")
    assert gateway.calls == []
    assert harness.console.prompt.strip() == "...>"

    await harness.feed("where id = 1;")

    assert gateway.executed == ["select *\nfrom users\nwhere id = 1"]
    assert "2 rows returned" in harness.text
    assert harness.console.prompt == "querydeck> "


@pytest.mark.asyncio
async def test_declined_confirmation_cancels(gateway: FakeGateway) -> None:
    harness = Harness(gateway, confirm=True)
    harness.answers = [False]

    await harness.feed("DELETE FROM users;")

    assert harness.questions == ["Are you sure you want to execute this query?"]
    assert gateway.calls == []
    assert harness.manager.phase == SessionPhase.idle
    assert "Execution cancelled." in harness.text


@pytest.mark.asyncio
async def test_accepted_confirmation_executes(gateway: FakeGateway) -> None:
    harness = Harness(gateway, confirm=True)
    harness.answers = [True]

    await harness.feed("SELECT 1;")

    assert gateway.executed == ["SELECT 1"]
    assert len(harness.manager.history) == 1


@pytest.mark.asyncio
async def test_failed_query_renders_no_results(gateway: FakeGateway) -> None:
    from querydeck.gateway.interface import GatewayError

    gateway.fail_with = GatewayError("execute_query", "bad")
    harness = Harness(gateway)

    await harness.feed("SELECT 1;")

    assert "rows returned" not in harness.text
    assert harness.manager.notifications[-1].level == "error"


@pytest.mark.asyncio
async def test_format_and_buffer(gateway: FakeGateway) -> None:
    harness = Harness(gateway)
    harness.manager.set_query("select a from t")

    await harness.feed("\\format")

    assert harness.manager.query == "SELECT a\nFROM t"
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_set_toggles_settings(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    await harness.feed("\\set multiline off", "\\set confirm on")

    assert harness.manager.formatting.multiline_layout is False
    assert harness.manager.execution.confirm_before_execute is True
    assert "confirm before execution: on" in harness.text


@pytest.mark.asyncio
async def test_set_rejects_bad_value(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    await harness.feed("\\set confirm maybe")

    assert harness.manager.execution.confirm_before_execute is False
    assert "Expected on or off" in harness.text


@pytest.mark.asyncio
async def test_rerun_and_show(gateway: FakeGateway) -> None:
    harness = Harness(gateway)
    await harness.feed("SELECT 1;", "SELECT 2;")

    await harness.feed("\\rerun 1", "\\show 3")

    assert gateway.executed == ["SELECT 1", "SELECT 2", "SELECT 1"]
    assert [entry.query for entry in harness.manager.history] == [
        "SELECT 1",
        "SELECT 2",
        "SELECT 1",
    ]


@pytest.mark.asyncio
async def test_show_out_of_range(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    await harness.feed("\\show 4", "\\rerun x")

    assert "No history entry #4." in harness.text
    assert "Expected a history entry number." in harness.text
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_copy_query_and_results(gateway: FakeGateway) -> None:
    harness = Harness(gateway)
    await harness.feed("SELECT id FROM t;")

    await harness.feed("\\copy", "\\copy results", "\\copy 1")

    assert harness.copied[0] == "SELECT id FROM t"
    assert json.loads(harness.copied[1]) == [
        {"id": 1, "name": "alpha"},
        {"id": 2, "name": "beta"},
    ]
    assert harness.copied[2] == harness.copied[1]
    assert "Results copied to clipboard" in harness.text


@pytest.mark.asyncio
async def test_copy_failure_is_reported(gateway: FakeGateway) -> None:
    harness = Harness(gateway)
    harness.copy_error = ClipboardError("no clipboard")

    assert await harness.feed("\\copy") is True

    assert "Failed to copy to clipboard. Please try again." in harness.text


@pytest.mark.asyncio
async def test_export_history(gateway: FakeGateway, tmp_path: Path) -> None:
    harness = Harness(gateway)
    target = tmp_path / "history.json"
    await harness.feed("SELECT 1;")

    await harness.feed(f"\\export {target}")

    payload = json.loads(target.read_text(encoding="utf-8"))
    assert [entry["query"] for entry in payload] == ["SELECT 1"]


@pytest.mark.asyncio
async def test_connect_refreshes_catalog(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    await harness.feed("\\connect other instance-a")

    assert harness.manager.connection == ConnectionCoordinates(
        project_id="other", instance_id="instance-a"
    )
    assert harness.manager.snapshot().databases == ["db-1"]
    assert "Connection: other/instance-a/-" in harness.text


@pytest.mark.asyncio
async def test_unknown_command_and_quit(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    assert await harness.feed("\\frobnicate") is True
    assert "Unknown command" in harness.text
    assert await harness.feed("\\q") is False


@pytest.mark.asyncio
async def test_backslash_inside_statement_is_sql(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    await harness.feed("SELECT 'a'", "\\q", "AS x;")

    assert gateway.executed == ["SELECT 'a'\n\\q\nAS x"]


@pytest.mark.asyncio
async def test_run_stops_at_end_of_input(gateway: FakeGateway) -> None:
    lines = iter(["SELECT 1;", "\\history"])
    output = io.StringIO()

    def read_line(prompt: str) -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    manager = SessionManager(
        gateway,
        state=SessionState(
            connection=ConnectionCoordinates(
                project_id="proj", instance_id="inst", database_id="db"
            ),
            execution=ExecutionSettings(confirm_before_execute=False),
        ),
    )
    console = QueryConsole(
        manager,
        console=Console(file=output, theme=ui.theme, width=200, color_system=None),
        read_line=read_line,
    )

    assert await console.run() == 0
    assert gateway.executed == ["SELECT 1"]
    assert "History" in output.getvalue()
    assert manager.snapshot().instances == ["instance-a", "instance-b"]


@pytest.mark.asyncio
async def test_connect_rejects_overlong_id(gateway: FakeGateway) -> None:
    harness = Harness(gateway)

    assert await harness.feed("\\connect " + "p" * 201) is True

    assert "project_id: String should have at most 200 characters" in harness.text
    assert harness.manager.connection.project_id == "proj"
    assert gateway.calls == []
