r"""Interactive SQL console.

Statements end with ``;``. Backslash commands are only recognized at the start of
a new statement:

  \help                      Show this help
  \q / \quit                 Exit
  \format                    Format the current query
  \run                       Execute the current query
  \buffer                    Show the current query
  \clear                     Clear the current query
  \history                   List executed queries
  \show <n>                  Show query and results of history entry n
  \rerun <n>                 Run history entry n again
  \copy [query|results|<n>]  Copy to the clipboard (default: query)
  \export <path>             Write the history as JSON
  \connect <project> [<instance> [<database>]]
  \init                      Load instances for the current project
  \instances / \databases    List what the current connection can see
  \set multiline|confirm on|off
  \settings                  Show current settings
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Awaitable, Callable
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm

from querydeck.cli import ui
from querydeck.export.clipboard import ClipboardError, copy_to_clipboard
from querydeck.export.results_json import history_to_json, results_to_json
from querydeck.models.session import ConnectionCoordinates, SessionPhase
from querydeck.session.manager import SessionManager
from querydeck.store.interface import OutOfRangeError

logger = logging.getLogger(__name__)

PROMPT = "querydeck> "
MORE_PROMPT = "      ...> "

_SETTING_NAMES = {
    "multiline": "multiline_layout",
    "confirm": "confirm_before_execute",
}
_TRUE_WORDS = {"on", "true", "yes", "1"}
_FALSE_WORDS = {"off", "false", "no", "0"}

ReadLine = Callable[[str], str]
AskConfirm = Callable[[str], bool]


class QueryConsole:
    """psql-like front end driving a SessionManager."""

    def __init__(
        self,
        manager: SessionManager,
        *,
        console: Console | None = None,
        read_line: ReadLine | None = None,
        ask_confirm: AskConfirm | None = None,
        copy: Callable[[str], None] = copy_to_clipboard,
    ) -> None:
        self._manager = manager
        self._console = console or ui.console
        self._read_line = read_line or self._console.input
        self._ask_confirm = ask_confirm or self._default_confirm
        self._copy = copy
        self._pending_lines: list[str] = []
        self._commands: dict[str, Callable[[list[str]], Awaitable[bool]]] = {
            "help": self._cmd_help,
            "?": self._cmd_help,
            "q": self._cmd_quit,
            "quit": self._cmd_quit,
            "format": self._cmd_format,
            "run": self._cmd_run,
            "buffer": self._cmd_buffer,
            "clear": self._cmd_clear,
            "history": self._cmd_history,
            "show": self._cmd_show,
            "rerun": self._cmd_rerun,
            "copy": self._cmd_copy,
            "export": self._cmd_export,
            "connect": self._cmd_connect,
            "init": self._cmd_init,
            "instances": self._cmd_instances,
            "databases": self._cmd_databases,
            "set": self._cmd_set,
            "settings": self._cmd_settings,
        }

    def _default_confirm(self, question: str) -> bool:
        return Confirm.ask(question, console=self._console, default=False)

    @property
    def prompt(self) -> str:
        return MORE_PROMPT if self._pending_lines else PROMPT

    async def run(self) -> int:
        self._console.print("[heading]querydeck[/heading] [dim]type \\help for commands[/dim]")
        if self._manager.connection.project_id:
            await self._manager.refresh_catalog()

        while True:
            try:
                # Blocking read; nothing else runs on the loop while the prompt is open.
                line = self._read_line(self.prompt)
            except EOFError:
                break
            except KeyboardInterrupt:
                self._pending_lines.clear()
                self._console.print()
                continue
            if not await self.handle_line(line):
                break
        return 0

    async def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False when the console should exit."""
        stripped = line.strip()
        if not self._pending_lines and stripped.startswith("\\"):
            return await self._dispatch(stripped[1:])
        if not stripped and not self._pending_lines:
            return True

        self._pending_lines.append(line)
        if stripped.endswith(";"):
            statement = "\n".join(self._pending_lines).strip().rstrip(";").rstrip()
            self._pending_lines.clear()
            self._manager.set_query(statement)
            await self._drive(self._manager.request_execute())
        return True

    async def _dispatch(self, command_line: str) -> bool:
        try:
            parts = shlex.split(command_line)
        except ValueError as e:
            ui.print_error("Command", str(e), target=self._console)
            return True
        if not parts:
            return True

        name, args = parts[0].lower(), parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            ui.print_error(
                "Command", f"Unknown command: \\{name}", tip="\\help", target=self._console
            )
            return True
        return await handler(args)

    async def _drive(self, request: Awaitable[SessionPhase]) -> None:
        """Run an execute request to completion, asking for approval when needed."""
        history_before = len(self._manager.history)
        phase = await request

        if phase == SessionPhase.awaiting_confirmation:
            self._console.print(
                ui.render_query(self._manager.query, title="Confirm Query Execution")
            )
            approved = self._ask_confirm("Are you sure you want to execute this query?")
            if approved:
                await self._manager.confirm()
            else:
                self._manager.cancel()
                self._console.print("[warning]Execution cancelled.[/warning]")
                return

        if len(self._manager.history) > history_before:
            self._console.print(ui.render_results(self._manager.results))

    def _history_index(self, args: list[str]) -> int | None:
        if not args or not args[0].isdigit():
            ui.print_error("History", "Expected a history entry number.", target=self._console)
            return None
        return int(args[0]) - 1

    # --- Commands ---------------------------------------------------------------

    async def _cmd_help(self, args: list[str]) -> bool:
        self._console.print(__doc__ or "", markup=False, highlight=False)
        return True

    async def _cmd_quit(self, args: list[str]) -> bool:
        return False

    async def _cmd_format(self, args: list[str]) -> bool:
        self._console.print(ui.render_query(self._manager.format_query()))
        return True

    async def _cmd_run(self, args: list[str]) -> bool:
        if not self._manager.query.strip():
            ui.print_error("Execute", "The query buffer is empty.", target=self._console)
            return True
        await self._drive(self._manager.request_execute())
        return True

    async def _cmd_buffer(self, args: list[str]) -> bool:
        self._console.print(ui.render_query(self._manager.query))
        return True

    async def _cmd_clear(self, args: list[str]) -> bool:
        self._manager.set_query("")
        self._pending_lines.clear()
        return True

    async def _cmd_history(self, args: list[str]) -> bool:
        entries = self._manager.history
        if not entries:
            self._console.print("[dim]No queries executed yet.[/dim]")
        else:
            self._console.print(ui.render_history(entries))
        return True

    async def _cmd_show(self, args: list[str]) -> bool:
        index = self._history_index(args)
        if index is None:
            return True
        try:
            entry = self._manager.get_history_entry(index)
        except OutOfRangeError:
            ui.print_error("History", f"No history entry #{args[0]}.", target=self._console)
            return True
        self._console.print(ui.render_query(entry.query))
        self._console.print(ui.render_results(entry.results))
        return True

    async def _cmd_rerun(self, args: list[str]) -> bool:
        index = self._history_index(args)
        if index is None:
            return True
        try:
            entry = self._manager.get_history_entry(index)
        except OutOfRangeError:
            ui.print_error("History", f"No history entry #{args[0]}.", target=self._console)
            return True
        await self._drive(self._manager.rerun(entry))
        return True

    async def _cmd_copy(self, args: list[str]) -> bool:
        what = args[0].lower() if args else "query"
        if what == "query":
            text, message = self._manager.query, "Query copied to clipboard"
        elif what == "results":
            text, message = results_to_json(self._manager.results), "Results copied to clipboard"
        elif what.isdigit():
            try:
                entry = self._manager.get_history_entry(int(what) - 1)
            except OutOfRangeError:
                ui.print_error("History", f"No history entry #{what}.", target=self._console)
                return True
            text, message = results_to_json(entry.results), "Results copied to clipboard"
        else:
            ui.print_error(
                "Copy",
                f"Cannot copy {what!r}.",
                tip="\\copy query|results|<n>",
                target=self._console,
            )
            return True

        try:
            self._copy(text)
        except ClipboardError as e:
            logger.debug("Copy failed", exc_info=True)
            ui.print_error(
                "Clipboard",
                "Failed to copy to clipboard. Please try again.",
                tip=str(e),
                target=self._console,
            )
            return True
        ui.print_success(message, target=self._console)
        return True

    async def _cmd_export(self, args: list[str]) -> bool:
        if not args:
            ui.print_error("Export", "Expected a file path.", target=self._console)
            return True
        path = Path(args[0]).expanduser()
        try:
            path.write_text(history_to_json(self._manager.history), encoding="utf-8")
        except OSError as e:
            ui.print_error("Export", str(e), target=self._console)
            return True
        ui.print_success(f"History written to {path}", target=self._console)
        return True

    async def _cmd_connect(self, args: list[str]) -> bool:
        if not args or len(args) > 3:
            ui.print_error(
                "Connect",
                "Usage: \\connect <project> [<instance> [<database>]]",
                target=self._console,
            )
            return True
        project_id, instance_id, database_id = (args + ["", ""])[:3]
        try:
            coords = ConnectionCoordinates(
                project_id=project_id, instance_id=instance_id, database_id=database_id
            )
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            ui.print_error("Connect", problems, target=self._console)
            return True
        await self._manager.set_connection_coordinates(coords)
        self._console.print(f"[info]Connection: {self._describe_connection()}[/info]")
        return True

    async def _cmd_init(self, args: list[str]) -> bool:
        if await self._manager.initialize():
            await self._cmd_instances(args)
        return True

    async def _cmd_instances(self, args: list[str]) -> bool:
        instances = self._manager.snapshot().instances
        self._console.print("\n".join(instances) if instances else "[dim]No instances.[/dim]")
        return True

    async def _cmd_databases(self, args: list[str]) -> bool:
        databases = self._manager.snapshot().databases
        self._console.print("\n".join(databases) if databases else "[dim]No databases.[/dim]")
        return True

    async def _cmd_set(self, args: list[str]) -> bool:
        if len(args) != 2 or args[0].lower() not in _SETTING_NAMES:
            ui.print_error(
                "Settings", "Usage: \\set multiline|confirm on|off", target=self._console
            )
            return True
        raw = args[1].lower()
        if raw not in _TRUE_WORDS | _FALSE_WORDS:
            ui.print_error(
                "Settings", f"Expected on or off, got {args[1]!r}.", target=self._console
            )
            return True
        self._manager.toggle_setting(_SETTING_NAMES[args[0].lower()], raw in _TRUE_WORDS)
        return await self._cmd_settings([])

    async def _cmd_settings(self, args: list[str]) -> bool:
        snapshot = self._manager.snapshot()
        self._console.print(
            f"multiline format: {'on' if snapshot.multiline_layout else 'off'}\n"
            f"confirm before execution: {'on' if snapshot.confirm_before_execute else 'off'}\n"
            f"connection: {self._describe_connection()}"
        )
        return True

    def _describe_connection(self) -> str:
        coords = self._manager.connection
        parts = [coords.project_id, coords.instance_id, coords.database_id]
        return "/".join(part or "-" for part in parts)
