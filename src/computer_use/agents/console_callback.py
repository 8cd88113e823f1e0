"""Rich console callback for the computer-use loop."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from computer_use.models.agent_schemas import AgentResult, AgentStatus
from computer_use.tools import ToolRegistry

MAX_RESULT_LINES = 30
MAX_RESULT_CHARS = 2000


def _truncate(text: str) -> str:
    lines = text.splitlines()
    if len(lines) > MAX_RESULT_LINES or len(text) > MAX_RESULT_CHARS:
        kept = lines[:MAX_RESULT_LINES]
        truncated = "\n".join(kept)
        if len(truncated) > MAX_RESULT_CHARS:
            truncated = truncated[:MAX_RESULT_CHARS]
        omitted = len(lines) - MAX_RESULT_LINES
        if omitted > 0:
            truncated += f"\n... ({omitted} more lines)"
        return truncated
    return text


TOOL_ICONS = {
    "screenshot": "📸",
    "click": "🖱 ",
    "doubleClick": "🖱 ",
    "moveMouse": "↗ ",
    "scroll": "↕ ",
    "type": "⌨ ",
    "hotkey": "⌨ ",
    "runCommand": "💻",
    "openUrl": "🌐",
}


def _format_arg_value(value: Any) -> str:
    s = str(value)
    if len(s) > 120:
        return s[:120] + "..."
    return s


def _format_result(result: dict[str, Any]) -> str:
    if result.get("type") == "image":
        return f"<{result.get('mime_type', 'image')}, {len(result.get('image', b''))} bytes>"
    return json.dumps(result, indent=2, ensure_ascii=False)


class ConsoleCallback:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_tools(self, registry: ToolRegistry) -> None:
        table = Table(title="Available tools", border_style="dim", show_lines=False)
        table.add_column("Tool", style="bold cyan", no_wrap=True)
        table.add_column("Description", style="dim")
        for tool in registry.list_all():
            icon = TOOL_ICONS.get(tool.name, "🔧")
            params = tool.parameters.get("properties", {})
            param_names = ", ".join(params.keys()) if params else ""
            table.add_row(f"{icon} {tool.name}({param_names})", tool.description)
        self.console.print(table)
        self.console.print()

    def on_session_start(self, stream_url: str, task: str) -> None:
        self.console.print("[green]✅ Desktop sandbox created[/green]")
        self.console.print(f"🔗 Stream URL: {escape(stream_url)}")
        self.console.print(f"📋 [bold]Task:[/bold] {escape(task)}")

    def on_step_start(self, step: int, max_steps: int) -> None:
        self.console.rule(f"[bold blue]🔄 Iteration {step}/{max_steps}", style="blue")

    def on_thinking(self, text: str) -> None:
        self.console.print(
            Panel(
                Text(_truncate(text)),
                title="[bold yellow]💬 Assistant",
                border_style="yellow",
                padding=(0, 1),
            )
        )

    def on_tool_call(self, name: str, args: dict[str, Any]) -> None:
        icon = TOOL_ICONS.get(name, "🔧")
        self.console.print(f"  {icon} [bold cyan]{escape(name)}[/]")
        for k, v in args.items():
            self.console.print(f"      [dim]{escape(k)}:[/] {escape(_format_arg_value(v))}")

    def on_tool_result(self, name: str, result: dict[str, Any]) -> None:
        style = "dim" if result.get("success", True) else "red"
        self.console.print(
            Panel(
                Text(_truncate(_format_result(result)), style=style),
                title="[dim]result",
                border_style=style,
                padding=(0, 1),
            )
        )

    def on_finish(self, result: AgentResult) -> None:
        self.console.print()
        if result.status == AgentStatus.MAX_ITERATIONS:
            self.console.rule("[bold yellow]⚠️  Max iterations reached", style="yellow")
            border = "yellow"
        else:
            self.console.rule("[bold green]✅ Task completed", style="green")
            border = "green"
        self.console.print(
            Panel(
                Text(result.output or "(no final message)"),
                title=(
                    f"[bold]Result ({result.iterations} iterations, "
                    f"{result.tool_calls_made} tool calls)"
                ),
                border_style=border,
                padding=(0, 1),
            )
        )

    def on_error(self, error: BaseException) -> None:
        self.console.print(f"\n[bold red]❌ Error:[/] {escape(repr(error))}")

    def on_cleanup(self) -> None:
        self.console.print("[dim]🧹 Sandbox terminated[/dim]")
