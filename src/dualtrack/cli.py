"""dualtrack command line interface."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

from .config import Settings, get_settings
from .core.classifier import classify_intent
from .core.commands import extract_command
from .core.orchestrator import Orchestrator
from .core.state import ActiveContext, PullRequestInfo, TextMessage, TurnState, UserIntent, VoiceUtterance
from .errors import ConfigurationError
from .events import EventChannel
from .integrations.republic_client import build_reasoner
from .runtime import LocalCommandRuntime
from .tracing import TraceRecorder
from .workspace import WorkspaceFiles

app = typer.Typer(
    name="dualtrack",
    help="Answer code-review questions with a spoken line and a screen payload.",
    add_completion=False,
    rich_markup_mode="rich",
)

_console = Console()


async def _run_turn(settings: Settings, intent: UserIntent, active_file: Optional[str]) -> TurnState:
    root = settings.resolve_workspace()
    files = WorkspaceFiles(root)
    if active_file:
        files.load(active_file)

    channel = EventChannel(history_limit=settings.event_history_limit)
    recorder = TraceRecorder(channel, limit=settings.trace_limit, path=settings.trace_file)
    runtime = LocalCommandRuntime(channel, root, allowed_commands=settings.allowed_commands)
    runtime.attach()
    orchestrator = Orchestrator(settings, channel=channel, files=files, reasoner=build_reasoner(settings))
    try:
        return await orchestrator.respond(intent)
    finally:
        runtime.detach()
        recorder.close()


def _render(state: TurnState) -> None:
    plan = state.response_plan
    if plan is None:
        _console.print("[dim](no response)[/dim]")
        return
    _console.print(Text.assemble(("voice ", "bold cyan"), plan.voice))
    if plan.screen.action == "markdown_response":
        _console.print(Markdown(str(plan.screen.payload.get("content", ""))))
    elif plan.screen.action == "error":
        _console.print(Text(str(plan.screen.payload.get("message", "error")), style="red"))


@app.command()
def ask(
    message: str = typer.Argument(..., help="The user's message"),
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Active file, relative to the workspace"),
    workspace: Optional[Path] = typer.Option(None, "--workspace", "-w", help="Workspace root"),  # noqa: B008
    pr_title: Optional[str] = typer.Option(None, "--pr-title", help="Pull request title"),
    pr_description: str = typer.Option("", "--pr-description", help="Pull request description"),
    voice: bool = typer.Option(False, "--voice", help="Treat the message as transcribed speech"),
    as_json: bool = typer.Option(False, "--json", help="Print the turn result as JSON"),
) -> None:
    """Run one turn through the orchestrator."""
    settings = get_settings(workspace, log_profile="chat")
    intent: UserIntent
    if voice:
        intent = VoiceUtterance(text=message)
    else:
        intent = TextMessage(
            text=message,
            context=ActiveContext(active_file=file) if file else None,
            pr=PullRequestInfo(title=pr_title, description=pr_description) if pr_title else None,
        )

    try:
        state = asyncio.run(_run_turn(settings, intent, file))
    except ConfigurationError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1) from exc

    if as_json:
        typer.echo(
            state.model_dump_json(
                by_alias=True,
                indent=2,
                include={"classification", "reasoning_mode", "tool_output", "response_plan"},
            )
        )
        return
    _render(state)


@app.command()
def classify(message: str = typer.Argument(..., help="The user's message")) -> None:
    """Show how a message would be classified, and the command it would run."""
    classification = classify_intent(TextMessage(text=message))
    typer.echo(f"classification: {classification.value}")
    spec = extract_command(message)
    typer.echo(f"command: {spec.display if spec else '-'}")
