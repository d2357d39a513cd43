"""CLI entrypoint for indiefuture-agent."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from typing import Optional

import click

from indiefuture_agent import __version__
from indiefuture_agent.agent_core.approval.gate import select_gate
from indiefuture_agent.agent_core.errors import AgentCoreError
from indiefuture_agent.agent_core.factory import build_engine, build_llm_client
from indiefuture_agent.agent_core.runtime.engine import SubtaskEngine
from indiefuture_agent.agent_core.schemas.domain import RunOutcome, RunTask
from indiefuture_agent.core.config import Settings, get_settings
from indiefuture_agent.core.logging_config import setup_logging

HELP_TEXT = """Type a task to plan and run it. Commands:
  /stack    show pending work items
  /context  show the evidence gathered so far
  /clear    clear the context memory
  /drop     discard pending work items
  /help     show this help
  /quit     leave"""


@dataclass
class CliState:
    settings: Settings
    assume_yes: bool = False


def echo_output(title: str, text: str) -> None:
    click.secho(title, bold=True)
    click.echo(text)


def _make_engine(state: CliState) -> SubtaskEngine:
    try:
        llm = build_llm_client(state.settings)
    except AgentCoreError as e:
        raise click.ClickException(str(e)) from e
    gate = select_gate(state.settings.approval, interactive=sys.stdin.isatty(), assume_yes=state.assume_yes)
    return build_engine(settings=state.settings, llm=llm, gate=gate, emit=echo_output)


def _report(engine: SubtaskEngine, outcome: RunOutcome) -> None:
    if outcome is RunOutcome.aborted:
        click.secho(
            f"Run aborted; {len(engine.stack)} item(s) left pending (/stack to inspect, /drop to discard).",
            fg="yellow",
        )
    else:
        click.secho(f"Run finished ({len(engine.memory)} context fragment(s)).", fg="green")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="indiefuture")
@click.option("--provider", type=click.Choice(["openai", "anthropic"]), default=None, help="LLM provider.")
@click.option("--model", default=None, help="Model name for the provider.")
@click.option("--workspace", type=click.Path(file_okay=False), default=None, help="Workspace root directory.")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR).")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Approve shell commands and file edits without asking.")
@click.pass_context
def cli(
    ctx: click.Context,
    provider: Optional[str],
    model: Optional[str],
    workspace: Optional[str],
    log_level: Optional[str],
    assume_yes: bool,
) -> None:
    """Plan and run development tasks against a local codebase."""
    overrides = {
        key: value
        for key, value in {
            "llm_provider": provider,
            "llm_model": model,
            "workspace_root": workspace,
            "log_level": log_level,
        }.items()
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    setup_logging(
        settings.log_level,
        settings.log_format,
        enable_file=settings.log_to_file,
        log_file_dir=settings.log_file_dir,
    )
    ctx.obj = CliState(settings=settings, assume_yes=assume_yes)
    if ctx.invoked_subcommand is None:
        ctx.invoke(chat)


@cli.command("run")
@click.argument("task")
@click.pass_obj
def run_task(state: CliState, task: str) -> None:
    """Plan and run a single TASK, then exit (status 1 if it was aborted)."""
    engine = _make_engine(state)
    engine.push_initial_operation(RunTask(description=task))
    try:
        outcome = asyncio.run(engine.drain())
    except AgentCoreError as e:
        raise click.ClickException(str(e)) from e
    _report(engine, outcome)
    if outcome is RunOutcome.aborted:
        sys.exit(1)


@cli.command("chat")
@click.pass_obj
def chat(state: CliState) -> None:
    """Interactive turn loop."""
    engine = _make_engine(state)
    click.echo(f"indiefuture {__version__} ({state.settings.llm_provider}:{state.settings.llm_model})")
    click.echo(HELP_TEXT)
    asyncio.run(_chat_loop(engine))


async def _chat_loop(engine: SubtaskEngine) -> None:
    while True:
        try:
            line = await asyncio.to_thread(click.prompt, "task", default="", show_default=False, prompt_suffix=" > ")
        except click.Abort:
            click.echo()
            return
        line = line.strip()
        if not line:
            continue
        if line.startswith("/"):
            if not await _handle_command(engine, line):
                return
            continue

        engine.push_initial_operation(RunTask(description=line))
        try:
            outcome = await engine.drain()
        except AgentCoreError as e:
            click.secho(f"Error: {e}", fg="red", err=True)
            continue
        _report(engine, outcome)


async def _handle_command(engine: SubtaskEngine, line: str) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    command = line.split()[0].lower()
    if command in ("/quit", "/exit"):
        return False
    if command == "/help":
        click.echo(HELP_TEXT)
    elif command == "/stack":
        items = engine.stack.items()
        if not items:
            click.echo("No pending work.")
        for item in reversed(items):
            click.echo(f"{'  ' * item.depth}[{item.depth}] {item.operation}")
    elif command == "/context":
        fragments = engine.memory.snapshot()
        click.echo(f"{len(fragments)} context fragment(s)")
        for i, fragment in enumerate(fragments, start=1):
            path = fragment.metadata.path if fragment.metadata and fragment.metadata.path else ""
            click.echo(f"  {i}. {fragment.source} {path}".rstrip())
    elif command == "/clear":
        await engine.memory.clear()
        click.echo("Context memory cleared.")
    elif command == "/drop":
        click.echo(f"Discarded {engine.discard_pending()} pending item(s).")
    else:
        click.echo(f"Unknown command {command}. Type /help for the list.")
    return True


@cli.command("config")
@click.pass_obj
def show_config(state: CliState) -> None:
    """Print the effective settings (API keys masked)."""
    settings = state.settings
    groups = {
        "llm": settings.llm.model_dump(),
        "engine": settings.engine.model_dump(),
        "approval": settings.approval.model_dump(),
        "tools": settings.tools.model_dump(),
    }
    for name, values in groups.items():
        click.secho(f"[{name}]", bold=True)
        for key, value in values.items():
            if key.endswith("api_key"):
                value = "set" if value else "not set"
            click.echo(f"  {key} = {value}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
