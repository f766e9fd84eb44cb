"""CLI entry point for zesbe"""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from zesbe.storage.storage import Storage

app = typer.Typer(
    name="zesbe",
    help="AI coding assistant",
    add_completion=False,
)
console = Console()


def _setup_logging(verbose: bool):
    Storage.BASE_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(Storage.BASE_DIR / "zesbe.log"),
            logging.StreamHandler(),
        ],
    )


def _preview(value, limit: int = 200) -> str:
    text = value if isinstance(value, str) else json.dumps(value)
    return text[:limit] + "..." if len(text) > limit else text


@app.command()
def chat(
    message: str = typer.Argument(..., help="Message to send"),
    directory: Path = typer.Option(Path("."), "--dir", "-d", help="Directory to run in"),
    provider: str = typer.Option(None, "--provider", "-p", help="Provider id (openai, anthropic, ...)"),
    model: str = typer.Option(None, "--model", "-m", help="Model to use"),
    yolo: bool = typer.Option(False, "--yolo", help="Run tools without asking"),
    no_stream: bool = typer.Option(False, "--no-stream", help="Disable streaming"),
    max_steps: int = typer.Option(None, "--max-steps", help="Maximum model calls per message (0 = unlimited)"),
    session: str = typer.Option("last", "--session", "-s", help="Session name to save to"),
    resume: bool = typer.Option(False, "--resume", "-r", help="Continue the named session"),
    skill: list[str] = typer.Option(None, "--skill", help="Skill to load (repeatable)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Send a single message (non-interactive)"""
    from zesbe.agent.agent import Agent
    from zesbe.agent.callbacks import ChatCallbacks
    from zesbe.config.config import Config
    from zesbe.skills import SkillsManager

    _setup_logging(verbose)

    config = Config.load()
    if provider:
        config.provider = provider
    if model:
        config.model = model
    if yolo:
        config.yolo = True
    if no_stream:
        config.stream = False
    if max_steps is not None:
        config.max_steps = max_steps

    skills = SkillsManager(cwd=directory)
    for skill_id in skill or []:
        if skills.load(skill_id) is None:
            console.print(f"[yellow]Skill not found: {skill_id}[/yellow]")
    agent = Agent.from_config(config, skills=skills, cwd=directory)

    if resume:
        loaded = agent.load_session(session)
        if not loaded.success:
            console.print(f"[yellow]Could not resume '{session}': {loaded.error}[/yellow]")

    def on_tool_call(name: str, args: dict) -> bool:
        console.print(f"\n[cyan]Tool: {name}[/cyan] {_preview(args)}")
        if agent.yolo:
            return True
        return typer.confirm("Allow?", default=True)

    callbacks = ChatCallbacks(
        on_token=lambda text: console.print(text, end="", markup=False, highlight=False),
        on_tool_call=on_tool_call,
        on_tool_result=lambda name, result: console.print(f"[dim][Result: {_preview(result)}][/dim]"),
        on_warning=lambda warning: console.print(f"\n[yellow]{warning}[/yellow]"),
        on_error=lambda error: console.print(f"\n[red]Error: {error}[/red]"),
    )

    result = asyncio.run(agent.chat(message, callbacks))
    console.print()

    saved = agent.save_session(session)
    if not saved.success:
        console.print(f"[yellow]Session not saved: {saved.error}[/yellow]")

    if result.error:
        raise typer.Exit(code=1)


@app.command()
def sessions():
    """List saved sessions"""
    from zesbe.session.store import SessionStore

    saved = SessionStore().list_sessions()
    if not saved:
        console.print("No saved sessions")
        return

    table = Table("Name", "Modified", "Summary")
    for info in saved:
        table.add_row(info.name, info.modified.strftime("%Y-%m-%d %H:%M"), info.summary)
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
