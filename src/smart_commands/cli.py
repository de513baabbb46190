"""Command-line interface for Smart Commands."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from smart_commands import CommandEngine, EngineConfig, OllamaClient, Suggestion

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def _build_config(ctx: click.Context) -> EngineConfig:
    config = EngineConfig.from_env()
    if ctx.obj.get("metadata_dir"):
        config.metadata_dir = Path(ctx.obj["metadata_dir"])
    if ctx.obj.get("ollama_url"):
        config.ai.base_url = ctx.obj["ollama_url"]
    if ctx.obj.get("model"):
        config.ai.model = ctx.obj["model"]
    return config


def _print_suggestion(suggestion: Suggestion) -> None:
    if suggestion.is_valid:
        console.print(f"[green]✓ VALID[/green]: {suggestion.original}")
    elif suggestion.is_correction:
        console.print(f"[yellow]✎ CORRECTION[/yellow]: {suggestion.message}")
        console.print(Panel.fit(suggestion.suggestion, border_style="yellow"))
    elif suggestion.is_smart_command:
        console.print(f"[cyan]★ SUGGESTED[/cyan] for: {suggestion.original}")
        console.print(Panel.fit(suggestion.suggestion, border_style="cyan"))
    else:
        console.print(f"[red]✗ ERROR[/red]: {suggestion.message}")


async def _resolve(config: EngineConfig, command: str, smart: bool) -> Suggestion:
    async with CommandEngine(config) as engine:
        if smart:
            return await engine.resolve_smart_command(command)
        return await engine.resolve(command)


@click.group()
@click.option("--metadata-dir", type=click.Path(file_okay=False), help="Extra command metadata directory")
@click.option("--ollama-url", help="Ollama server URL")
@click.option("--model", help="Model used for suggestions")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(
    ctx: click.Context,
    metadata_dir: str | None,
    ollama_url: str | None,
    model: str | None,
    verbose: bool,
) -> None:
    """Smart Commands - catch and fix shell command typos."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["metadata_dir"] = metadata_dir
    ctx.obj["ollama_url"] = ollama_url
    ctx.obj["model"] = model
    _configure_logging(verbose)


@cli.command()
@click.argument("command")
@click.pass_context
def check(ctx: click.Context, command: str) -> None:
    """Validate a command and suggest a correction."""
    config = _build_config(ctx)
    with console.status("[bold green]Validating command..."):
        suggestion = asyncio.run(_resolve(config, command, smart=False))

    _print_suggestion(suggestion)
    if suggestion.is_error:
        sys.exit(1)


@cli.command()
@click.argument("task")
@click.pass_context
def smart(ctx: click.Context, task: str) -> None:
    """Generate a command for a task described in plain words."""
    config = _build_config(ctx)
    with console.status("[bold green]Asking the AI service..."):
        suggestion = asyncio.run(_resolve(config, task, smart=True))

    _print_suggestion(suggestion)
    if suggestion.is_error:
        sys.exit(1)


@cli.command()
@click.argument("base_command", required=False)
@click.pass_context
def metadata(ctx: click.Context, base_command: str | None) -> None:
    """List known command metadata."""
    from smart_commands.metadata.store import CommandMetadataStore

    store = CommandMetadataStore(_build_config(ctx).metadata_dir)

    if base_command:
        entry = store.get_metadata(base_command)
        if entry is None:
            console.print(f"[yellow]No metadata for '{base_command}'.[/yellow]")
            sys.exit(1)

        console.print(Panel.fit(f"{entry.base_command}: {entry.description}"))
        if entry.valid_subcommands:
            console.print("[bold]Subcommands:[/bold] " + ", ".join(sorted(entry.valid_subcommands)))
        console.print("[bold]Flags:[/bold] " + ", ".join(sorted(entry.valid_flags)))
        return

    table = Table(title="Command Metadata")
    table.add_column("Command", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Subcommands", style="green", justify="right")
    table.add_column("Flags", style="yellow", justify="right")

    for name in store.commands():
        entry = store.get_metadata(name)
        description = entry.description or ""
        table.add_row(
            entry.base_command,
            description[:50] + "..." if len(description) > 50 else description,
            str(len(entry.valid_subcommands)),
            str(len(entry.valid_flags)),
        )

    console.print(table)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Check whether the AI service is reachable."""
    config = _build_config(ctx)

    async def probe() -> tuple[bool, list[str]]:
        async with OllamaClient(config.ai) as client:
            if not await client.is_available():
                return False, []
            return True, await client.list_models()

    available, models = asyncio.run(probe())

    if not available:
        console.print(f"[red]✗ AI service not reachable at {config.ai.base_url}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ AI service running at {config.ai.base_url}[/green]")
    if ctx.obj.get("verbose") or config.ai.model not in models:
        console.print(f"Models: {', '.join(models) or 'none'}")
    if config.ai.model not in models:
        console.print(f"[yellow]⚠ Model '{config.ai.model}' is not installed[/yellow]")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8080, help="Port number")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Start the API server."""
    import uvicorn

    from smart_commands.server import create_app

    app = create_app(CommandEngine(_build_config(ctx)))
    console.print(f"[green]Starting server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
