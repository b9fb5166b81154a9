"""
Codex Wrapped CLI - Command-line interface using typer.

Main entry point for all codex-wrapped commands.
"""
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from codex_wrapped import __version__
from codex_wrapped.commands import export, wrapped


# Create typer app
app = typer.Typer(
    name="codex-wrapped",
    help="Your Codex CLI year in review, built from local session logs",
    add_completion=False,
    no_args_is_help=False,
)

# Create console for commands
console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_year(ctx: typer.Context, year: Optional[int]) -> Optional[int]:
    """Subcommand --year wins over the top-level one."""
    return year if year is not None else ctx.obj.get("year")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"codex-wrapped v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def default_callback(
    ctx: typer.Context,
    year: Optional[int] = typer.Option(None, "--year", "-y", min=1970, help="Year to summarize (default: current year)"),
    codex_home: Optional[Path] = typer.Option(None, "--codex-home", help="Codex data directory (default: $CODEX_HOME or ~/.codex)"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
    version: bool = typer.Option(False, "--version", "-v", callback=_version_callback, is_eager=True, help="Show version and exit"),
):
    """
    Generate your Codex year in review from ~/.codex session logs.

    Run without command to show the summary for the current year.
    """
    _configure_logging(verbose)
    ctx.obj = {"codex_home": codex_home, "year": year}

    if ctx.invoked_subcommand is None:
        wrapped.run(console, year=year, codex_home=codex_home)


@app.command(name="wrapped", hidden=True)
def wrapped_command(
    ctx: typer.Context,
    year: Optional[int] = typer.Option(None, "--year", "-y", min=1970, help="Year to summarize (default: current year)"),
):
    """Show the year in review summary (same as running without a command)."""
    wrapped.run(console, year=_resolve_year(ctx, year), codex_home=ctx.obj.get("codex_home"))


@app.command(name="export")
def export_command(
    ctx: typer.Context,
    year: Optional[int] = typer.Option(None, "--year", "-y", min=1970, help="Year to export (default: current year)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file instead of stdout"),
):
    """Export the year's statistics as JSON."""
    export.run(console, year=_resolve_year(ctx, year), output=output, codex_home=ctx.obj.get("codex_home"))


def main() -> None:
    """
    Main CLI entry point for codex-wrapped.

    Usage:
        codex-wrapped                   Show current year summary
        codex-wrapped --year 2025       Show 2025 summary
        codex-wrapped export -o out.json

    Exit:
        Press Ctrl+C to exit
    """
    try:
        app()
    except KeyboardInterrupt:
        # Ctrl+C at any point - exit immediately without message
        raise SystemExit(0)


if __name__ == "__main__":
    main()
