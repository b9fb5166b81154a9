#region Imports
import sys
import traceback
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from rich.console import Console

from codex_wrapped.aggregation.year_stats import YearStats, calculate_stats
from codex_wrapped.config.settings import get_history_path, get_sessions_dir
from codex_wrapped.data.collector import (
    CodexDataNotFoundError,
    collect_usage_data,
    get_first_prompt_timestamp,
    require_codex_data,
)
from codex_wrapped.visualization.summary import render_year_summary
#endregion


#region Functions


def load_year_stats(
    year: int,
    codex_home: Optional[Path] = None,
    today: Optional[date] = None,
) -> YearStats:
    """
    Collect a year's Codex logs and compute its statistics.

    Args:
        year: Calendar year
        codex_home: Codex data directory override
        today: Reference day (default: today)

    Returns:
        YearStats for the year

    Raises:
        CodexDataNotFoundError: If the Codex sessions directory is missing
    """
    sessions_dir = require_codex_data(get_sessions_dir(codex_home))
    usage_data = collect_usage_data(year, sessions_dir)
    first_prompt_ts = get_first_prompt_timestamp(get_history_path(codex_home))
    return calculate_stats(year, usage_data, first_prompt_ts=first_prompt_ts, today=today)


def run(console: Console, year: Optional[int] = None, codex_home: Optional[Path] = None) -> None:
    """
    Show the Codex year in review in the terminal.

    Args:
        console: Rich console for output
        year: Year to display (defaults to current year)
        codex_home: Codex data directory override

    Exit:
        Exits with status 1 on unexpected errors
    """
    today = datetime.now().date()
    display_year = year if year is not None else today.year

    try:
        with console.status(
            "[bold #10A37F]Scanning your Codex history...", spinner="dots", spinner_style="#10A37F"
        ):
            stats = load_year_stats(display_year, codex_home=codex_home, today=today)
    except CodexDataNotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return
    except KeyboardInterrupt:
        console.print("\n[cyan]Exiting...[/cyan]")
        sys.exit(0)
    except Exception as e:
        console.print(f"[red]Failed to collect stats: {e}[/red]")
        traceback.print_exc()
        sys.exit(1)

    if stats.total_sessions == 0:
        console.print(f"[yellow]No Codex activity found for {display_year}.[/yellow]")
        return

    render_year_summary(stats, console, today)
#endregion
