#region Imports
import json
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console

from codex_wrapped.commands.wrapped import load_year_stats
from codex_wrapped.data.collector import CodexDataNotFoundError
#endregion


#region Functions


def run(
    console: Console,
    year: Optional[int] = None,
    output: Optional[Path] = None,
    codex_home: Optional[Path] = None,
) -> None:
    """
    Export a year's statistics as JSON.

    Writes to the output file if given, otherwise to stdout so the result
    can be piped.

    Args:
        console: Rich console for status messages
        year: Year to export (defaults to current year)
        output: Destination file
        codex_home: Codex data directory override

    Exit:
        Exits with status 1 when the stats cannot be collected or written
    """
    display_year = year if year is not None else datetime.now().year

    try:
        stats = load_year_stats(display_year, codex_home=codex_home)
    except CodexDataNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Failed to collect stats: {e}[/red]")
        traceback.print_exc()
        sys.exit(1)

    payload = json.dumps(stats.to_dict(), indent=2)

    if output is None:
        # Plain stdout: rich markup would corrupt the JSON
        print(payload)
        return

    try:
        output.expanduser().parent.mkdir(parents=True, exist_ok=True)
        output.expanduser().write_text(payload + "\n", encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error writing {output}: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Exported {display_year} stats to {output}[/green]")
#endregion
