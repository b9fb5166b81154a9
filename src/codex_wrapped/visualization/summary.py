#region Imports
from datetime import date

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from codex_wrapped.aggregation.year_stats import YearStats
from codex_wrapped.models.pricing import format_cost
from codex_wrapped.utils.format import (
    WEEKDAY_LABELS,
    format_date,
    format_number,
    format_number_full,
)
from codex_wrapped.visualization.activity_graph import render_activity_heatmap
#endregion


#region Constants
ACCENT = "#10A37F"
BAR_WIDTH = 30
#endregion


#region Functions


def render_year_summary(stats: YearStats, console: Console, today: date) -> None:
    """
    Print the full year in review: headline, totals, heatmap, weekdays, models.

    Args:
        stats: Year statistics
        console: Rich console for output
        today: Today's date
    """
    title = Text()
    title.append("Codex ", style="bold white")
    title.append("wrapped ", style="dim")
    title.append(str(stats.year), style=f"bold {ACCENT}")
    console.print(title)
    console.print()

    started = Text()
    started.append("Started:      ", style="bold")
    started.append(f"{stats.days_since_first_session} days ago")
    started.append(f"  ({format_date(stats.first_session_date)})", style="dim")
    console.print(started)

    if stats.most_active_day:
        busiest = Text()
        busiest.append("Most Active:  ", style="bold")
        busiest.append(stats.most_active_day.formatted_date)
        busiest.append(f"  ({stats.most_active_day.count:,} messages)", style="dim")
        console.print(busiest)
    console.print()

    console.print(render_totals_table(stats))
    console.print()
    console.print(render_activity_heatmap(stats, today))
    console.print()
    console.print(render_weekday_bars(stats))
    console.print()
    console.print(render_top_models(stats))


def render_totals_table(stats: YearStats) -> Panel:
    """Sessions, messages, tokens, projects, streak and cost."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label", style="bold")
    table.add_column("value", justify="right")

    table.add_row("Sessions", format_number_full(stats.total_sessions))
    table.add_row("Messages", format_number_full(stats.total_messages))
    table.add_row("Total Tokens", format_number_full(stats.total_tokens))
    if stats.total_input_tokens > 0:
        table.add_row("  Input", f"{format_number_full(stats.total_input_tokens)} tok")
    if stats.total_cached_input_tokens > 0:
        table.add_row("  Cache Read", f"{format_number_full(stats.total_cached_input_tokens)} tok")
    if stats.total_output_tokens > 0:
        table.add_row("  Output", f"{format_number_full(stats.total_output_tokens)} tok")
    if stats.total_reasoning_tokens > 0:
        table.add_row("  Reasoning", f"{format_number_full(stats.total_reasoning_tokens)} tok")
    table.add_row("Projects", format_number_full(stats.total_projects))
    table.add_row("Streak", f"{stats.max_streak}d (current {stats.current_streak}d)")
    table.add_row("Usage Cost", format_cost(stats.total_cost) if stats.has_usage_cost else "N/A")

    return Panel(table, title=f"[bold]Your {stats.year} in Codex", border_style="white", expand=False)


def render_weekday_bars(stats: YearStats) -> Panel:
    """Horizontal bar per weekday, busiest day highlighted."""
    counts = stats.weekday_activity.counts
    max_count = max(counts, default=0)

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("day", style="dim", width=3)
    table.add_column("bar")
    table.add_column("count", justify="right")

    for index, count in enumerate(counts):
        filled = round(BAR_WIDTH * count / max_count) if max_count else 0
        bar = Text()
        style = f"bold {ACCENT}" if index == stats.weekday_activity.most_active_day and max_count else ACCENT
        bar.append("█" * filled, style=style)
        bar.append("░" * (BAR_WIDTH - filled), style="#3C3C3A")
        table.add_row(WEEKDAY_LABELS[index], bar, format_number(count))

    return Panel(
        table,
        title=f"[bold]Weekly[/bold] [dim](busiest: {stats.weekday_activity.most_active_day_name})",
        border_style="white",
        expand=False,
    )


def render_top_models(stats: YearStats) -> Panel:
    """Top models by tokens, with estimated cost where priced."""
    table = Table(show_header=True, box=None, padding=(0, 2), header_style="dim")
    table.add_column("#", justify="right")
    table.add_column("Model")
    table.add_column("Tokens", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Cost", justify="right")

    if not stats.top_models:
        table.add_row("", "[dim]No usage recorded[/dim]", "", "", "")

    for rank, item in enumerate(stats.top_models, start=1):
        share = (item.total_tokens / stats.total_tokens * 100) if stats.total_tokens > 0 else 0
        table.add_row(
            str(rank),
            item.model,
            format_number(item.total_tokens),
            f"{share:5.1f}%",
            format_cost(item.total_cost) if item.has_cost else "[dim]-[/dim]",
        )

    return Panel(table, title="[bold]Top Models", border_style="white", expand=False)
#endregion
