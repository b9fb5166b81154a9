#region Imports
from datetime import date, timedelta
from typing import Optional

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from codex_wrapped.aggregation.year_stats import YearStats
from codex_wrapped.utils.format import WEEKDAY_LABELS, sunday_first_weekday
#endregion


#region Constants
FUTURE_COLOR = "#6B6B68"
EMPTY_COLOR = "#3C3C3A"
STREAK_COLOR = "#F5A524"

# Dark grey -> Codex green
_LOW_RGB = (60, 60, 58)
_HIGH_RGB = (16, 163, 127)

LEGEND_COLORS = ["#3C3C3A", "#314A43", "#28604F", "#1E775C", "#148D69", "#10A37F"]
#endregion


#region Functions


def build_year_weeks(year: int) -> list[list[Optional[date]]]:
    """
    Lay out a year as GitHub-style week columns.

    Each week is 7 slots, Sunday first. Slots before Jan 1 and after Dec 31
    are None.

    Args:
        year: Calendar year

    Returns:
        List of weeks, each a list of 7 dates or None
    """
    start_date = date(year, 1, 1)
    end_date = date(year, 12, 31)

    weeks: list[list[Optional[date]]] = []
    current_week: list[Optional[date]] = [None] * sunday_first_weekday(start_date)

    current_date = start_date
    while current_date <= end_date:
        current_week.append(current_date)
        if len(current_week) == 7:
            weeks.append(current_week)
            current_week = []
        current_date += timedelta(days=1)

    if current_week:
        current_week.extend([None] * (7 - len(current_week)))
        weeks.append(current_week)

    return weeks


def get_activity_style(count: int, max_count: int, day: date, today: date) -> str:
    """
    Rich color for one heatmap cell.

    Args:
        count: Messages on the day
        max_count: Largest daily count in the year, for scaling
        day: The date of this cell
        today: Today's date

    Returns:
        Rich color style string
    """
    if day > today:
        return FUTURE_COLOR

    if count <= 0 or max_count <= 0:
        return EMPTY_COLOR

    # Square-root scaling keeps light days visible next to a huge peak
    ratio = min(count / max_count, 1.0) ** 0.5

    r = int(_LOW_RGB[0] + (_HIGH_RGB[0] - _LOW_RGB[0]) * ratio)
    g = int(_LOW_RGB[1] + (_HIGH_RGB[1] - _LOW_RGB[1]) * ratio)
    b = int(_LOW_RGB[2] + (_HIGH_RGB[2] - _LOW_RGB[2]) * ratio)

    return f"#{r:02x}{g:02x}{b:02x}"


def render_activity_heatmap(stats: YearStats, today: date) -> Panel:
    """
    Build the message-activity heatmap panel for a year.

    Days in the longest streak are marked with a dot.

    Args:
        stats: Year statistics
        today: Today's date (later days render as future)

    Returns:
        Rich Panel ready to print
    """
    weeks = build_year_weeks(stats.year)
    max_count = max(stats.daily_activity.values(), default=0)

    table = Table(show_header=True, box=None, padding=(0, 0), collapse_padding=True)
    table.add_column("", style="dim", width=3, justify="right")

    last_month = None
    for week in weeks:
        month_label = ""
        first_day = next((day for day in week if day is not None), None)
        if first_day is not None and first_day.month != last_month:
            month_label = first_day.strftime("%b")[:2]
            last_month = first_day.month
        table.add_column(month_label, style="dim", width=2, justify="center")

    for day_idx in range(7):
        row_cells = [WEEKDAY_LABELS[day_idx]]
        for week in weeks:
            day = week[day_idx]
            if day is None:
                row_cells.append(Text("  "))
                continue

            date_key = day.strftime("%Y-%m-%d")
            color = get_activity_style(stats.daily_activity.get(date_key, 0), max_count, day, today)
            marker = " ·" if date_key in stats.max_streak_days else "  "
            row_cells.append(Text(marker, style=f"{STREAK_COLOR} on {color}"))
        table.add_row(*row_cells)

    legend = Text()
    legend.append("Less ", style="dim")
    for color in LEGEND_COLORS:
        legend.append("■", style=color)
    legend.append(" More", style="dim")
    if stats.max_streak:
        legend.append(f"    · longest streak ({stats.max_streak}d)", style=STREAK_COLOR)

    return Panel(
        Group(table, Text(""), legend),
        title="[bold]Activity",
        border_style="white",
        expand=True,
    )
#endregion
