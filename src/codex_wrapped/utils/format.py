"""Number and date formatting for the year summary."""
#region Imports
from datetime import date, datetime
from typing import Optional, Union
#endregion


#region Constants
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
#endregion


#region Functions


def format_number(value: float) -> str:
    """
    Compact number for headlines: 1234 -> "1.2K", 3_400_000 -> "3.4M".

    Args:
        value: Count to format

    Returns:
        Abbreviated string
    """
    abs_value = abs(value)
    for threshold, suffix in ((1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")):
        if abs_value >= threshold:
            scaled = f"{value / threshold:.1f}".rstrip("0").rstrip(".")
            return f"{scaled}{suffix}"
    return f"{value:,.0f}"


def format_number_full(value: float) -> str:
    """Full number with thousands separators."""
    return f"{value:,.0f}"


def format_date(value: Optional[Union[date, datetime]]) -> str:
    """Long date like 'March 14, 2025', or 'N/A'."""
    if value is None:
        return "N/A"
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_short_date(value: date) -> str:
    """Short date like 'Mar 14'."""
    return f"{value.strftime('%b')} {value.day}"


def sunday_first_weekday(value: date) -> int:
    """Weekday index with Sunday=0 ... Saturday=6."""
    return (value.weekday() + 1) % 7
#endregion
