#region Imports
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from codex_wrapped.config.settings import TOP_MODELS_LIMIT
from codex_wrapped.models.pricing import calculate_cost, get_model_pricing
from codex_wrapped.models.usage_record import CodexUsageData
from codex_wrapped.utils.format import WEEKDAY_NAMES, format_short_date, sunday_first_weekday
#endregion


#region Data Classes


@dataclass
class ModelTotal:
    """Aggregated usage metrics for a single model."""

    model: str
    total_tokens: float = 0
    input_tokens: float = 0
    cached_input_tokens: float = 0
    output_tokens: float = 0
    reasoning_output_tokens: float = 0
    total_cost: float = 0.0
    has_cost: bool = False


@dataclass
class WeekdayActivity:
    """
    Message counts per weekday.

    Attributes:
        counts: Messages per weekday, Sunday first
        most_active_day: Index into counts of the busiest weekday
        most_active_day_name: Name of the busiest weekday
    """

    counts: list[int] = field(default_factory=lambda: [0] * 7)
    most_active_day: int = 0
    most_active_day_name: str = WEEKDAY_NAMES[0]


@dataclass
class MostActiveDay:
    """The calendar day with the most messages."""

    date: str
    count: int
    formatted_date: str


@dataclass
class YearStats:
    """
    Year-in-review statistics.

    Attributes:
        year: Calendar year covered
        first_session_date: First day Codex was ever used
        days_since_first_session: Days from first_session_date to today
        total_sessions: Session files found for the year
        total_messages: Deduplicated user messages
        total_projects: Distinct working directories
        total_tokens: Sum of per-event totals
        total_input_tokens: Input tokens (cached included)
        total_cached_input_tokens: Cached input tokens
        total_output_tokens: Output tokens (reasoning included)
        total_reasoning_tokens: Reasoning output tokens
        total_cost: Estimated cost in USD for priced models
        has_usage_cost: True if at least one event had a known price
        top_models: Models ranked by total tokens
        max_streak: Longest run of consecutive active days
        current_streak: Active run ending today or yesterday
        max_streak_days: Date keys forming the longest run
        daily_activity: Date key to message count
        weekday_activity: Messages per weekday
        most_active_day: Busiest calendar day, if any
    """

    year: int
    first_session_date: Optional[date]
    days_since_first_session: int
    total_sessions: int
    total_messages: int
    total_projects: int
    total_tokens: float
    total_input_tokens: float
    total_cached_input_tokens: float
    total_output_tokens: float
    total_reasoning_tokens: float
    total_cost: float
    has_usage_cost: bool
    top_models: list[ModelTotal]
    max_streak: int
    current_streak: int
    max_streak_days: set[str]
    daily_activity: dict[str, int]
    weekday_activity: WeekdayActivity
    most_active_day: Optional[MostActiveDay]

    def to_dict(self) -> dict:
        """JSON-serializable representation."""
        data = asdict(self)
        data["first_session_date"] = (
            self.first_session_date.isoformat() if self.first_session_date else None
        )
        data["max_streak_days"] = sorted(self.max_streak_days)
        data["daily_activity"] = dict(sorted(self.daily_activity.items()))
        return data
#endregion


#region Functions


def calculate_stats(
    year: int,
    usage_data: CodexUsageData,
    first_prompt_ts: Optional[float] = None,
    today: Optional[date] = None,
) -> YearStats:
    """
    Build the year summary from collected usage.

    Args:
        year: Calendar year the data was collected for
        usage_data: Output of collect_usage_data
        first_prompt_ts: Earliest history timestamp (seconds), any year
        today: Reference day for streaks and "days ago" (default: today)

    Returns:
        YearStats for display or export
    """
    today = today or datetime.now().date()

    first_session_date = _first_session_date(usage_data, first_prompt_ts)
    days_since_first_session = (
        max((today - first_session_date).days, 0) if first_session_date else 0
    )

    model_totals = aggregate_by_model(usage_data)
    total_cost = sum(item.total_cost for item in model_totals.values())
    has_usage_cost = any(item.has_cost for item in model_totals.values())

    active_days = _active_days(usage_data.daily_activity)
    max_streak, max_streak_days = calculate_max_streak(active_days)

    return YearStats(
        year=year,
        first_session_date=first_session_date,
        days_since_first_session=days_since_first_session,
        total_sessions=usage_data.total_sessions,
        total_messages=usage_data.total_messages,
        total_projects=len(usage_data.projects),
        total_tokens=sum(event.total_tokens for event in usage_data.events),
        total_input_tokens=sum(event.input_tokens for event in usage_data.events),
        total_cached_input_tokens=sum(event.cached_input_tokens for event in usage_data.events),
        total_output_tokens=sum(event.output_tokens for event in usage_data.events),
        total_reasoning_tokens=sum(event.reasoning_output_tokens for event in usage_data.events),
        total_cost=total_cost,
        has_usage_cost=has_usage_cost,
        top_models=rank_models(model_totals),
        max_streak=max_streak,
        current_streak=calculate_current_streak(active_days, today),
        max_streak_days=max_streak_days,
        daily_activity=dict(usage_data.daily_activity),
        weekday_activity=calculate_weekday_activity(usage_data.daily_activity),
        most_active_day=find_most_active_day(usage_data.daily_activity),
    )


def aggregate_by_model(usage_data: CodexUsageData) -> dict[str, ModelTotal]:
    """
    Sum usage events per model and price them.

    Models without a known price keep total_cost at 0 and has_cost False.
    """
    totals: dict[str, ModelTotal] = {}
    for event in usage_data.events:
        item = totals.get(event.model)
        if item is None:
            item = totals[event.model] = ModelTotal(model=event.model)
        item.total_tokens += event.total_tokens
        item.input_tokens += event.input_tokens
        item.cached_input_tokens += event.cached_input_tokens
        item.output_tokens += event.output_tokens
        item.reasoning_output_tokens += event.reasoning_output_tokens

    for item in totals.values():
        pricing = get_model_pricing(item.model)
        if pricing is None:
            continue
        item.total_cost = calculate_cost(
            item.input_tokens, item.cached_input_tokens, item.output_tokens, pricing
        )
        item.has_cost = True

    return totals


def rank_models(model_totals: dict[str, ModelTotal], limit: int = TOP_MODELS_LIMIT) -> list[ModelTotal]:
    """Models by total tokens, most used first; ties broken by name."""
    ranked = sorted(model_totals.values(), key=lambda item: (-item.total_tokens, item.model))
    return ranked[:limit]


def calculate_max_streak(active_days: list[date]) -> tuple[int, set[str]]:
    """
    Longest run of consecutive days.

    Args:
        active_days: Sorted, distinct days with activity

    Returns:
        Tuple of (run length, date keys in the run). The earliest run wins
        ties.
    """
    if not active_days:
        return 0, set()

    best_start = best_end = 0
    run_start = 0
    for i in range(1, len(active_days)):
        if active_days[i] - active_days[i - 1] != timedelta(days=1):
            run_start = i
        if i - run_start > best_end - best_start:
            best_start, best_end = run_start, i

    days = {day.strftime("%Y-%m-%d") for day in active_days[best_start:best_end + 1]}
    return best_end - best_start + 1, days


def calculate_current_streak(active_days: list[date], today: date) -> int:
    """
    Length of the run ending today, or yesterday if today has no activity yet.

    Args:
        active_days: Sorted, distinct days with activity
        today: Reference day

    Returns:
        Number of consecutive active days, 0 if the run is broken
    """
    day_set = set(active_days)
    cursor = today if today in day_set else today - timedelta(days=1)

    streak = 0
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def calculate_weekday_activity(daily_activity: dict[str, int]) -> WeekdayActivity:
    """Fold daily message counts into Sunday..Saturday buckets."""
    counts = [0] * 7
    for date_key, count in daily_activity.items():
        day = _parse_date_key(date_key)
        if day is not None:
            counts[sunday_first_weekday(day)] += count

    # First maximum wins, so an empty year reports Sunday
    most_active = max(range(7), key=lambda index: counts[index])
    return WeekdayActivity(
        counts=counts,
        most_active_day=most_active,
        most_active_day_name=WEEKDAY_NAMES[most_active],
    )


def find_most_active_day(daily_activity: dict[str, int]) -> Optional[MostActiveDay]:
    """Day with the most messages; the earliest such day wins ties."""
    best: Optional[tuple[date, int]] = None
    for date_key in sorted(daily_activity):
        day = _parse_date_key(date_key)
        count = daily_activity[date_key]
        if day is None or count <= 0:
            continue
        if best is None or count > best[1]:
            best = (day, count)

    if best is None:
        return None

    day, count = best
    return MostActiveDay(
        date=day.strftime("%Y-%m-%d"),
        count=count,
        formatted_date=format_short_date(day),
    )


def _first_session_date(usage_data: CodexUsageData, first_prompt_ts: Optional[float]) -> Optional[date]:
    candidates: list[date] = []
    if first_prompt_ts is not None:
        try:
            candidates.append(datetime.fromtimestamp(first_prompt_ts).date())
        except (OverflowError, OSError, ValueError):
            pass
    if usage_data.earliest_session_date is not None:
        candidates.append(usage_data.earliest_session_date.astimezone().date())
    return min(candidates) if candidates else None


def _active_days(daily_activity: dict[str, int]) -> list[date]:
    days = []
    for date_key, count in daily_activity.items():
        day = _parse_date_key(date_key)
        if day is not None and count > 0:
            days.append(day)
    return sorted(set(days))


def _parse_date_key(date_key: str) -> Optional[date]:
    try:
        return datetime.strptime(date_key, "%Y-%m-%d").date()
    except ValueError:
        return None
#endregion
