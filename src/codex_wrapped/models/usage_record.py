#region Imports
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
#endregion


#region Helpers


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as written by Codex session logs.

    Naive values are treated as UTC so that every parsed timestamp is
    comparable with every other one. Numbers are epoch milliseconds.

    Args:
        value: Timestamp string (e.g. '2025-03-14T09:26:53.589Z') or epoch ms

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_date_key(moment: datetime) -> str:
    """Local-calendar YYYY-MM-DD key for a timestamp."""
    return moment.astimezone().strftime("%Y-%m-%d")


#endregion


#region Data Classes


@dataclass(frozen=True)
class RawUsage:
    """
    Token counters exactly as reported by one log line.

    May hold cumulative totals-to-date or an already-computed delta.

    Attributes:
        input_tokens: Input tokens
        cached_input_tokens: Input tokens served from the prompt cache
        output_tokens: Output tokens
        reasoning_output_tokens: Output tokens spent on reasoning
        total_tokens: Reported total (input + output when not reported)
    """

    input_tokens: float = 0
    cached_input_tokens: float = 0
    output_tokens: float = 0
    reasoning_output_tokens: float = 0
    total_tokens: float = 0


@dataclass(frozen=True)
class UsageDelta:
    """Token usage attributable to a single turn. All fields are >= 0."""

    input_tokens: float
    cached_input_tokens: float
    output_tokens: float
    reasoning_output_tokens: float
    total_tokens: float

    @property
    def is_zero(self) -> bool:
        """True when none of the component counters moved."""
        return (
            self.input_tokens == 0
            and self.cached_input_tokens == 0
            and self.output_tokens == 0
            and self.reasoning_output_tokens == 0
        )


@dataclass(frozen=True)
class UsageEvent:
    """
    A single token-usage event from a Codex session.

    Attributes:
        timestamp: Timestamp string as logged
        model: Model name (e.g., 'gpt-5-codex')
        input_tokens: Input tokens for this turn
        cached_input_tokens: Cached input tokens for this turn (<= input_tokens)
        output_tokens: Output tokens for this turn
        reasoning_output_tokens: Reasoning output tokens for this turn
        total_tokens: Total tokens for this turn
    """

    timestamp: str
    model: str
    input_tokens: float
    cached_input_tokens: float
    output_tokens: float
    reasoning_output_tokens: float
    total_tokens: float

    @classmethod
    def from_delta(cls, timestamp: str, model: str, delta: UsageDelta) -> "UsageEvent":
        return cls(
            timestamp=timestamp,
            model=model,
            input_tokens=delta.input_tokens,
            cached_input_tokens=delta.cached_input_tokens,
            output_tokens=delta.output_tokens,
            reasoning_output_tokens=delta.reasoning_output_tokens,
            total_tokens=delta.total_tokens,
        )

    @property
    def parsed_timestamp(self) -> Optional[datetime]:
        return parse_timestamp(self.timestamp)

    @property
    def date_key(self) -> Optional[str]:
        """
        Get date string in YYYY-MM-DD format for grouping.

        Converts the UTC timestamp to the local timezone before extracting
        the date, so late-evening activity lands on the user's calendar day.

        Returns:
            Date string in YYYY-MM-DD format (local timezone), or None if
            the timestamp cannot be parsed
        """
        parsed = self.parsed_timestamp
        return to_date_key(parsed) if parsed else None


@dataclass(frozen=True)
class UserMessageRecord:
    """A user prompt, identified by its content signature."""

    timestamp: str
    signature: str

    @property
    def date_key(self) -> Optional[str]:
        parsed = parse_timestamp(self.timestamp)
        return to_date_key(parsed) if parsed else None


@dataclass
class ParsedSession:
    """
    Everything extracted from one session log file.

    Attributes:
        file_path: Path of the session log
        session_id: Session id from session metadata
        forked_from_id: Id of the session this one was forked from
        cwd: Working directory the session ran in
        session_date: Earliest session metadata timestamp seen in the file
        user_messages: User prompts in file order
        events: Usage events in file order
        message_signatures: Signatures parallel to user_messages
        token_signatures: Signatures parallel to events
        message_start_index: Leading messages inherited from another session
        token_start_index: Leading events inherited from another session
    """

    file_path: str
    session_id: Optional[str] = None
    forked_from_id: Optional[str] = None
    cwd: Optional[str] = None
    session_date: Optional[datetime] = None
    user_messages: list[UserMessageRecord] = field(default_factory=list)
    events: list[UsageEvent] = field(default_factory=list)
    message_signatures: list[str] = field(default_factory=list)
    token_signatures: list[str] = field(default_factory=list)
    message_start_index: int = 0
    token_start_index: int = 0

    @property
    def new_messages(self) -> list[UserMessageRecord]:
        """User messages that were not inherited from another session."""
        return self.user_messages[self.message_start_index:]

    @property
    def new_events(self) -> list[UsageEvent]:
        """Usage events that were not inherited from another session."""
        return self.events[self.token_start_index:]


@dataclass
class CodexUsageData:
    """
    Merged, deduplicated usage for one calendar year.

    Attributes:
        events: Usage events sorted by timestamp
        daily_activity: Date key (YYYY-MM-DD) to user message count
        total_messages: Number of deduplicated user messages
        total_sessions: Number of session files discovered
        projects: Distinct working directories
        earliest_session_date: Earliest session start across all files
    """

    events: list[UsageEvent] = field(default_factory=list)
    daily_activity: dict[str, int] = field(default_factory=dict)
    total_messages: int = 0
    total_sessions: int = 0
    projects: set[str] = field(default_factory=set)
    earliest_session_date: Optional[datetime] = None
#endregion
