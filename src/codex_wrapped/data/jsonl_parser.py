#region Imports
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from codex_wrapped.config.settings import LEGACY_FALLBACK_MODEL
from codex_wrapped.data.signatures import (
    create_token_event_signature,
    create_user_message_signature,
)
from codex_wrapped.data.usage_delta import (
    as_non_empty_string,
    extract_model,
    resolve_delta,
)
from codex_wrapped.models.usage_record import (
    ParsedSession,
    RawUsage,
    UsageEvent,
    UserMessageRecord,
    parse_timestamp,
)
#endregion


logger = logging.getLogger("codex_wrapped.parser")


#region Record Types


@dataclass(frozen=True)
class SessionMetaRecord:
    """`session_meta` line: identity and start time of the session."""

    timestamp: Optional[datetime]
    session_id: Optional[str]
    forked_from_id: Optional[str]
    cwd: Optional[str]


@dataclass(frozen=True)
class TurnContextRecord:
    """`turn_context` line: the model used for the following turns."""

    model: Optional[str]


@dataclass(frozen=True)
class UserMessageLine:
    """`event_msg` line of type `user_message`."""

    timestamp: str
    signature: str


@dataclass(frozen=True)
class TokenCountRecord:
    """`event_msg` line of type `token_count`."""

    timestamp: str
    info: Any
    model: Optional[str]


SessionRecord = Union[SessionMetaRecord, TurnContextRecord, UserMessageLine, TokenCountRecord]


@dataclass(frozen=True)
class ModelTracker:
    """
    Model in effect for usage records that do not name one.

    Attributes:
        current_model: Last model seen in the session
        is_fallback: True when current_model is the legacy fallback rather
            than a model the log actually named
    """

    current_model: Optional[str] = None
    is_fallback: bool = False

    def observe(self, model: Optional[str]) -> "ModelTracker":
        """Return the tracker after seeing an explicit model (or nothing)."""
        if model:
            return ModelTracker(current_model=model, is_fallback=False)
        return self

    def resolve(self, model: Optional[str]) -> tuple[str, "ModelTracker"]:
        """
        Pick the model for a usage event.

        Args:
            model: Model embedded in the event itself, if any

        Returns:
            Tuple of (model to record, updated tracker)
        """
        if model:
            return model, self.observe(model)
        if self.current_model:
            return self.current_model, self
        return LEGACY_FALLBACK_MODEL, ModelTracker(
            current_model=LEGACY_FALLBACK_MODEL, is_fallback=True
        )


@dataclass
class _SessionState:
    """Mutable accumulator for one file scan."""

    file_path: str
    session_id: Optional[str] = None
    forked_from_id: Optional[str] = None
    cwd: Optional[str] = None
    session_date: Optional[datetime] = None
    tracker: ModelTracker = field(default_factory=ModelTracker)
    previous_totals: Optional[RawUsage] = None
    user_messages: list[UserMessageRecord] = field(default_factory=list)
    events: list[UsageEvent] = field(default_factory=list)


#endregion


#region Functions


def parse_session_file(file_path: Path) -> ParsedSession:
    """
    Parse a single Codex session log into a ParsedSession.

    Reads the file line by line. Blank lines, lines that are not JSON
    objects and unrecognized record types are skipped. A file that cannot
    be opened produces an empty session rather than an error.

    Args:
        file_path: Path to the session JSONL file

    Returns:
        ParsedSession with messages, usage events and their signatures
    """
    state = _SessionState(file_path=str(file_path))

    try:
        for record in iter_session_records(file_path):
            _apply_record(state, record)
    except OSError as e:
        logger.warning("Skipping unreadable session file %s: %s", file_path, e)

    return ParsedSession(
        file_path=state.file_path,
        session_id=state.session_id,
        forked_from_id=state.forked_from_id,
        cwd=state.cwd,
        session_date=state.session_date,
        user_messages=state.user_messages,
        events=state.events,
        message_signatures=[message.signature for message in state.user_messages],
        token_signatures=[create_token_event_signature(event) for event in state.events],
    )


def iter_session_records(file_path: Path) -> Iterator[SessionRecord]:
    """
    Yield the recognized records of a session log, in file order.

    Args:
        file_path: Path to the session JSONL file

    Yields:
        One typed record per recognized line

    Raises:
        OSError: If the file cannot be opened or read
    """
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        for line_num, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue

            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                logger.debug("Skipping malformed JSON at %s:%d: %s", file_path, line_num, e)
                continue

            if not isinstance(data, Mapping):
                continue

            record = parse_record(data)
            if record is not None:
                yield record


def parse_record(data: Mapping[str, Any]) -> Optional[SessionRecord]:
    """
    Classify one decoded log line.

    Args:
        data: Parsed JSON object from a JSONL line

    Returns:
        Typed record, or None for record types that carry nothing we use
        (and for user/token events without a timestamp)
    """
    entry_type = data.get("type")
    payload = data.get("payload")
    if not isinstance(payload, Mapping):
        payload = {}

    if entry_type == "session_meta":
        raw_timestamp = payload.get("timestamp") or data.get("timestamp")
        return SessionMetaRecord(
            timestamp=parse_timestamp(raw_timestamp) if raw_timestamp else None,
            session_id=as_non_empty_string(payload.get("id")),
            forked_from_id=as_non_empty_string(payload.get("forked_from_id")),
            cwd=as_non_empty_string(payload.get("cwd")),
        )

    if entry_type == "turn_context":
        return TurnContextRecord(model=extract_model(payload))

    if entry_type != "event_msg":
        return None

    timestamp = data.get("timestamp")
    if not isinstance(timestamp, str) or not timestamp:
        return None

    event_type = payload.get("type")
    if event_type == "user_message":
        return UserMessageLine(
            timestamp=timestamp,
            signature=create_user_message_signature(payload),
        )

    if event_type == "token_count":
        info = payload.get("info")
        return TokenCountRecord(
            timestamp=timestamp,
            info=info,
            model=extract_model({**payload, "info": info}),
        )

    return None


def _apply_record(state: _SessionState, record: SessionRecord) -> None:
    """Fold one record into the session being built."""
    if isinstance(record, SessionMetaRecord):
        if record.timestamp and (state.session_date is None or record.timestamp < state.session_date):
            state.session_date = record.timestamp
        if record.cwd:
            state.cwd = record.cwd
        # First id wins; later meta lines come from resumes
        if state.session_id is None:
            state.session_id = record.session_id
        if state.forked_from_id is None:
            state.forked_from_id = record.forked_from_id
        return

    if isinstance(record, TurnContextRecord):
        state.tracker = state.tracker.observe(record.model)
        return

    if isinstance(record, UserMessageLine):
        state.user_messages.append(
            UserMessageRecord(timestamp=record.timestamp, signature=record.signature)
        )
        return

    delta, state.previous_totals = resolve_delta(record.info, state.previous_totals)
    if delta is None or delta.is_zero:
        return

    model, state.tracker = state.tracker.resolve(record.model)
    state.events.append(UsageEvent.from_delta(record.timestamp, model, delta))
#endregion
