#region Imports
import json
import logging
import math
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import DefaultDict, Optional

from codex_wrapped.config.settings import (
    SESSION_FILE_SUFFIX,
    get_history_path,
    get_sessions_dir,
)
from codex_wrapped.data.dedup import DedupIndex
from codex_wrapped.data.jsonl_parser import parse_session_file
from codex_wrapped.models.usage_record import CodexUsageData, ParsedSession, UsageEvent
#endregion


logger = logging.getLogger("codex_wrapped.collector")


#region Exceptions


class CodexDataNotFoundError(FileNotFoundError):
    """Raised when there is no Codex sessions directory to read."""


#endregion


#region Functions


def check_codex_data_exists(sessions_dir: Optional[Path] = None) -> bool:
    """True if the Codex sessions directory exists."""
    sessions_dir = sessions_dir or get_sessions_dir()
    try:
        return sessions_dir.is_dir()
    except OSError:
        return False


def require_codex_data(sessions_dir: Optional[Path] = None) -> Path:
    """
    Return the sessions directory, or raise if Codex was never run.

    Raises:
        CodexDataNotFoundError: If the sessions directory does not exist
    """
    sessions_dir = sessions_dir or get_sessions_dir()
    if not check_codex_data_exists(sessions_dir):
        raise CodexDataNotFoundError(
            f"Codex data not found at {sessions_dir}. "
            "Make sure you have used Codex at least once."
        )
    return sessions_dir


def list_session_files(year: int, sessions_dir: Optional[Path] = None) -> list[Path]:
    """
    Find all session logs for a year.

    Session logs live at <sessions>/<year>/<month>/<day>/*.jsonl. Missing or
    unreadable directories at any level contribute no files.

    Args:
        year: Calendar year to collect
        sessions_dir: Sessions root (defaults to ~/.codex/sessions)

    Returns:
        Sorted list of session log paths
    """
    sessions_dir = sessions_dir or get_sessions_dir()
    year_dir = sessions_dir / str(year)

    files: list[Path] = []
    for month_dir in _list_subdirectories(year_dir):
        for day_dir in _list_subdirectories(month_dir):
            try:
                entries = sorted(day_dir.iterdir())
            except OSError as e:
                logger.debug("Skipping unreadable directory %s: %s", day_dir, e)
                continue
            for entry in entries:
                if entry.name.endswith(SESSION_FILE_SUFFIX) and entry.is_file():
                    files.append(entry)

    return files


def get_first_prompt_timestamp(history_path: Optional[Path] = None) -> Optional[float]:
    """
    Earliest prompt timestamp in the Codex history file, across all years.

    Args:
        history_path: History file (defaults to ~/.codex/history.jsonl)

    Returns:
        Smallest `ts` value (seconds since epoch), or None if the file is
        missing or holds no usable timestamps
    """
    history_path = history_path or get_history_path()

    min_ts: Optional[float] = None
    try:
        with open(history_path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(entry, dict):
                    continue

                ts = entry.get("ts")
                if isinstance(ts, bool) or not isinstance(ts, (int, float)):
                    continue
                if not math.isfinite(ts) or ts <= 0:
                    continue
                if min_ts is None or ts < min_ts:
                    min_ts = ts
    except OSError as e:
        logger.debug("No history available at %s: %s", history_path, e)
        return None

    return min_ts


def sort_sessions(sessions: Iterable[ParsedSession]) -> list[ParsedSession]:
    """
    Order sessions for merging: by start time, undated last, then by path.

    Deduplication treats earlier sessions as the originals, so this order
    must follow real chronology rather than directory listing order.
    """
    return sorted(sessions, key=_session_sort_key)


def collect_usage_data(year: int, sessions_dir: Optional[Path] = None) -> CodexUsageData:
    """
    Collect deduplicated usage for a calendar year.

    Parses every session log of the year, merges them oldest first while
    skipping records inherited from forked-from sessions, and gathers the
    counters the year summary is built from.

    Args:
        year: Calendar year to collect
        sessions_dir: Sessions root (defaults to ~/.codex/sessions)

    Returns:
        CodexUsageData with timestamp-sorted events and activity counters
    """
    files = list_session_files(year, sessions_dir)
    logger.debug("Found %d session files for %d", len(files), year)

    sessions = sort_sessions(parse_session_file(path) for path in files)

    index = DedupIndex()
    events: list[UsageEvent] = []
    daily_activity: DefaultDict[str, int] = defaultdict(int)
    projects: set[str] = set()
    total_messages = 0
    earliest_session_date: Optional[datetime] = None

    for session in sessions:
        if session.cwd:
            projects.add(session.cwd)

        if session.session_date and (
            earliest_session_date is None or session.session_date < earliest_session_date
        ):
            earliest_session_date = session.session_date

        index.apply(session)

        for message in session.new_messages:
            total_messages += 1
            date_key = message.date_key
            if date_key:
                daily_activity[date_key] += 1

        events.extend(session.new_events)

    events.sort(key=_event_sort_key)

    return CodexUsageData(
        events=events,
        daily_activity=dict(daily_activity),
        total_messages=total_messages,
        total_sessions=len(files),
        projects=projects,
        earliest_session_date=earliest_session_date,
    )


def _list_subdirectories(path: Path) -> list[Path]:
    try:
        return sorted(entry for entry in path.iterdir() if entry.is_dir())
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return []


def _session_sort_key(session: ParsedSession) -> tuple:
    if session.session_date is None:
        return (1, 0.0, session.file_path)
    return (0, session.session_date.timestamp(), session.file_path)


def _event_sort_key(event: UsageEvent) -> float:
    parsed = event.parsed_timestamp
    # Unparseable timestamps keep their relative order at the front
    return parsed.timestamp() if parsed else float("-inf")
#endregion
