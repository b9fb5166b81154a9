"""Builders for Codex session log lines used across tests."""
import json
from pathlib import Path
from typing import Optional


def session_meta(
    timestamp: Optional[str] = "2025-03-01T12:00:00Z",
    session_id: Optional[str] = None,
    forked_from_id: Optional[str] = None,
    cwd: Optional[str] = None,
) -> dict:
    payload: dict = {}
    if timestamp is not None:
        payload["timestamp"] = timestamp
    if session_id is not None:
        payload["id"] = session_id
    if forked_from_id is not None:
        payload["forked_from_id"] = forked_from_id
    if cwd is not None:
        payload["cwd"] = cwd
    return {"type": "session_meta", "timestamp": timestamp, "payload": payload}


def turn_context(model: str, timestamp: str = "2025-03-01T12:00:01Z") -> dict:
    return {"type": "turn_context", "timestamp": timestamp, "payload": {"model": model}}


def user_message(text: str, timestamp: Optional[str] = "2025-03-01T12:00:02Z", **extra) -> dict:
    line: dict = {"type": "event_msg", "payload": {"type": "user_message", "message": text, **extra}}
    if timestamp is not None:
        line["timestamp"] = timestamp
    return line


def token_count(
    timestamp: Optional[str] = "2025-03-01T12:00:03Z",
    last: Optional[dict] = None,
    total: Optional[dict] = None,
    model: Optional[str] = None,
) -> dict:
    info: dict = {}
    if last is not None:
        info["last_token_usage"] = last
    if total is not None:
        info["total_token_usage"] = total
    if model is not None:
        info["model"] = model
    line: dict = {"type": "event_msg", "payload": {"type": "token_count", "info": info}}
    if timestamp is not None:
        line["timestamp"] = timestamp
    return line


def usage(input_tokens: int = 0, output_tokens: int = 0, cached: int = 0, reasoning: int = 0, total: int = 0) -> dict:
    return {
        "input_tokens": input_tokens,
        "cached_input_tokens": cached,
        "output_tokens": output_tokens,
        "reasoning_output_tokens": reasoning,
        "total_tokens": total,
    }


def write_jsonl(path: Path, lines: list) -> Path:
    """Write dicts (or raw strings) one per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    rendered = [line if isinstance(line, str) else json.dumps(line) for line in lines]
    path.write_text("\n".join(rendered) + "\n", encoding="utf-8")
    return path


def write_session(sessions_dir: Path, relative_day: str, name: str, lines: list) -> Path:
    """Write a session log under <sessions>/<yyyy/mm/dd>/<name>."""
    return write_jsonl(sessions_dir / relative_day / name, lines)
