#region Imports
import math
from collections.abc import Mapping
from typing import Any, Optional

from codex_wrapped.models.usage_record import RawUsage, UsageDelta
#endregion


#region Value Helpers


def ensure_number(value: Any) -> float:
    """
    Coerce a JSON value to a usable counter.

    Args:
        value: Any decoded JSON value

    Returns:
        The value if it is a finite int/float (negatives clamped to 0),
        otherwise 0
    """
    # bool is an int subclass; JSON true/false are not counters
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(value, 0)


def as_non_empty_string(value: Any) -> Optional[str]:
    """Return the stripped string, or None for blanks and non-strings."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def extract_model(payload: Any) -> Optional[str]:
    """
    Find the model name in a record payload.

    Checks, in order: info.model, info.model_name, info.metadata.model,
    model, metadata.model. The first non-empty string wins.

    Args:
        payload: Decoded payload object (turn_context or token_count)

    Returns:
        Model name, or None if no candidate is a non-empty string
    """
    if not isinstance(payload, Mapping):
        return None

    info = payload.get("info")
    if isinstance(info, Mapping):
        for candidate in (info.get("model"), info.get("model_name")):
            model = as_non_empty_string(candidate)
            if model:
                return model
        metadata = info.get("metadata")
        if isinstance(metadata, Mapping):
            model = as_non_empty_string(metadata.get("model"))
            if model:
                return model

    model = as_non_empty_string(payload.get("model"))
    if model:
        return model

    metadata = payload.get("metadata")
    if isinstance(metadata, Mapping):
        return as_non_empty_string(metadata.get("model"))

    return None


#endregion


#region Functions


def normalize_raw_usage(value: Any) -> Optional[RawUsage]:
    """
    Normalize a usage payload into RawUsage.

    Args:
        value: Decoded `last_token_usage` or `total_token_usage` object

    Returns:
        RawUsage with non-negative finite counters, or None if value is not
        an object
    """
    if not isinstance(value, Mapping):
        return None

    cached_value = value.get("cached_input_tokens")
    if cached_value is None:
        cached_value = value.get("cache_read_input_tokens")

    input_tokens = ensure_number(value.get("input_tokens"))
    output_tokens = ensure_number(value.get("output_tokens"))
    total_tokens = ensure_number(value.get("total_tokens"))

    return RawUsage(
        input_tokens=input_tokens,
        cached_input_tokens=ensure_number(cached_value),
        output_tokens=output_tokens,
        reasoning_output_tokens=ensure_number(value.get("reasoning_output_tokens")),
        total_tokens=total_tokens if total_tokens > 0 else input_tokens + output_tokens,
    )


def subtract_raw_usage(current: RawUsage, previous: Optional[RawUsage]) -> RawUsage:
    """
    Turn cumulative totals into the increment since the previous totals.

    Each field is clamped at zero, so a counter that resets upstream never
    yields a negative delta.

    Args:
        current: Latest cumulative totals
        previous: Totals seen on the previous cumulative record (None at start)

    Returns:
        Per-field increment
    """
    previous = previous or RawUsage()
    return RawUsage(
        input_tokens=max(current.input_tokens - previous.input_tokens, 0),
        cached_input_tokens=max(current.cached_input_tokens - previous.cached_input_tokens, 0),
        output_tokens=max(current.output_tokens - previous.output_tokens, 0),
        reasoning_output_tokens=max(
            current.reasoning_output_tokens - previous.reasoning_output_tokens, 0
        ),
        total_tokens=max(current.total_tokens - previous.total_tokens, 0),
    )


def convert_to_delta(raw: RawUsage) -> UsageDelta:
    """Canonical delta: cached input capped at input, total defaulted."""
    total = raw.total_tokens if raw.total_tokens > 0 else raw.input_tokens + raw.output_tokens
    return UsageDelta(
        input_tokens=raw.input_tokens,
        cached_input_tokens=min(raw.cached_input_tokens, raw.input_tokens),
        output_tokens=raw.output_tokens,
        reasoning_output_tokens=raw.reasoning_output_tokens,
        total_tokens=total,
    )


def resolve_delta(
    info: Any,
    previous_totals: Optional[RawUsage],
) -> tuple[Optional[UsageDelta], Optional[RawUsage]]:
    """
    Work out the usage delta carried by one token_count record.

    A direct `last_token_usage` is used as-is. Otherwise the delta is the
    difference between `total_token_usage` and the previous totals. Whenever
    `total_token_usage` is present it becomes the new previous totals, even
    if the direct delta was used.

    Args:
        info: The record's `payload.info` object
        previous_totals: Cumulative totals from the previous token_count record

    Returns:
        Tuple of (delta or None when the record carries no usage,
        totals to use for the next record)
    """
    if not isinstance(info, Mapping):
        return None, previous_totals

    last_usage = normalize_raw_usage(info.get("last_token_usage"))
    total_usage = normalize_raw_usage(info.get("total_token_usage"))

    raw = last_usage
    if raw is None and total_usage is not None:
        raw = subtract_raw_usage(total_usage, previous_totals)

    if total_usage is not None:
        previous_totals = total_usage

    if raw is None:
        return None, previous_totals

    return convert_to_delta(raw), previous_totals
#endregion
