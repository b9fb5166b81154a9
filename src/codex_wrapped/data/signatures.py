#region Imports
import json
from collections.abc import Mapping
from typing import Any

from codex_wrapped.data.usage_delta import as_non_empty_string
from codex_wrapped.models.usage_record import UsageEvent
#endregion


#region Constants
TOKEN_SIGNATURE_DELIMITER = "|"
#endregion


#region Functions


def create_user_message_signature(payload: Mapping[str, Any]) -> str:
    """
    Build a content signature for a user_message payload.

    Identical prompts replayed into a forked session produce identical
    signatures; that collision is what fork detection relies on.

    Args:
        payload: The event_msg payload of a user_message record

    Returns:
        Canonical JSON string of the message text, text elements and
        image counts
    """
    text_elements = payload.get("text_elements")
    images = payload.get("images")
    local_images = payload.get("local_images")

    return json.dumps(
        {
            "message": as_non_empty_string(payload.get("message")) or "",
            "textElements": text_elements if isinstance(text_elements, list) else [],
            "imageCount": len(images) if isinstance(images, list) else 0,
            "localImageCount": len(local_images) if isinstance(local_images, list) else 0,
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def create_token_event_signature(event: UsageEvent) -> str:
    """
    Build a signature for a usage event: model and counters joined by '|'.

    The model name is escaped so a '|' inside it cannot shift fields.
    """
    model = event.model.replace("\\", "\\\\").replace(
        TOKEN_SIGNATURE_DELIMITER, "\\" + TOKEN_SIGNATURE_DELIMITER
    )
    return TOKEN_SIGNATURE_DELIMITER.join(
        [
            model,
            _format_count(event.input_tokens),
            _format_count(event.cached_input_tokens),
            _format_count(event.output_tokens),
            _format_count(event.reasoning_output_tokens),
            _format_count(event.total_tokens),
        ]
    )


def _format_count(value: float) -> str:
    # 100 and 100.0 are the same count
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
#endregion
