"""Configuration module for codex-wrapped."""

from codex_wrapped.config.defaults import (
    DEFAULT_MODEL_PRICING,
    MODEL_ALIASES,
    PROVIDER_PREFIXES,
)
from codex_wrapped.config.settings import (
    get_codex_home,
    get_history_path,
    get_sessions_dir,
)

__all__ = [
    "DEFAULT_MODEL_PRICING",
    "MODEL_ALIASES",
    "PROVIDER_PREFIXES",
    "get_codex_home",
    "get_history_path",
    "get_sessions_dir",
]
