#region Imports
import os
from pathlib import Path
from typing import Final, Optional
#endregion


#region Constants
# Codex data directory (overridable with CODEX_HOME, same as the Codex CLI)
CODEX_HOME_ENV: Final[str] = "CODEX_HOME"
DEFAULT_CODEX_HOME: Final[Path] = Path.home() / ".codex"

SESSIONS_DIRNAME: Final[str] = "sessions"
HISTORY_FILENAME: Final[str] = "history.jsonl"
SESSION_FILE_SUFFIX: Final[str] = ".jsonl"

# Model assumed for usage records that never name one (pre-metadata logs)
LEGACY_FALLBACK_MODEL: Final[str] = "gpt-5"

# Same-directory fork detection: minimum shared prefix, and the sequence
# length at or below which only a full-length match counts
FORK_PREFIX_MIN_MATCH: Final[int] = 3
FORK_SHORT_SEQUENCE_LENGTH: Final[int] = 4

# Number of models listed in the year summary
TOP_MODELS_LIMIT: Final[int] = 3
#endregion


#region Functions


def get_codex_home(override: Optional[Path] = None) -> Path:
    """
    Resolve the Codex data directory.

    Resolution order: explicit override, CODEX_HOME environment variable,
    then ~/.codex. Resolved on every call so the environment can change
    between runs (and in tests).

    Args:
        override: Explicit directory, e.g. from the --codex-home flag

    Returns:
        Path to the Codex data directory (may not exist)
    """
    if override is not None:
        return Path(override).expanduser()

    env_value = os.environ.get(CODEX_HOME_ENV, "").strip()
    if env_value:
        return Path(env_value).expanduser()

    return DEFAULT_CODEX_HOME


def get_sessions_dir(codex_home: Optional[Path] = None) -> Path:
    """Directory holding the year/month/day partitioned session logs."""
    return get_codex_home(codex_home) / SESSIONS_DIRNAME


def get_history_path(codex_home: Optional[Path] = None) -> Path:
    """Path of the prompt history file."""
    return get_codex_home(codex_home) / HISTORY_FILENAME
#endregion
