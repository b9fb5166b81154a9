"""
Fork-aware deduplication of Codex sessions.

A forked session log starts with a copy of its parent's transcript. Each
session is compared against the sessions processed before it, and the
leading records it shares with them are skipped when merging. Sessions must
be fed in chronological order.
"""
#region Imports
import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from typing import DefaultDict

from codex_wrapped.config.settings import (
    FORK_PREFIX_MIN_MATCH,
    FORK_SHORT_SEQUENCE_LENGTH,
)
from codex_wrapped.models.usage_record import ParsedSession
#endregion


logger = logging.getLogger("codex_wrapped.dedup")


#region Data Classes


@dataclass(frozen=True)
class SessionSignatures:
    """Signature sequences kept for sessions already merged."""

    message_signatures: tuple[str, ...]
    token_signatures: tuple[str, ...]


#endregion


#region Functions


def common_prefix_length(left: Sequence[str], right: Sequence[str]) -> int:
    """Number of leading elements the two sequences share."""
    limit = min(len(left), len(right))
    index = 0
    while index < limit and left[index] == right[index]:
        index += 1
    return index


def find_largest_prefix_overlap(
    sequence: Sequence[str],
    candidate_sequences: Sequence[Sequence[str]],
) -> int:
    """
    Longest common prefix between a sequence and any of the candidates.

    Stops early once a candidate covers the whole sequence.
    """
    if not sequence or not candidate_sequences:
        return 0

    best = 0
    for candidate in candidate_sequences:
        if not candidate:
            continue
        overlap = common_prefix_length(sequence, candidate)
        if overlap > best:
            best = overlap
            if best == len(sequence):
                return best
    return best


def should_apply_fork_dedup(overlap: int, sequence_length: int) -> bool:
    """
    Decide whether a same-directory prefix match is a real fork.

    Short generic openings are common, so the overlap must be at least
    FORK_PREFIX_MIN_MATCH, and short sequences must match in full.

    Args:
        overlap: Shared prefix length with the best prior session
        sequence_length: Length of the session's own sequence

    Returns:
        True if the overlap should be discarded
    """
    if overlap < FORK_PREFIX_MIN_MATCH:
        return False
    if sequence_length <= FORK_SHORT_SEQUENCE_LENGTH:
        return overlap == sequence_length
    return True


#endregion


#region Classes


class DedupIndex:
    """
    State for one merge pass: what has been seen, by session id and by cwd.

    Only grows forward; a session is never re-evaluated against sessions
    fed after it.
    """

    def __init__(self) -> None:
        self._sessions_by_id: dict[str, SessionSignatures] = {}
        self._sessions_by_cwd: DefaultDict[str, list[SessionSignatures]] = defaultdict(list)

    def apply(self, session: ParsedSession) -> ParsedSession:
        """
        Set the session's start indexes and record it for later sessions.

        An explicit parent (forked_from_id of an already-seen session) is
        trusted at any overlap length. Without one, prior sessions in the
        same working directory are matched heuristically, guarded by
        should_apply_fork_dedup. Messages and usage events are matched
        independently.

        Args:
            session: Parsed session, fed in chronological order

        Returns:
            The same session with message_start_index and token_start_index set
        """
        message_start = 0
        token_start = 0

        parent = self._sessions_by_id.get(session.forked_from_id) if session.forked_from_id else None

        if parent is not None:
            message_start = common_prefix_length(session.message_signatures, parent.message_signatures)
            token_start = common_prefix_length(session.token_signatures, parent.token_signatures)
            logger.debug(
                "%s forked from %s: skipping %d messages, %d usage events",
                session.file_path, session.forked_from_id, message_start, token_start,
            )
        elif session.cwd:
            candidates = self._sessions_by_cwd.get(session.cwd, [])

            message_overlap = find_largest_prefix_overlap(
                session.message_signatures,
                [item.message_signatures for item in candidates],
            )
            if should_apply_fork_dedup(message_overlap, len(session.message_signatures)):
                message_start = message_overlap

            token_overlap = find_largest_prefix_overlap(
                session.token_signatures,
                [item.token_signatures for item in candidates],
            )
            if should_apply_fork_dedup(token_overlap, len(session.token_signatures)):
                token_start = token_overlap

            if message_start or token_start:
                logger.debug(
                    "%s matches an earlier session in %s: skipping %d messages, %d usage events",
                    session.file_path, session.cwd, message_start, token_start,
                )

        session.message_start_index = message_start
        session.token_start_index = token_start
        self._record(session)
        return session

    def _record(self, session: ParsedSession) -> None:
        signatures = SessionSignatures(
            message_signatures=tuple(session.message_signatures),
            token_signatures=tuple(session.token_signatures),
        )
        if session.session_id:
            self._sessions_by_id[session.session_id] = signatures
        if session.cwd:
            self._sessions_by_cwd[session.cwd].append(signatures)
#endregion
