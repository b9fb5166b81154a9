import unittest

from codex_wrapped.data.dedup import (
    DedupIndex,
    common_prefix_length,
    find_largest_prefix_overlap,
    should_apply_fork_dedup,
)
from codex_wrapped.models.usage_record import ParsedSession, UserMessageRecord


def _session(
    name: str,
    messages: list[str],
    tokens: list[str] = (),
    session_id: str = None,
    forked_from_id: str = None,
    cwd: str = None,
) -> ParsedSession:
    return ParsedSession(
        file_path=name,
        session_id=session_id,
        forked_from_id=forked_from_id,
        cwd=cwd,
        user_messages=[UserMessageRecord("2025-03-01T12:00:00Z", m) for m in messages],
        message_signatures=list(messages),
        token_signatures=list(tokens),
    )


class PrefixHelperTests(unittest.TestCase):
    def test_common_prefix_length(self) -> None:
        self.assertEqual(common_prefix_length(["a", "b", "c"], ["a", "b", "x"]), 2)
        self.assertEqual(common_prefix_length(["a"], []), 0)
        self.assertEqual(common_prefix_length(["a", "b"], ["a", "b", "c"]), 2)

    def test_largest_overlap_across_candidates(self) -> None:
        sequence = ["a", "b", "c", "d"]
        candidates = [["a", "x"], [], ["a", "b", "c", "z"], ["q"]]
        self.assertEqual(find_largest_prefix_overlap(sequence, candidates), 3)
        self.assertEqual(find_largest_prefix_overlap([], candidates), 0)
        self.assertEqual(find_largest_prefix_overlap(sequence, []), 0)

    def test_full_match_short_circuits(self) -> None:
        sequence = ["a", "b"]
        self.assertEqual(find_largest_prefix_overlap(sequence, [["a", "b", "c"], ["a"]]), 2)

    def test_guard_thresholds(self) -> None:
        self.assertFalse(should_apply_fork_dedup(2, 10))
        self.assertTrue(should_apply_fork_dedup(3, 10))
        self.assertTrue(should_apply_fork_dedup(3, 5))
        self.assertFalse(should_apply_fork_dedup(3, 4))
        self.assertTrue(should_apply_fork_dedup(4, 4))
        self.assertTrue(should_apply_fork_dedup(3, 3))
        self.assertFalse(should_apply_fork_dedup(0, 0))


class DedupIndexTests(unittest.TestCase):
    def test_explicit_fork_skips_parent_prefix(self) -> None:
        index = DedupIndex()
        parent = index.apply(_session("a", ["m1", "m2", "m3"], session_id="A"))
        child = index.apply(_session("b", ["m1", "m2", "m3", "m4"], session_id="B", forked_from_id="A"))

        self.assertEqual(parent.message_start_index, 0)
        self.assertEqual(child.message_start_index, 3)
        self.assertEqual([m.signature for m in child.new_messages], ["m4"])

    def test_explicit_fork_has_no_minimum(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1", "x"], session_id="A", cwd="/w"))
        child = index.apply(_session("b", ["m1", "m2"], session_id="B", forked_from_id="A", cwd="/w"))

        self.assertEqual(child.message_start_index, 1)

    def test_unknown_parent_falls_back_to_directory_match(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1", "m2", "m3", "m4", "m5"], cwd="/w"))
        child = index.apply(
            _session("b", ["m1", "m2", "m3", "m4", "m9"], forked_from_id="never-seen", cwd="/w")
        )

        self.assertEqual(child.message_start_index, 4)

    def test_two_shared_messages_are_not_deduplicated(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["hi", "status?", "x1", "x2", "x3"], cwd="/w"))
        other = index.apply(_session("b", ["hi", "status?", "y1", "y2", "y3"], cwd="/w"))

        self.assertEqual(other.message_start_index, 0)

    def test_three_shared_messages_are_deduplicated(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1", "m2", "m3", "x1", "x2"], cwd="/w"))
        other = index.apply(_session("b", ["m1", "m2", "m3", "y1", "y2"], cwd="/w"))

        self.assertEqual(other.message_start_index, 3)

    def test_short_sequence_requires_full_match(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1", "m2", "m3", "m4", "m5"], cwd="/w"))

        partial = index.apply(_session("b", ["m1", "m2", "m3", "zz"], cwd="/w"))
        self.assertEqual(partial.message_start_index, 0)

        full = index.apply(_session("c", ["m1", "m2", "m3", "m4"], cwd="/w"))
        self.assertEqual(full.message_start_index, 4)
        self.assertEqual(full.new_messages, [])

    def test_other_directories_are_not_candidates(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1", "m2", "m3", "m4", "m5"], cwd="/w1"))
        other = index.apply(_session("b", ["m1", "m2", "m3", "m4", "m5"], cwd="/w2"))
        no_cwd = index.apply(_session("c", ["m1", "m2", "m3", "m4", "m5"]))

        self.assertEqual(other.message_start_index, 0)
        self.assertEqual(no_cwd.message_start_index, 0)

    def test_messages_and_tokens_are_independent(self) -> None:
        index = DedupIndex()
        index.apply(
            _session("a", ["m1", "m2", "m3", "m4", "m5"], tokens=["t1", "t2", "t3", "t4", "t5"], cwd="/w")
        )
        retried = index.apply(
            _session("b", ["m1", "m2", "m3", "m4", "n5"], tokens=["t1", "u2", "u3", "u4", "u5"], cwd="/w")
        )

        self.assertEqual(retried.message_start_index, 4)
        self.assertEqual(retried.token_start_index, 0)

    def test_best_candidate_wins(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1", "m2", "m3", "a4", "a5"], cwd="/w"))
        index.apply(_session("b", ["m1", "m2", "m3", "m4", "m5", "b6"], cwd="/w"))
        latest = index.apply(_session("c", ["m1", "m2", "m3", "m4", "m5", "m6", "m7"], cwd="/w"))

        self.assertEqual(latest.message_start_index, 5)

    def test_forked_session_becomes_candidate_for_later_sessions(self) -> None:
        index = DedupIndex()
        index.apply(_session("a", ["m1"], session_id="A", cwd="/w"))
        index.apply(_session("b", ["m1", "m2", "m3", "m4", "m5"], session_id="B", forked_from_id="A", cwd="/w"))
        grandchild = index.apply(_session("c", ["m1", "m2", "m3", "m4", "m5", "m6"], forked_from_id="B"))
        sibling = index.apply(_session("d", ["m1", "m2", "m3", "m4", "x"], cwd="/w"))

        self.assertEqual(grandchild.message_start_index, 5)
        self.assertEqual(sibling.message_start_index, 4)


if __name__ == "__main__":
    unittest.main()
