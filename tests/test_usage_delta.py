import math
import unittest

from codex_wrapped.data.usage_delta import (
    as_non_empty_string,
    convert_to_delta,
    ensure_number,
    extract_model,
    normalize_raw_usage,
    resolve_delta,
    subtract_raw_usage,
)
from codex_wrapped.models.usage_record import RawUsage


class ValueHelperTests(unittest.TestCase):
    def test_ensure_number_rejects_non_numbers(self) -> None:
        self.assertEqual(ensure_number(12), 12)
        self.assertEqual(ensure_number(1.5), 1.5)
        self.assertEqual(ensure_number("12"), 0)
        self.assertEqual(ensure_number(None), 0)
        self.assertEqual(ensure_number(True), 0)
        self.assertEqual(ensure_number(math.inf), 0)
        self.assertEqual(ensure_number(math.nan), 0)
        self.assertEqual(ensure_number(-50), 0)
        self.assertEqual(ensure_number(-0.5), 0)

    def test_as_non_empty_string(self) -> None:
        self.assertEqual(as_non_empty_string("  gpt-5  "), "gpt-5")
        self.assertIsNone(as_non_empty_string("   "))
        self.assertIsNone(as_non_empty_string(5))

    def test_extract_model_order(self) -> None:
        payload = {
            "model": "top-level",
            "metadata": {"model": "meta"},
            "info": {"model_name": "info-name", "metadata": {"model": "info-meta"}},
        }
        self.assertEqual(extract_model(payload), "info-name")

        payload["info"] = {"metadata": {"model": "info-meta"}}
        self.assertEqual(extract_model(payload), "info-meta")

        payload["info"] = {"model": "   "}
        self.assertEqual(extract_model(payload), "top-level")

        self.assertEqual(extract_model({"metadata": {"model": "meta"}}), "meta")
        self.assertIsNone(extract_model({"info": None}))
        self.assertIsNone(extract_model("gpt-5"))


class NormalizeTests(unittest.TestCase):
    def test_non_object_is_rejected(self) -> None:
        self.assertIsNone(normalize_raw_usage(None))
        self.assertIsNone(normalize_raw_usage([1, 2]))
        self.assertIsNone(normalize_raw_usage(42))

    def test_total_defaults_to_input_plus_output(self) -> None:
        raw = normalize_raw_usage({"input_tokens": 100, "output_tokens": 50, "total_tokens": 0})
        self.assertEqual(raw.total_tokens, 150)

    def test_reported_total_is_kept(self) -> None:
        raw = normalize_raw_usage({"input_tokens": 100, "output_tokens": 50, "total_tokens": 170})
        self.assertEqual(raw.total_tokens, 170)

    def test_cache_field_precedence(self) -> None:
        raw = normalize_raw_usage({"input_tokens": 10, "cache_read_input_tokens": 4})
        self.assertEqual(raw.cached_input_tokens, 4)

        raw = normalize_raw_usage(
            {"input_tokens": 10, "cached_input_tokens": 3, "cache_read_input_tokens": 4}
        )
        self.assertEqual(raw.cached_input_tokens, 3)

    def test_garbage_counters_become_zero(self) -> None:
        raw = normalize_raw_usage({"input_tokens": "lots", "output_tokens": None})
        self.assertEqual(raw, RawUsage(0, 0, 0, 0, 0))

    def test_negative_counters_clamp_to_zero(self) -> None:
        raw = normalize_raw_usage({"input_tokens": -50, "output_tokens": 10, "cached_input_tokens": -5})
        self.assertEqual(raw.input_tokens, 0)
        self.assertEqual(raw.cached_input_tokens, 0)
        self.assertEqual(raw.output_tokens, 10)
        self.assertEqual(raw.total_tokens, 10)


class DeltaTests(unittest.TestCase):
    def test_cumulative_sequence_yields_increments(self) -> None:
        first, previous = resolve_delta(
            {"total_token_usage": {"input_tokens": 100, "output_tokens": 50}}, None
        )
        second, previous = resolve_delta(
            {"total_token_usage": {"input_tokens": 150, "output_tokens": 80}}, previous
        )

        self.assertEqual((first.input_tokens, first.output_tokens), (100, 50))
        self.assertEqual((second.input_tokens, second.output_tokens), (50, 30))
        self.assertEqual(previous.input_tokens, 150)

    def test_counter_regression_clamps_to_zero(self) -> None:
        previous = RawUsage(input_tokens=150, output_tokens=80, total_tokens=230)
        delta, _ = resolve_delta(
            {"total_token_usage": {"input_tokens": 120, "output_tokens": 80}}, previous
        )
        self.assertEqual(delta.input_tokens, 0)
        self.assertEqual(delta.output_tokens, 0)
        self.assertTrue(delta.is_zero)

    def test_direct_delta_wins_but_totals_still_tracked(self) -> None:
        delta, previous = resolve_delta(
            {
                "last_token_usage": {"input_tokens": 7, "output_tokens": 3},
                "total_token_usage": {"input_tokens": 500, "output_tokens": 300},
            },
            RawUsage(input_tokens=10),
        )
        self.assertEqual((delta.input_tokens, delta.output_tokens), (7, 3))
        self.assertEqual(previous.input_tokens, 500)

    def test_negative_direct_usage_never_goes_below_zero(self) -> None:
        delta, _ = resolve_delta(
            {"last_token_usage": {"input_tokens": -50, "output_tokens": 10, "reasoning_output_tokens": -3}},
            None,
        )
        self.assertEqual(delta.input_tokens, 0)
        self.assertEqual(delta.reasoning_output_tokens, 0)
        self.assertEqual(delta.output_tokens, 10)
        self.assertFalse(delta.is_zero)

    def test_no_usage_keeps_previous(self) -> None:
        previous = RawUsage(input_tokens=10)
        delta, carried = resolve_delta({"rate_limits": {}}, previous)
        self.assertIsNone(delta)
        self.assertIs(carried, previous)

        delta, carried = resolve_delta(None, previous)
        self.assertIsNone(delta)
        self.assertIs(carried, previous)

    def test_subtract_from_nothing(self) -> None:
        current = RawUsage(1, 2, 3, 4, 5)
        self.assertEqual(subtract_raw_usage(current, None), current)

    def test_convert_clamps_cached_to_input(self) -> None:
        delta = convert_to_delta(RawUsage(input_tokens=10, cached_input_tokens=25, output_tokens=5))
        self.assertEqual(delta.cached_input_tokens, 10)
        self.assertEqual(delta.total_tokens, 15)

    def test_zero_delta_detection_ignores_total(self) -> None:
        delta = convert_to_delta(RawUsage(total_tokens=40))
        self.assertTrue(delta.is_zero)


if __name__ == "__main__":
    unittest.main()
