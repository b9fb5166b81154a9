#region Imports
from dataclasses import dataclass
from typing import Optional

from codex_wrapped.config.defaults import (
    DEFAULT_MODEL_PRICING,
    MODEL_ALIASES,
    PROVIDER_PREFIXES,
)
#endregion


#region Constants
MILLION = 1_000_000
#endregion


#region Data Classes


@dataclass(frozen=True)
class ModelPricing:
    """
    Represents pricing for a Codex model.

    Attributes:
        input_price: Price per million uncached input tokens (USD)
        cached_input_price: Price per million cached input tokens (USD)
        output_price: Price per million output tokens (USD)
        model_name: Human-readable model name
    """

    input_price: float
    cached_input_price: float
    output_price: float
    model_name: str


#endregion


#region Functions


def get_model_pricing(model_id: str) -> Optional[ModelPricing]:
    """
    Get pricing information for a given model ID.

    Tries the model as given, without a provider prefix, under its alias,
    and with each known provider prefix.

    Args:
        model_id: Model identifier (e.g., 'openai/gpt-5-codex')

    Returns:
        ModelPricing, or None if the model has no known price
    """
    for candidate in _pricing_candidates(model_id):
        pricing_info = DEFAULT_MODEL_PRICING.get(candidate)
        if pricing_info is None:
            continue

        input_price = pricing_info["input_price"]
        return ModelPricing(
            input_price=input_price,
            cached_input_price=pricing_info.get("cached_input_price", input_price),
            output_price=pricing_info["output_price"],
            model_name=pricing_info.get("display_name", candidate),
        )

    return None


def calculate_cost(
    input_tokens: float,
    cached_input_tokens: float,
    output_tokens: float,
    pricing: ModelPricing,
) -> float:
    """
    Calculate the cost for given token usage.

    Cached input is a subset of input and is billed at the cached rate;
    the remainder of the input is billed at the full rate. Reasoning tokens
    are already part of output.

    Args:
        input_tokens: Number of input tokens (cached included)
        cached_input_tokens: Number of cached input tokens
        output_tokens: Number of output tokens
        pricing: Prices for the model

    Returns:
        Total cost in USD
    """
    cached = min(cached_input_tokens, input_tokens)
    non_cached = max(input_tokens - cached, 0)

    input_cost = (non_cached / MILLION) * pricing.input_price
    cached_cost = (cached / MILLION) * pricing.cached_input_price
    output_cost = (output_tokens / MILLION) * pricing.output_price

    return input_cost + cached_cost + output_cost


def format_cost(cost: float, precision: int = 2) -> str:
    """
    Format cost value for display.

    Args:
        cost: Cost in USD
        precision: Number of decimal places (default: 2)

    Returns:
        Formatted string with thousands separators (e.g., "$1,234.56")
    """
    return f"${cost:,.{precision}f}"


def _strip_provider_prefix(model_id: str) -> str:
    # Longest prefix first so "openrouter/openai/" is not cut short
    for prefix in sorted(PROVIDER_PREFIXES, key=len, reverse=True):
        if model_id.startswith(prefix):
            return model_id[len(prefix):]
    return model_id


def _pricing_candidates(model_id: str) -> list[str]:
    candidates: list[str] = []

    def add(name: str) -> None:
        if name not in candidates:
            candidates.append(name)

    for variant in (model_id, _strip_provider_prefix(model_id)):
        add(variant)
        alias = MODEL_ALIASES.get(variant)
        if alias:
            add(alias)
        for prefix in PROVIDER_PREFIXES:
            add(f"{prefix}{variant}")
            if alias:
                add(f"{prefix}{alias}")

    return candidates
#endregion
