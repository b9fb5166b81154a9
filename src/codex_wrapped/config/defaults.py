"""
Default pricing for Codex models.

Edit this file when model pricing changes.
All prices are per million tokens (MTok) in USD.
"""

#region Model Pricing Defaults
# Prices per million tokens (USD)
# cached_input_price falls back to input_price when omitted

DEFAULT_MODEL_PRICING = {
    # GPT-5 - original Codex default (deprecated)
    "gpt-5": {
        "input_price": 1.25,
        "cached_input_price": 0.125,
        "output_price": 10.0,
        "display_name": "GPT-5",
    },
    "gpt-5.2": {
        "input_price": 1.75,
        "cached_input_price": 0.175,
        "output_price": 14.0,
        "display_name": "GPT-5.2",
    },
    "gpt-5.2-codex": {
        "input_price": 1.75,
        "cached_input_price": 0.175,
        "output_price": 14.0,
        "display_name": "GPT-5.2 Codex",
    },
    "gpt-5.3-codex": {
        "input_price": 1.75,
        "cached_input_price": 0.175,
        "output_price": 14.0,
        "display_name": "GPT-5.3 Codex",
    },
    # Fast model
    "gpt-5.1-codex-mini": {
        "input_price": 0.25,
        "cached_input_price": 0.025,
        "output_price": 2.0,
        "display_name": "GPT-5.1 Codex Mini",
    },
    "gpt-5.1-codex-max": {
        "input_price": 1.25,
        "cached_input_price": 0.125,
        "output_price": 10.0,
        "display_name": "GPT-5.1 Codex Max",
    },
}

# Provider prefixes stripped before lookup
PROVIDER_PREFIXES = ["openai/", "azure/", "openrouter/openai/"]

# Models billed under another model's price
MODEL_ALIASES = {
    "gpt-5-codex": "gpt-5",
}

#endregion
