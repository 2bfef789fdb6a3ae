"""Token pricing and cost reporting.

``PricingTable`` is owned by the engine and shared by auto-selection,
``yeet doctor`` and the post-commit cost line, so all three agree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

from yeet.config.settings import PricingOverride
from yeet.engine.models import Usage

CURRENCY = "USD"
CURRENCY_SIGN = "$"

UNKNOWN_COST = -1.0


class ModelPricing(NamedTuple):
    input_per_million: float
    output_per_million: float


# USD per 1M tokens. Keep in sync with the registry's default models.
DEFAULT_PRICING: dict[str, ModelPricing] = {
    # Anthropic
    "claude-haiku-4-5-20251001": ModelPricing(1.00, 5.00),
    "claude-sonnet-4-6": ModelPricing(3.00, 15.00),
    "claude-opus-4-6": ModelPricing(5.00, 25.00),
    # OpenAI
    "gpt-4.1-nano": ModelPricing(0.10, 0.40),
    "gpt-4o-mini": ModelPricing(0.15, 0.60),
    "gpt-4.1-mini": ModelPricing(0.40, 1.60),
    "gpt-4.1": ModelPricing(2.00, 8.00),
    "gpt-4o": ModelPricing(2.50, 10.00),
    "o4-mini": ModelPricing(1.10, 4.40),
    # Google
    "gemini-2.5-flash": ModelPricing(0.15, 0.60),
    "gemini-3-flash-preview": ModelPricing(0.50, 3.00),
    # Groq
    "llama-3.1-8b-instant": ModelPricing(0.05, 0.08),
    "llama-3.3-70b-versatile": ModelPricing(0.59, 0.79),
    "openai/gpt-oss-20b": ModelPricing(0.10, 0.75),
    # Mistral
    "mistral-small-latest": ModelPricing(0.20, 0.60),
    "codestral-latest": ModelPricing(0.30, 0.90),
    "mistral-large-latest": ModelPricing(0.50, 1.50),
}


class PricingTable:
    """Model id to per-million-token prices, with runtime overrides."""

    def __init__(self, prices: Mapping[str, ModelPricing] | None = None) -> None:
        self._prices: dict[str, ModelPricing] = dict(
            DEFAULT_PRICING if prices is None else prices
        )

    def set_pricing(self, model_id: str, input_per_million: float, output_per_million: float) -> None:
        """Add or replace the price for *model_id*."""
        self._prices[model_id] = ModelPricing(input_per_million, output_per_million)

    def apply_overrides(self, overrides: Mapping[str, PricingOverride]) -> None:
        for model_id, override in overrides.items():
            self.set_pricing(model_id, override.input, override.output)

    def lookup(self, model_id: str) -> ModelPricing | None:
        return self._prices.get(model_id)

    def input_cost_per_million(self, model_id: str) -> float:
        """Input price for *model_id*, or ``UNKNOWN_COST`` (negative) if unpriced."""
        price = self._prices.get(model_id)
        if price is None:
            return UNKNOWN_COST
        return price.input_per_million

    def cost(self, usage: Usage) -> tuple[str, bool]:
        """Return ``("$0.0012", True)``, or ``("", False)`` for unpriced models."""
        price = self._prices.get(usage.model_id)
        if price is None:
            return "", False
        amount = (
            usage.input_tokens * price.input_per_million / 1_000_000
            + usage.output_tokens * price.output_per_million / 1_000_000
        )
        return f"{CURRENCY_SIGN}{amount:.4f}", True

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._prices


def format_count(n: int) -> str:
    if n >= 1000:
        return f"{n / 1000:.1f}k"
    return str(n)


def format_tokens(usage: Usage) -> str:
    """Short token summary like ``3.1k in / 28 out``."""
    return f"{format_count(usage.input_tokens)} in / {format_count(usage.output_tokens)} out"


def cost_line(usage: Usage, pricing: PricingTable) -> str:
    """``$0.0012 · 3.1k in / 28 out · model``; the price is left out when unknown."""
    cost, known = pricing.cost(usage)
    parts = [format_tokens(usage), usage.model_id]
    if known:
        parts.insert(0, cost)
    return " · ".join(parts)
