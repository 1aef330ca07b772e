"""API-equivalent cost estimation and usage ratios."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

# USD per message, a flat API-equivalent rate.
DEFAULT_COST_PER_MESSAGE = 0.05

# What a heavy subscriber might spend per month at API prices.
ESTIMATED_MAX_EQUIVALENT = 400.0

DEFAULT_SUBSCRIPTION_COST = 100.0


def estimate_cost(message_count: int, cost_per_message: float = DEFAULT_COST_PER_MESSAGE) -> float:
    """Estimate the API-equivalent cost of ``message_count`` messages."""
    if message_count <= 0 or cost_per_message <= 0:
        return 0.0
    return round(message_count * cost_per_message, 2)


def calculate_usage_percentage(estimated_api_cost: float) -> float:
    """Share of the estimated monthly maximum, capped to 0..100."""
    if estimated_api_cost < 0:
        return 0.0
    return min(estimated_api_cost / ESTIMATED_MAX_EQUIVALENT * 100, 100.0)


def calculate_value_multiplier(
    estimated_api_cost: float,
    subscription_cost: float = DEFAULT_SUBSCRIPTION_COST,
) -> float:
    """API cost divided by subscription cost; 0 for a non-positive subscription."""
    if subscription_cost <= 0:
        return 0.0
    return estimated_api_cost / subscription_cost


def calculate_time_ratio(human_time: int, claude_time: int) -> tuple[int, int]:
    """Return ``(human_percentage, claude_percentage)``.

    The two always sum to 100, or are both 0 when there is no active time.
    The human share is rounded half up.
    """
    total = human_time + claude_time
    if total <= 0:
        return 0, 0
    human = (human_time * 200 + total) // (2 * total)
    return human, 100 - human


def format_cost(cost: float) -> str:
    """Format ``1234.5`` as ``$1,234.50``."""
    amount = Decimal(str(cost)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"${amount:,}"


def format_multiplier(multiplier: float) -> str:
    amount = Decimal(str(multiplier)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{amount}x"
