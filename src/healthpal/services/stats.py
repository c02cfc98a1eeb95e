"""Daily intake versus energy spent."""

import math
from collections.abc import Iterable

from healthpal.domain.food_logs import FoodLogEntry
from healthpal.domain.metrics import DailyMetrics
from healthpal.domain.stats import DailySummary, EnergyBalance


def effective_metrics(
    live: DailyMetrics, cached: DailyMetrics | None = None
) -> DailyMetrics:
    """Fall back to the cached value for each metric that reads as zero."""
    if cached is None:
        return live
    return DailyMetrics(
        day=live.day,
        steps=live.steps if live.steps > 0 else cached.steps,
        heart_rate=live.heart_rate if live.heart_rate > 0 else cached.heart_rate,
        active_energy=(
            live.active_energy if live.active_energy > 0 else cached.active_energy
        ),
    )


def summarize_day(
    entries: Iterable[FoodLogEntry],
    live: DailyMetrics,
    cached: DailyMetrics | None = None,
) -> DailySummary:
    """Combine a day's food logs and metrics into a calorie balance.

    A net of exactly zero counts as a deficit.
    """
    intake = sum(entry.calories for entry in entries)
    spent = _round_kcal(effective_metrics(live, cached).active_energy)
    net = intake - spent
    status = EnergyBalance.DEFICIT if net <= 0 else EnergyBalance.SURPLUS
    return DailySummary(intake=intake, spent=spent, net=net, status=status)


def _round_kcal(value: float) -> int:
    """Round half away from zero for non-negative energy values."""
    return int(math.floor(max(value, 0.0) + 0.5))
