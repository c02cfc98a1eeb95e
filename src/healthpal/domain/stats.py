"""Domain models for daily summaries."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from healthpal.domain.food_logs import FoodLogEntry
from healthpal.domain.metrics import DailyMetrics


class EnergyBalance(StrEnum):
    """Whether intake stayed at or below energy spent."""

    DEFICIT = "deficit"
    SURPLUS = "surplus"


@dataclass(frozen=True)
class DailySummary:
    """Intake, spent, and net calories for one day."""

    intake: int
    spent: int
    net: int
    status: EnergyBalance


@dataclass(frozen=True)
class DayOverview:
    """Everything shown for a selected day."""

    day: date
    metrics: DailyMetrics
    entries: list[FoodLogEntry]
    summary: DailySummary
