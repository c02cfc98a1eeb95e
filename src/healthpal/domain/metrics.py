"""Domain models for health metrics."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class HealthQuantity(StrEnum):
    """Health quantities read from the metrics source."""

    STEPS = "steps"
    HEART_RATE = "heart_rate"
    ACTIVE_ENERGY = "active_energy"


@dataclass(frozen=True)
class HealthSample:
    """A raw health measurement."""

    quantity: HealthQuantity
    value: float
    recorded_at: datetime

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("health sample values must be non-negative")


@dataclass(frozen=True)
class DailyMetrics:
    """Aggregated health metrics for one day.

    All three values at zero means "no data available", not "no activity".
    """

    day: date
    steps: float = 0.0
    heart_rate: float = 0.0
    active_energy: float = 0.0

    def is_empty(self) -> bool:
        """Return True for the all-zero "unknown" snapshot."""
        return self.steps == 0 and self.heart_rate == 0 and self.active_energy == 0
