"""Daily health metrics from raw samples."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from healthpal.domain.metrics import DailyMetrics, HealthQuantity, HealthSample
from healthpal.services.calendar import day_window

_logger = logging.getLogger(__name__)


class HealthSampleSource(Protocol):
    """Read access to raw health samples."""

    def list_values(
        self, quantity: HealthQuantity, start: datetime, end: datetime
    ) -> list[float]:
        """Return sample values recorded in [start, end)."""


class HealthSampleRecorder(Protocol):
    """Write access to raw health samples."""

    def record(self, sample: HealthSample) -> None:
        """Persist a health sample."""


@dataclass
class MetricsService:
    """Aggregates steps, heart rate, and active energy for a day.

    Failures never propagate: a quantity that cannot be read counts as zero.
    """

    source: HealthSampleSource
    timezone: ZoneInfo

    async def fetch(self, day: date) -> DailyMetrics:
        """Return aggregate metrics for a local calendar day."""
        start, end = day_window(day, self.timezone)
        steps, heart_rate, active_energy = await asyncio.gather(
            self._read(HealthQuantity.STEPS, start, end),
            self._read(HealthQuantity.HEART_RATE, start, end),
            self._read(HealthQuantity.ACTIVE_ENERGY, start, end),
        )
        average_heart_rate = sum(heart_rate) / len(heart_rate) if heart_rate else 0.0
        return DailyMetrics(
            day=day,
            steps=_non_negative(sum(steps)),
            heart_rate=_non_negative(average_heart_rate),
            active_energy=_non_negative(sum(active_energy)),
        )

    async def _read(
        self, quantity: HealthQuantity, start: datetime, end: datetime
    ) -> list[float]:
        try:
            return await asyncio.to_thread(
                self.source.list_values, quantity, start, end
            )
        except Exception:
            _logger.warning(
                "Metrics fetch failed for %s on %s",
                quantity.value,
                start.date(),
                exc_info=True,
            )
            return []


def _non_negative(value: float) -> float:
    return max(float(value), 0.0)
