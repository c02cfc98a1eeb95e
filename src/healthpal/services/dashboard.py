"""Day view assembly: metrics, food logs, and the calorie balance."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from healthpal.domain.metrics import DailyMetrics
from healthpal.domain.stats import DayOverview
from healthpal.services.food_logs import FoodLogStore
from healthpal.services.stats import effective_metrics, summarize_day
from healthpal.services.storage import KeyValueStore

LAST_KNOWN_METRICS_KEY = "LastKnownMetricsV1"

_METRICS_ADAPTER = TypeAdapter(DailyMetrics)
_logger = logging.getLogger(__name__)


class MetricsProvider(Protocol):
    """Source of aggregate metrics for a day."""

    async def fetch(self, day: date) -> DailyMetrics:
        """Return metrics for a day, all zero when unavailable."""


class DayLoadSupersededError(Exception):
    """A newer day load cancelled this one."""

    def __init__(self, day: date) -> None:
        super().__init__(f"Loading {day.isoformat()} was superseded by a newer request")
        self.day = day


@dataclass
class DashboardService:
    """Builds the overview for a selected day.

    Zero-valued live metrics fall back to the last known non-zero values.
    Starting a new load cancels the metrics fetch of any older one still running.
    """

    metrics_provider: MetricsProvider
    food_log_store: FoodLogStore
    storage: KeyValueStore
    _pending: asyncio.Task[DailyMetrics] | None = field(init=False, default=None)

    async def load_day(self, day: date) -> DayOverview:
        """Return metrics, entries, and the calorie summary for a day."""
        live = await self._fetch_latest(day)
        cached = self.last_known()
        self._remember(live, cached)
        entries = self.food_log_store.entries_for_day(day)
        return DayOverview(
            day=day,
            metrics=effective_metrics(live, cached),
            entries=entries,
            summary=summarize_day(entries, live, cached),
        )

    def last_known(self) -> DailyMetrics | None:
        """Return the cached last known metrics, if any."""
        try:
            raw = self.storage.get(LAST_KNOWN_METRICS_KEY)
        except Exception:
            _logger.exception("Failed reading cached metrics")
            return None
        if raw is None:
            return None
        try:
            return _METRICS_ADAPTER.validate_json(raw)
        except (ValidationError, ValueError):
            _logger.warning("Ignoring unreadable cached metrics", exc_info=True)
            return None

    async def _fetch_latest(self, day: date) -> DailyMetrics:
        task = asyncio.create_task(self.metrics_provider.fetch(day))
        previous, self._pending = self._pending, task
        if previous is not None and not previous.done():
            previous.cancel()
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task.cancelled() and (current is None or current.cancelling() == 0):
                raise DayLoadSupersededError(day) from None
            raise
        finally:
            if self._pending is task:
                self._pending = None

    def _remember(self, live: DailyMetrics, cached: DailyMetrics | None) -> None:
        if live.is_empty():
            return
        merged = effective_metrics(live, cached)
        try:
            payload = _METRICS_ADAPTER.dump_json(merged).decode("utf-8")
            self.storage.set(LAST_KNOWN_METRICS_KEY, payload)
        except Exception:
            _logger.exception("Failed caching last known metrics")
