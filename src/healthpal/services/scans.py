"""Food scan orchestration."""

import logging
from dataclasses import dataclass, field
from datetime import date

from healthpal.domain.analysis import AnalysisResult, AnalysisSuccess
from healthpal.domain.food_logs import FoodLogEntry
from healthpal.services.analysis import (
    DEFAULT_LABEL,
    FoodAnalysisService,
    NoCredentialConfiguredError,
)
from healthpal.services.food_logs import FoodLogStore
from healthpal.services.keys import KeyStore

_logger = logging.getLogger(__name__)


class ScanInProgressError(Exception):
    """Another scan is still running."""


@dataclass(frozen=True)
class ScanOutcome:
    """Result of a scan and the entry it produced, if any."""

    result: AnalysisResult
    entry: FoodLogEntry | None = None


@dataclass
class ScanService:
    """Runs one scan at a time and logs recognised food."""

    analysis_service: FoodAnalysisService
    key_store: KeyStore
    food_log_store: FoodLogStore
    _in_flight: bool = field(init=False, default=False)

    @property
    def in_flight(self) -> bool:
        """Return True while a scan is outstanding."""
        return self._in_flight

    async def scan(self, image_bytes: bytes, day: date) -> ScanOutcome:
        """Analyze a photo and log it under the given day when recognised."""
        if self._in_flight:
            raise ScanInProgressError("A scan is already in progress")
        self._in_flight = True
        try:
            configured = self.key_store.first_configured()
            if configured is None:
                raise NoCredentialConfiguredError
            provider, api_key = configured
            _logger.info("Scanning food photo with %s", provider.value)
            result = await self.analysis_service.analyze(image_bytes, api_key)
        finally:
            self._in_flight = False

        if not isinstance(result, AnalysisSuccess):
            return ScanOutcome(result=result)
        label = result.label or DEFAULT_LABEL
        entry = self.food_log_store.log(
            title=label, calories=result.calories, day=day, notes=result.label
        )
        return ScanOutcome(result=result, entry=entry)
