"""Health samples kept in the key-value store."""

import logging
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import TypeAdapter, ValidationError

from healthpal.domain.metrics import HealthQuantity, HealthSample
from healthpal.services.calendar import as_local
from healthpal.services.metrics import HealthSampleRecorder, HealthSampleSource
from healthpal.services.storage import KeyValueStore

HEALTH_SAMPLES_STORAGE_KEY = "HealthSamplesV1"

_SAMPLES_ADAPTER = TypeAdapter(list[HealthSample])
_logger = logging.getLogger(__name__)


@dataclass
class KeyValueHealthSampleSource(HealthSampleSource, HealthSampleRecorder):
    """Sample source that appends recorded samples to one stored blob.

    Naive timestamps are read as wall-clock time in the configured timezone.
    """

    storage: KeyValueStore
    timezone: ZoneInfo

    def record(self, sample: HealthSample) -> None:
        """Append a sample."""
        samples = self._load()
        samples.append(sample)
        self.storage.set(
            HEALTH_SAMPLES_STORAGE_KEY,
            _SAMPLES_ADAPTER.dump_json(samples).decode("utf-8"),
        )

    def list_values(
        self, quantity: HealthQuantity, start: datetime, end: datetime
    ) -> list[float]:
        """Return values for a quantity recorded in [start, end)."""
        return [
            sample.value
            for sample in self._load()
            if sample.quantity == quantity
            and start <= as_local(sample.recorded_at, self.timezone) < end
        ]

    def _load(self) -> list[HealthSample]:
        raw = self.storage.get(HEALTH_SAMPLES_STORAGE_KEY)
        if raw is None:
            return []
        try:
            return _SAMPLES_ADAPTER.validate_json(raw)
        except (ValidationError, ValueError):
            _logger.warning("Failed decoding health samples; ignoring them")
            return []
