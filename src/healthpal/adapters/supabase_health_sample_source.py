"""Supabase repository for health samples."""

from dataclasses import dataclass
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from supabase import Client

from healthpal.domain.metrics import HealthQuantity, HealthSample
from healthpal.services.calendar import as_local
from healthpal.services.metrics import HealthSampleRecorder, HealthSampleSource


@dataclass
class SupabaseHealthSampleSource(HealthSampleSource, HealthSampleRecorder):
    """Supabase implementation for health samples.

    Timestamps are written with an explicit offset in the configured timezone.
    """

    client: Client
    timezone: ZoneInfo

    def record(self, sample: HealthSample) -> None:
        """Insert a health sample row."""
        self.client.table("health_samples").insert(
            {
                "quantity": sample.quantity.value,
                "value": sample.value,
                "recorded_at": as_local(sample.recorded_at, self.timezone).isoformat(),
            }
        ).execute()

    def list_values(
        self, quantity: HealthQuantity, start: datetime, end: datetime
    ) -> list[float]:
        """Return sample values recorded within a time range."""
        response = (
            self.client.table("health_samples")
            .select("value")
            .eq("quantity", quantity.value)
            .gte("recorded_at", start.astimezone(UTC).isoformat())
            .lt("recorded_at", end.astimezone(UTC).isoformat())
            .execute()
        )
        return [float(row["value"]) for row in response.data or []]
