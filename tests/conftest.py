"""Shared test fixtures."""

import io
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import httpx
import pytest
from PIL import Image

from healthpal.config import Settings
from healthpal.containers import AppContainer
from healthpal.domain.metrics import DailyMetrics, HealthQuantity, HealthSample
from healthpal.services.analysis import FoodAnalysisService, GenerativeClient
from healthpal.services.dashboard import DashboardService
from healthpal.services.food_logs import FoodLogStore
from healthpal.services.keys import CredentialService, KeyStore
from healthpal.services.metrics import (
    HealthSampleRecorder,
    HealthSampleSource,
    MetricsService,
)
from healthpal.services.scans import ScanService
from healthpal.services.storage import KeyValueStore

BERLIN = ZoneInfo("Europe/Berlin")


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    data: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        self.data[key] = value


@dataclass
class FailingKeyValueStore(KeyValueStore):
    """Key-value store whose writes always fail."""

    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


def reply_envelope(text: str) -> dict[str, object]:
    """Wrap model reply text in a generateContent envelope."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@dataclass
class FakeGenerativeClient(GenerativeClient):
    """Fake generative client returning a fixed reply or raising."""

    reply: str = json.dumps({"calories": 320, "label": "grilled chicken"})
    error: Exception | None = None
    models_payload: dict[str, object] = field(
        default_factory=lambda: {"models": [{"name": "models/gemini-1.5-pro"}]}
    )
    calls: list[dict[str, object]] = field(default_factory=list)
    validated_keys: list[str] = field(default_factory=list)

    async def generate_content(
        self, *, model: str, api_key: str, payload: dict[str, object]
    ) -> dict[str, object]:
        self.calls.append({"model": model, "api_key": api_key, "payload": payload})
        if self.error is not None:
            raise self.error
        return reply_envelope(self.reply)

    async def list_models(self, *, api_key: str) -> dict[str, object]:
        self.validated_keys.append(api_key)
        if self.error is not None:
            raise self.error
        return self.models_payload


def http_status_error(status_code: int) -> httpx.HTTPStatusError:
    """Build an httpx status error for a given code."""
    request = httpx.Request("POST", "https://api.test/models/m:generateContent")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


@dataclass
class InMemoryHealthSampleSource(HealthSampleSource, HealthSampleRecorder):
    """In-memory health samples for tests."""

    samples: list[HealthSample] = field(default_factory=list)
    failing: set[HealthQuantity] = field(default_factory=set)

    def record(self, sample: HealthSample) -> None:
        self.samples.append(sample)

    def list_values(
        self, quantity: HealthQuantity, start: datetime, end: datetime
    ) -> list[float]:
        if quantity in self.failing:
            raise RuntimeError(f"{quantity.value} unavailable")
        return [
            sample.value
            for sample in self.samples
            if sample.quantity == quantity and start <= sample.recorded_at < end
        ]


@dataclass
class FakeMetricsProvider:
    """Metrics provider returning fixed metrics per day."""

    metrics: dict[date, DailyMetrics] = field(default_factory=dict)

    async def fetch(self, day: date) -> DailyMetrics:
        return self.metrics.get(day, DailyMetrics(day=day))


def jpeg_bytes(color: str = "orange") -> bytes:
    """Return a small JPEG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        timezone="Europe/Berlin",
        storage_path=tmp_path / "store.json",
        gemini_base_url="https://api.test/v1beta",
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def generative_client() -> FakeGenerativeClient:
    return FakeGenerativeClient()


@pytest.fixture
def sample_source() -> InMemoryHealthSampleSource:
    return InMemoryHealthSampleSource()


@pytest.fixture
def container(
    settings: Settings,
    storage: InMemoryKeyValueStore,
    generative_client: FakeGenerativeClient,
    sample_source: InMemoryHealthSampleSource,
) -> AppContainer:
    key_store = KeyStore(storage)
    food_log_store = FoodLogStore(storage=storage, timezone=BERLIN)
    metrics_service = MetricsService(source=sample_source, timezone=BERLIN)
    analysis_service = FoodAnalysisService(
        client=generative_client, model=settings.gemini_model
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        timezone=BERLIN,
        key_store=key_store,
        credential_service=CredentialService(
            key_store=key_store, validator=analysis_service
        ),
        food_log_store=food_log_store,
        metrics_service=metrics_service,
        sample_recorder=sample_source,
        analysis_service=analysis_service,
        scan_service=ScanService(
            analysis_service=analysis_service,
            key_store=key_store,
            food_log_store=food_log_store,
        ),
        dashboard_service=DashboardService(
            metrics_provider=metrics_service,
            food_log_store=food_log_store,
            storage=storage,
        ),
        close_resources=close_resources,
    )
