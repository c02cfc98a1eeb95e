"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from supabase import Client, create_client

from healthpal.adapters.file_kv_store import JsonFileKeyValueStore
from healthpal.adapters.gemini_client import HttpxGeminiClient
from healthpal.adapters.kv_health_sample_source import KeyValueHealthSampleSource
from healthpal.adapters.supabase_health_sample_source import (
    SupabaseHealthSampleSource,
)
from healthpal.adapters.supabase_kv_store import SupabaseKeyValueStore
from healthpal.config import Settings, resolve_timezone
from healthpal.services.analysis import FoodAnalysisService
from healthpal.services.dashboard import DashboardService
from healthpal.services.food_logs import FoodLogStore
from healthpal.services.keys import CredentialService, KeyStore
from healthpal.services.metrics import HealthSampleRecorder, MetricsService
from healthpal.services.scans import ScanService
from healthpal.services.storage import KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    timezone: ZoneInfo
    key_store: KeyStore
    credential_service: CredentialService
    food_log_store: FoodLogStore
    metrics_service: MetricsService
    sample_recorder: HealthSampleRecorder
    analysis_service: FoodAnalysisService
    scan_service: ScanService
    dashboard_service: DashboardService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timezone = resolve_timezone(resolved_settings.timezone)
    supabase_client: Client | None = None

    def supabase() -> Client:
        nonlocal supabase_client
        if supabase_client is None:
            if not (
                resolved_settings.supabase_url and resolved_settings.supabase_service_key
            ):
                raise ValueError(
                    "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                    "for the supabase backend"
                )
            supabase_client = create_client(
                resolved_settings.supabase_url, resolved_settings.supabase_service_key
            )
        return supabase_client

    storage: KeyValueStore
    if resolved_settings.storage_backend == "file":
        storage = JsonFileKeyValueStore(resolved_settings.storage_path)
    elif resolved_settings.storage_backend == "supabase":
        storage = SupabaseKeyValueStore(supabase())
    else:
        raise ValueError(
            f"Unknown storage backend: {resolved_settings.storage_backend!r}"
        )

    sample_source: KeyValueHealthSampleSource | SupabaseHealthSampleSource
    if resolved_settings.metrics_backend == "store":
        sample_source = KeyValueHealthSampleSource(storage, timezone)
    elif resolved_settings.metrics_backend == "supabase":
        sample_source = SupabaseHealthSampleSource(supabase(), timezone)
    else:
        raise ValueError(
            f"Unknown metrics backend: {resolved_settings.metrics_backend!r}"
        )

    gemini_client = HttpxGeminiClient.create(
        base_url=resolved_settings.gemini_base_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    analysis_service = FoodAnalysisService(
        client=gemini_client,
        model=resolved_settings.gemini_model,
        jpeg_quality=resolved_settings.jpeg_quality,
    )
    key_store = KeyStore(storage)
    food_log_store = FoodLogStore(storage=storage, timezone=timezone)
    metrics_service = MetricsService(source=sample_source, timezone=timezone)

    async def close_resources() -> None:
        await gemini_client.close()

    return AppContainer(
        settings=resolved_settings,
        timezone=timezone,
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
