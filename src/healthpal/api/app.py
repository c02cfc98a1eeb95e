"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from healthpal.api.models import (
    FoodLogCreate,
    FoodLogUpdate,
    HealthSampleCreate,
    KeyUpdate,
)
from healthpal.app_logging import configure_logging
from healthpal.containers import AppContainer
from healthpal.domain.analysis import AnalysisSuccess
from healthpal.domain.credentials import AIProvider
from healthpal.domain.metrics import HealthSample
from healthpal.services.analysis import AnalysisFailedError, NoCredentialConfiguredError
from healthpal.services.calendar import today
from healthpal.services.dashboard import DayLoadSupersededError
from healthpal.services.scans import ScanInProgressError

UNUSABLE_MESSAGE = "Couldn't identify the food. Try another photo."
RETRY_MESSAGE = "Food analysis failed. Please try again."
SETTINGS_MESSAGE = "No API key configured. Add one in settings."


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(NoCredentialConfiguredError)
    async def no_credential(
        request: Request, exc: NoCredentialConfiguredError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "no_credential", "message": SETTINGS_MESSAGE},
        )

    @app.exception_handler(AnalysisFailedError)
    async def analysis_failed(
        request: Request, exc: AnalysisFailedError
    ) -> JSONResponse:
        logger.warning("Scan failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "analysis_failed", "message": RETRY_MESSAGE},
        )

    @app.exception_handler(ScanInProgressError)
    async def scan_in_progress(
        request: Request, exc: ScanInProgressError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "scan_in_progress", "message": str(exc)},
        )

    @app.exception_handler(DayLoadSupersededError)
    async def day_superseded(
        request: Request, exc: DayLoadSupersededError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "superseded", "message": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/days/{day}")
    async def day_overview(day: date, request: Request) -> dict[str, object]:
        """Return metrics, food logs, and the calorie balance for a day."""
        state_container: AppContainer = request.app.state.container
        overview = await state_container.dashboard_service.load_day(day)
        return {
            "day": overview.day,
            "metrics": overview.metrics,
            "entries": overview.entries,
            "summary": overview.summary,
        }

    @app.get("/days/{day}/food-logs")
    async def day_food_logs(day: date, request: Request) -> dict[str, object]:
        """Return food logs for a day."""
        state_container: AppContainer = request.app.state.container
        return {"entries": state_container.food_log_store.entries_for_day(day)}

    @app.post("/food-logs", status_code=status.HTTP_201_CREATED)
    async def create_food_log(
        payload: FoodLogCreate, request: Request
    ) -> dict[str, object]:
        """Log food manually."""
        state_container: AppContainer = request.app.state.container
        title = payload.title.strip()
        if not title:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Title must not be blank.",
            )
        entry = state_container.food_log_store.log(
            title=title,
            calories=payload.calories,
            day=payload.day,
            notes=(payload.notes or "").strip() or None,
        )
        return {"entry": entry}

    @app.put("/food-logs/{entry_id}")
    async def update_food_log(
        entry_id: UUID, payload: FoodLogUpdate, request: Request
    ) -> dict[str, object]:
        """Edit a logged food."""
        state_container: AppContainer = request.app.state.container
        try:
            entry = state_container.food_log_store.edit(
                entry_id,
                title=payload.title,
                calories=payload.calories,
                notes=payload.notes,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"entry": entry}

    @app.delete("/food-logs/{entry_id}")
    async def delete_food_log(entry_id: UUID, request: Request) -> Response:
        """Delete a logged food; unknown ids are ignored."""
        state_container: AppContainer = request.app.state.container
        state_container.food_log_store.delete(entry_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/scans")
    async def scan_food(request: Request, day: date | None = None) -> dict[str, object]:
        """Estimate calories for the photo in the request body and log it."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Image body is empty."
            )
        outcome = await state_container.scan_service.scan(
            image_bytes, day or today(state_container.timezone)
        )
        if isinstance(outcome.result, AnalysisSuccess):
            return {"status": "logged", "entry": outcome.entry}
        return {"status": "unusable", "message": UNUSABLE_MESSAGE}

    @app.get("/settings/keys")
    async def list_keys(request: Request) -> dict[str, object]:
        """Return which providers have a key configured."""
        state_container: AppContainer = request.app.state.container
        key_store = state_container.key_store
        return {
            "providers": {
                provider.value: key_store.get(provider) is not None
                for provider in AIProvider
            },
            "configured": key_store.has_any_configured(),
        }

    @app.put("/settings/keys/{provider}")
    async def save_key(
        provider: AIProvider, payload: KeyUpdate, request: Request
    ) -> dict[str, object]:
        """Validate and store a provider key."""
        state_container: AppContainer = request.app.state.container
        saved = await state_container.credential_service.save(
            provider, payload.api_key
        )
        if not saved:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="The provider rejected this API key.",
            )
        return {"provider": provider.value, "configured": bool(payload.api_key.strip())}

    @app.delete("/settings/keys/{provider}")
    async def clear_key(provider: AIProvider, request: Request) -> Response:
        """Remove a provider key."""
        state_container: AppContainer = request.app.state.container
        state_container.key_store.clear(provider)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/health-samples", status_code=status.HTTP_201_CREATED)
    async def record_health_sample(
        payload: HealthSampleCreate, request: Request
    ) -> dict[str, str]:
        """Record a raw health measurement."""
        state_container: AppContainer = request.app.state.container
        state_container.sample_recorder.record(
            HealthSample(
                quantity=payload.quantity,
                value=payload.value,
                recorded_at=payload.recorded_at,
            )
        )
        return {"status": "ok"}

    return app
