"""Calorie estimation from food photos using a vision model."""

import base64
import io
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from healthpal.domain.analysis import (
    AnalysisResult,
    AnalysisSuccess,
    AnalysisUnusable,
    FoodReply,
    GenerateContentResponse,
)

SCAN_ERROR_MARKER = "ErrorInScanning"
DEFAULT_LABEL = "Scanned food"

FOOD_PROMPT = """\
You are helping a health app log food from an image.
Respond with ONLY a single JSON object on one line, no markdown, no backticks.
JSON schema:
- If the image is usable: {"calories": <integer>, "label": "<short food name 2-5 words>"}
- If the image is not usable: {"error": "ErrorInScanning"}

Rules:
- calories must be an INTEGER (round your estimate).
- label must be short and human-friendly (e.g., "grilled chicken salad").
- Do not include units, explanations, or any extra keys.
"""

_logger = logging.getLogger(__name__)


class FoodAnalysisError(Exception):
    """Base error for food analysis failures."""


class NoCredentialConfiguredError(FoodAnalysisError):
    """No provider key is configured."""

    def __init__(self) -> None:
        super().__init__("No API key configured. Add one in settings.")


class AnalysisFailedError(FoodAnalysisError):
    """The analysis request could not be completed."""


class GenerativeClient(Protocol):
    """Interface for the generative model HTTP API."""

    async def generate_content(
        self, *, model: str, api_key: str, payload: dict[str, object]
    ) -> dict[str, object]:
        """Run a generateContent request and return the decoded envelope."""

    async def list_models(self, *, api_key: str) -> dict[str, object]:
        """Return the decoded models listing for a key."""


@dataclass
class FoodAnalysisService:
    """Builds scan requests and interprets the model's reply.

    One attempt per call; transport and HTTP errors surface as
    AnalysisFailedError, unrecognisable images as AnalysisUnusable.
    """

    client: GenerativeClient
    model: str
    jpeg_quality: int = 80

    async def analyze(self, image_bytes: bytes, api_key: str | None) -> AnalysisResult:
        """Estimate calories for a food photo."""
        key = (api_key or "").strip()
        if not key:
            raise NoCredentialConfiguredError
        payload = build_request_payload(_encode_jpeg(image_bytes, self.jpeg_quality))
        try:
            envelope = await self.client.generate_content(
                model=self.model, api_key=key, payload=payload
            )
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "Food analysis request failed (status=%s): %s",
                _status_code_from_exception(exc),
                type(exc).__name__,
            )
            raise AnalysisFailedError("Food analysis failed. Please try again.") from exc
        result = parse_envelope(envelope)
        _logger.info("Food analysis finished: %s", type(result).__name__)
        return result

    async def validate_key(self, api_key: str) -> bool:
        """Return True when the models listing accepts the key."""
        try:
            payload = await self.client.list_models(api_key=api_key.strip())
        except (httpx.HTTPError, ValueError) as exc:
            _logger.info(
                "Key validation failed (status=%s)", _status_code_from_exception(exc)
            )
            return False
        return isinstance(payload, dict) and "models" in payload


def build_request_payload(jpeg_base64: str) -> dict[str, object]:
    """Return the generateContent body for a base64 JPEG."""
    return {
        "contents": [
            {
                "parts": [
                    {"text": FOOD_PROMPT},
                    {"inline_data": {"mime_type": "image/jpeg", "data": jpeg_base64}},
                ]
            }
        ]
    }


def parse_envelope(envelope: object) -> AnalysisResult:
    """Interpret a generateContent envelope."""
    try:
        response = GenerateContentResponse.model_validate(envelope)
    except ValidationError:
        return AnalysisUnusable()
    return parse_reply(response.reply_text())


def parse_reply(text: str) -> AnalysisResult:
    """Interpret the model's reply text; anything unexpected is unusable."""
    try:
        reply = FoodReply.model_validate_json(_strip_code_fence(text))
    except ValidationError:
        return AnalysisUnusable()
    if reply.error == SCAN_ERROR_MARKER or reply.calories is None:
        return AnalysisUnusable()
    label = (reply.label or "").strip()
    return AnalysisSuccess(calories=max(0, reply.calories), label=label or DEFAULT_LABEL)


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def _encode_jpeg(image_bytes: bytes, quality: int) -> str:
    """Re-encode an image as base64 JPEG at a fixed quality."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            buffer = io.BytesIO()
            image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError) as exc:
        raise AnalysisFailedError("Could not read the image.") from exc
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
