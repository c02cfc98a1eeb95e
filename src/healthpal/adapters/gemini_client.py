"""Gemini generative language API client."""

from dataclasses import dataclass

import httpx

from healthpal.services.analysis import GenerativeClient


@dataclass
class HttpxGeminiClient(GenerativeClient):
    """HTTPX-backed Gemini client; the key travels as a query parameter."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 60

    @classmethod
    def create(cls, base_url: str, timeout: float = 60) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def generate_content(
        self, *, model: str, api_key: str, payload: dict[str, object]
    ) -> dict[str, object]:
        """POST a generateContent request."""
        url = f"{self.base_url}/models/{model}:generateContent"
        response = await self.http_client.post(
            url,
            params={"key": api_key},
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def list_models(self, *, api_key: str) -> dict[str, object]:
        """GET the models listing."""
        response = await self.http_client.get(
            f"{self.base_url}/models",
            params={"key": api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
