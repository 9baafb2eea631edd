from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings


class TutorServiceError(RuntimeError):
    """The text-generation service could not produce an answer."""


class GeminiTutorClient:
    """Thin async client for the Generative Language ``generateContent`` call."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        root = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.url = f"{root}/{self.model}:generateContent"
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.GEMINI_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def generate(self, prompt: str) -> Optional[str]:
        """Send one user turn and return the first candidate's text, if any."""
        if not self.api_key:
            raise TutorServiceError("GEMINI_API_KEY is not configured")
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            r = await self._client.post(self.url, params={"key": self.api_key}, json=payload)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TutorServiceError(f"Gemini call failed: {e}") from e
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

    async def aclose(self) -> None:
        await self._client.aclose()
