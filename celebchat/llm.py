from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from .config import Settings, get_settings
from .errors import MalformedResponse, TransportFailure
from .prompts import build_request_payload


def extract_candidate_text(data: Any) -> str:
    """Return candidates[0].content.parts[0].text from a generateContent body."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise MalformedResponse("response contained no candidate text")
    if not isinstance(text, str):
        raise MalformedResponse("candidate text is not a string")
    return text


class GeminiClient:
    """Minimal client for the Gemini generateContent REST endpoint.

    A fresh httpx.AsyncClient is opened per call so the client can be used
    from successive event loops (Streamlit runs each exchange in its own
    asyncio.run). `transport` lets tests substitute httpx.MockTransport.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings: Settings = get_settings()
        self.model = model or settings.model
        self.api_base = (api_base or settings.api_base).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    async def _post(self, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(
                self.url,
                params={"key": api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )

    async def generate(self, prompt: str, api_key: str) -> str:
        """Send one prompt and return the raw model text.

        Raises TransportFailure on network errors, timeouts and non-2xx
        statuses, MalformedResponse when the body lacks candidate text.
        """
        payload = build_request_payload(prompt)
        t0 = time.perf_counter()
        try:
            response = await asyncio.wait_for(self._post(payload, api_key), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"llm_call_timeout | model={self.model} timeout={self.timeout}s")
            raise TransportFailure(f"API request timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            logger.error(f"llm_call_failed | model={self.model} | {type(e).__name__}: {e}")
            raise TransportFailure(f"API request failed ({type(e).__name__})")
        dt = time.perf_counter() - t0

        if not response.is_success:
            logger.error(f"llm_call_status | model={self.model} status={response.status_code} dt={dt:.2f}s")
            raise TransportFailure("API request failed", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise MalformedResponse("response body is not JSON", raw=response.text)
        text = extract_candidate_text(data)
        logger.info(f"llm_call | model={self.model} dt={dt:.2f}s chars={len(text)}")
        return text
