"""
OLLAMA SERVICE MODULE
=====================

Sends one non-streaming generate request to the local inference server:

  POST {OLLAMA_BASE_URL}/api/generate
  {"model": ..., "prompt": ..., "stream": false, "system": ...optional}

and returns the "response" field of the JSON reply.

ERRORS:
  Transport errors, timeouts, non-2xx statuses and unreadable JSON do not raise.
  generate() returns ServiceOutcome.failure("Error calling Ollama: <reason>") and
  the router shows that text to the user in place of model output, with a normal
  200 status. One call, no retries.

TIMEOUT:
  GENERATE_TIMEOUT (default 300s). The back model can take minutes on a big prompt.
"""

import logging
from typing import Optional

import httpx

from app.models import ServiceOutcome
from config import RouterSettings

logger = logging.getLogger("ROUTER")

GENERATE_FAILED = "Error calling Ollama: {reason}"
EMPTY_RESPONSE = "No response"


class OllamaService:
    """Thin async client for the Ollama /api/generate endpoint."""

    def __init__(self, settings: RouterSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """transport: optional httpx transport (tests pass an httpx.MockTransport)."""
        self.base_url = settings.ollama_base_url.rstrip("/")
        self.timeout = settings.generate_timeout
        self._transport = transport

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/api/generate"

    async def generate(self, model: str, prompt: str, system: Optional[str] = None) -> ServiceOutcome:
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
        }
        if system:
            payload["system"] = system

        try:
            # One client per call: no pooled state is shared between requests.
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.generate_url, json=payload)
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            reason = str(e) or type(e).__name__
            logger.error("Ollama call failed (model=%s): %s", model, reason)
            return ServiceOutcome.failure(GENERATE_FAILED.format(reason=reason), error=reason)

        if not isinstance(result, dict):
            reason = f"unexpected response type {type(result).__name__}"
            logger.error("Ollama call failed (model=%s): %s", model, reason)
            return ServiceOutcome.failure(GENERATE_FAILED.format(reason=reason), error=reason)

        text = result.get("response")
        if text is None:
            return ServiceOutcome.success(EMPTY_RESPONSE)
        return ServiceOutcome.success(str(text))
