"""Anthropic Messages API client."""
import logging

import httpx

from app.config import settings
from app.exceptions import BriefGenerationError

logger = logging.getLogger(__name__)

API_VERSION = "2023-06-01"
TEMPERATURE = 0.7

# ---------------------------------------------------------------------------
# Persistent HTTP client
# ---------------------------------------------------------------------------
_client: httpx.AsyncClient | None = None


def _require_client() -> httpx.AsyncClient:
    """Return the persistent client, or raise if not initialized."""
    if _client is None:
        raise RuntimeError("LLM client not initialized, call init_client() first")
    return _client


def init_client() -> None:
    global _client
    if _client is not None:
        return  # idempotent, don't orphan existing client
    _client = httpx.AsyncClient(
        base_url=settings.anthropic_base_url.rstrip("/"),
        headers={
            "x-api-key": settings.anthropic_api_key,
            "anthropic-version": API_VERSION,
            "Content-Type": "application/json",
        },
        timeout=settings.anthropic_timeout_seconds,
    )


async def close_client() -> None:
    global _client
    if _client:
        await _client.aclose()
        _client = None


async def create_message(prompt: str) -> str:
    """Send a single user message and return the text of the first content block."""
    client = _require_client()
    payload = {
        "model": settings.anthropic_model,
        "max_tokens": settings.anthropic_max_tokens,
        "temperature": TEMPERATURE,
        "messages": [{"role": "user", "content": prompt}],
    }
    try:
        resp = await client.post("/v1/messages", json=payload)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.error("Anthropic API returned %s", exc.response.status_code)
        raise BriefGenerationError(f"LLM provider returned {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        logger.error("Anthropic API request failed: %s", exc)
        raise BriefGenerationError("LLM provider request failed") from exc

    content = resp.json().get("content") or []
    if not content or content[0].get("type") != "text":
        raise BriefGenerationError("Unexpected response format from LLM provider")
    return content[0]["text"]
