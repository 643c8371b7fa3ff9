"""Centralized OpenAI client for theme extraction.

All LLM traffic goes through `call_llm_text()`. This ensures:
  - Model, temperature, timeout and token limits come from `LLMSettings`
    (environment-backed).
  - 1 retry on failure (HTTP error, timeout, empty content), then `LLMError`.
  - Consistent logging across callers.

The theme prompt asks for a top-level JSON *array*, so no ``json_object``
response_format is requested; callers parse the returned text themselves.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

import httpx

from ..config import LLMSettings

logger = logging.getLogger(__name__)

_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"


class LLMError(RuntimeError):
    """The LLM could not produce a usable response after all retries."""


def get_openai_key() -> str:
    """Read OPENAI_API_KEY from the environment. Raises EnvironmentError if missing."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        logger.warning("⚠️  [OPENAI] API key missing (OPENAI_API_KEY)")
        raise EnvironmentError("OPENAI_API_KEY environment variable not set")
    return key


def strip_code_fences(raw: str) -> str:
    """Remove Markdown code-fence wrapping (```json ... ```) from LLM output.

    Text without a leading fence is returned trimmed and otherwise unchanged.
    """
    text = raw.strip().lstrip("\ufeff")
    if not text.startswith("```"):
        return text

    # Drop the opening fence line, including any language tag
    newline = text.find("\n")
    text = text[newline + 1 :] if newline != -1 else text[3:]

    if text.rstrip().endswith("```"):
        text = text.rstrip()[:-3]
    return text.strip()


def build_payload(
    *,
    model: str,
    messages: List[Dict[str, str]],
    max_tokens: int,
    temperature: float,
) -> Dict[str, Any]:
    """Build an OpenAI chat completions payload."""
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    logger.debug("🧠 [OPENAI] Model: %s, tokens requested: %d", model, max_tokens)
    return payload


async def call_llm_text(prompt: str, settings: Optional[LLMSettings] = None) -> str:
    """Send *prompt* as a single user message and return the raw completion text.

    Raises
    ------
    LLMError
        When every attempt fails (non-200 status, timeout, transport error or
        empty content).
    EnvironmentError
        When no API key is configured.
    """
    settings = settings or LLMSettings.from_env()
    api_key = settings.api_key or get_openai_key()

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = build_payload(
        model=settings.model,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )

    attempts = settings.max_retries + 1
    last_error = "no attempt made"

    for attempt in range(attempts):
        if attempt > 0:
            logger.info("🔄 [OPENAI] Retrying...")
        t0 = time.time()
        try:
            logger.info("🧠 [OPENAI] Calling %s (attempt %d/%d)", settings.model, attempt + 1, attempts)
            async with httpx.AsyncClient(timeout=settings.timeout) as client:
                response = await client.post(_OPENAI_API_URL, headers=headers, json=payload)
            duration = time.time() - t0
            logger.info("📦 [OPENAI] HTTP %d (%.1fs)", response.status_code, duration)

            if response.status_code != 200:
                last_error = f"HTTP {response.status_code}: {response.text[:400]}"
                logger.warning("⚠️  [OPENAI] Error response: %s", last_error)
                continue

            data = response.json()

            usage = data.get("usage")
            if usage:
                logger.info(
                    "🧠 [OPENAI] Tokens used: prompt=%s, completion=%s, total=%s",
                    usage.get("prompt_tokens", "?"),
                    usage.get("completion_tokens", "?"),
                    usage.get("total_tokens", "?"),
                )

            content = (data["choices"][0]["message"]["content"] or "").strip()
            if not content:
                last_error = "empty response"
                logger.warning("⚠️  [OPENAI] Empty response (attempt %d)", attempt + 1)
                continue

            logger.info("🧠 [OPENAI] Success (%d chars)", len(content))
            return content

        except httpx.TimeoutException:
            last_error = f"timeout after {time.time() - t0:.1f}s"
            logger.error("❌ [OPENAI] Timeout (%.1fs)", time.time() - t0)
        except httpx.HTTPError as exc:
            last_error = f"transport error: {exc}"
            logger.error("❌ [OPENAI] Transport error: %s", exc)
        except (KeyError, IndexError, ValueError) as exc:
            last_error = f"malformed response body: {exc}"
            logger.error("❌ [OPENAI] Malformed response body: %s", exc)

    raise LLMError(f"OpenAI request failed after {attempts} attempt(s): {last_error}")
