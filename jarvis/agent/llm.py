"""
Agent LLM: single-shot completion against an Ollama-compatible /api/generate endpoint.

Generation is deterministic (temperature 0) and non-streaming. Transport
errors, HTTP errors and timeouts surface as ModelUnavailableError.
"""

import logging

import httpx

from jarvis.core.config import (
    LLAMA_API_URL,
    LLAMA_MODEL,
    LLM_API_TIMEOUT,
    LLM_NUM_PREDICT,
    LLM_TEMPERATURE,
    LLM_TOP_K,
)
from jarvis.core.errors import ModelUnavailableError

logger = logging.getLogger(__name__)


def build_payload(prompt: str, max_new_tokens: int = LLM_NUM_PREDICT) -> dict:
    """Request body for /api/generate."""
    return {
        "model": LLAMA_MODEL,
        "prompt": prompt,
        "options": {
            "num_predict": max_new_tokens,
            "temperature": LLM_TEMPERATURE,
            "top_k": LLM_TOP_K,
        },
        "stream": False,
    }


async def complete(prompt: str, max_new_tokens: int = LLM_NUM_PREDICT) -> str:
    """
    Send the prompt to the completion service and return the generated text, stripped.
    """
    logger.info("[llm] IN  prompt_len=%d max_new_tokens=%d", len(prompt), max_new_tokens)
    logger.debug("[llm] prompt_tail=%r", prompt[-500:])
    payload = build_payload(prompt, max_new_tokens)
    try:
        async with httpx.AsyncClient(timeout=LLM_API_TIMEOUT) as client:
            response = await client.post(LLAMA_API_URL, json=payload)
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException as e:
        logger.error("[llm] timeout after %.0fs", LLM_API_TIMEOUT)
        raise ModelUnavailableError(f"Completion request timed out ({LLM_API_TIMEOUT:.0f}s).") from e
    except httpx.HTTPStatusError as e:
        logger.error("[llm] HTTP error %s: %s", e.response.status_code, e.response.text[:200])
        raise ModelUnavailableError(f"Completion API error: HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error("[llm] request failed: %s", e)
        raise ModelUnavailableError(f"Completion request failed: {e}") from e
    except ValueError as e:
        logger.error("[llm] response is not JSON: %s", e)
        raise ModelUnavailableError("Completion API returned invalid JSON.") from e

    if not isinstance(data, dict) or not isinstance(data.get("response"), str):
        raise ModelUnavailableError("Completion API response has no 'response' field.")
    out = data["response"].strip()
    logger.info("[llm] OUT response_len=%d", len(out))
    logger.info("[llm] OUT response_full=%r", out)
    return out
