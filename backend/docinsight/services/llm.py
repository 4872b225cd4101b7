# backend/docinsight/services/llm.py
from __future__ import annotations
import logging
from typing import Dict, Any, List
import httpx

from .. import config
from ..errors import ModelCallError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

def _format_messages(system: str, user: str) -> List[Dict[str, str]]:
    msgs: List[Dict[str, str]] = []
    if system:
        msgs.append({"role": "system", "content": system})
    msgs.append({"role": "user", "content": user})
    return msgs

def is_configured() -> bool:
    """True when the selected provider has what it needs to be called."""
    if config.LLM_PROVIDER == "gemini":
        return bool(config.GEMINI_API_KEY)
    if config.LLM_PROVIDER == "openrouter":
        return bool(config.OPENROUTER_API_KEY)
    if config.LLM_PROVIDER == "ollama":
        return bool(config.OLLAMA_BASE)
    return False

async def generate(prompt: str, system: str = "") -> str:
    """
    Send one prompt to the configured provider and return the raw text reply.

    Supports:
    - gemini: Google Generative Language REST API
    - openrouter: OpenAI-compatible chat completions
    - ollama: local Ollama server

    Every transport, HTTP status or payload-shape failure is raised as
    ModelCallError. There is no retry.
    """
    provider = config.LLM_PROVIDER
    logger.debug("Calling %s model %s (%d prompt chars)", provider, config.LLM_MODEL, len(prompt))
    try:
        if provider == "gemini":
            return await _generate_gemini(system, prompt)
        if provider == "openrouter":
            return await _generate_openrouter(system, prompt)
        if provider == "ollama":
            return await _generate_ollama(system, prompt)
    except httpx.HTTPError as e:
        raise ModelCallError(f"{provider} request failed: {type(e).__name__}: {e}") from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ModelCallError(f"{provider} returned an unexpected payload: {e}") from e
    raise ModelCallError(f"LLM_PROVIDER={provider} not supported. Use 'gemini', 'openrouter' or 'ollama'.")

async def _generate_gemini(system: str, prompt: str) -> str:
    if not config.GEMINI_API_KEY:
        raise ModelCallError("GEMINI_API_KEY not configured in environment")

    url = f"{GEMINI_BASE_URL}/models/{config.LLM_MODEL}:generateContent"
    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": 0.0},
    }
    if system:
        payload["systemInstruction"] = {"parts": [{"text": system}]}

    async with httpx.AsyncClient(timeout=config.LLM_TIMEOUT) as client:
        r = await client.post(url, json=payload, params={"key": config.GEMINI_API_KEY})
        r.raise_for_status()
        data = r.json()

    parts = data["candidates"][0]["content"]["parts"]
    return "".join(p.get("text", "") for p in parts).strip()

async def _generate_openrouter(system: str, prompt: str) -> str:
    """Chat using OpenRouter API (OpenAI-compatible format)."""
    if not config.OPENROUTER_API_KEY:
        raise ModelCallError("OPENROUTER_API_KEY not configured in environment")

    url = f"{OPENROUTER_BASE_URL}/chat/completions"
    headers = {
        "Authorization": f"Bearer {config.OPENROUTER_API_KEY}",
        "X-Title": "DocInsight",
        "Content-Type": "application/json"
    }

    payload = {
        "model": config.LLM_MODEL,
        "messages": _format_messages(system, prompt),
        "temperature": 0.0,
        "max_tokens": 4000
    }

    async with httpx.AsyncClient(timeout=config.LLM_TIMEOUT) as client:
        r = await client.post(url, json=payload, headers=headers)
        r.raise_for_status()
        data = r.json()

    # OpenAI-compatible response format
    return (data.get("choices", [{}])[0].get("message", {}).get("content") or "").strip()

async def _generate_ollama(system: str, prompt: str) -> str:
    url = f"{config.OLLAMA_BASE.rstrip('/')}/api/chat"
    payload = {
        "model": config.LLM_MODEL,
        "messages": _format_messages(system, prompt),
        "stream": False,
        "options": {"temperature": 0.0}
    }
    async with httpx.AsyncClient(timeout=config.LLM_TIMEOUT) as client:
        r = await client.post(url, json=payload)
        r.raise_for_status()
        data = r.json()

    return ((data.get("message") or {}).get("content") or "").strip()
