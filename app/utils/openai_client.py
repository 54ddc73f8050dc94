"""OpenAI chat client — JSON-mode extraction and vision calls.

Every call takes the organization's own API key; there is no platform key.
Requests go through the shared pooled client in app.http_client.

Two models:
  - text_import_model (gpt-4o-mini): file-to-records extraction, JSON mode
  - vision_model (gpt-4o): competition flyers and schedules from images

Usage:
    from app.utils.openai_client import chat_json, vision_text
    parsed = await chat_json(api_key, system=SYSTEM, prompt=text)
    reply = await vision_text(api_key, prompt=VISION_PROMPT, image_b64=b64, image_format="png")
"""

import json
import logging
import re
from typing import Any

import httpx

from app.config import settings
from app.http_client import http

log = logging.getLogger("clubhouse.openai")

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _headers(api_key: str) -> dict:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


async def _chat(api_key: str, body: dict, timeout: int) -> str | None:
    """POST a chat completion and return the first choice's content, or None."""
    try:
        resp = await http.post(
            settings.openai_api_url, headers=_headers(api_key), json=body, timeout=timeout
        )
    except httpx.HTTPError as e:
        log.warning(f"OpenAI call failed: {e}")
        return None

    if resp.status_code != 200:
        log.warning(f"OpenAI API {resp.status_code}: {resp.text[:200]}")
        return None

    choices = resp.json().get("choices") or []
    if not choices:
        log.warning("OpenAI response carried no choices")
        return None
    return (choices[0].get("message") or {}).get("content")


async def chat_json(
    api_key: str,
    *,
    system: str,
    prompt: str,
    model: str | None = None,
    temperature: float = 0.1,
    timeout: int = 60,
) -> dict | None:
    """JSON-mode chat completion. Returns the parsed object, or None on failure."""
    body: dict[str, Any] = {
        "model": model or settings.text_import_model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
        "temperature": temperature,
        "response_format": {"type": "json_object"},
    }
    text = await _chat(api_key, body, timeout)
    if not text:
        return None
    parsed = safe_json_parse(text)
    return parsed if isinstance(parsed, dict) else None


async def vision_text(
    api_key: str,
    *,
    prompt: str,
    image_b64: str,
    image_format: str = "jpeg",
    model: str | None = None,
    max_tokens: int = 4096,
    timeout: int = 90,
) -> str | None:
    """Send one image plus an instruction prompt; return the raw reply text."""
    body = {
        "model": model or settings.vision_model,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/{image_format};base64,{image_b64}"},
                    },
                ],
            }
        ],
        "max_tokens": max_tokens,
    }
    return await _chat(api_key, body, timeout)


def safe_json_parse(text: str) -> dict | list | None:
    """Parse JSON from text that may contain markdown fences or preamble."""
    if not text:
        return None

    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for start_char, end_char in [("{", "}"), ("[", "]")]:
        start = cleaned.find(start_char)
        end = cleaned.rfind(end_char)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start : end + 1])
            except json.JSONDecodeError:
                continue

    log.debug(f"JSON parse failed: {text[:100]}...")
    return None


def extract_json_array(text: str) -> list | None:
    """Pull the outermost JSON array out of a model reply. None if it is not one."""
    if text is None:
        return None
    match = _ARRAY_RE.search(text)
    candidate = match.group(0) if match else text
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, list) else None
