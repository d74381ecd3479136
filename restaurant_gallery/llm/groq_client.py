from __future__ import annotations

import json
import logging
from typing import Any

from groq import AsyncGroq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a New York City dining concierge. "
    "Given a diner's request, recommend restaurants that are currently open "
    "and match it, each with a short, friendly one-sentence description. "
    "Never recommend permanently closed restaurants.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"restaurants": [{"name": "<name>", "cuisine": "<cuisine>", '
    '"location": "<neighborhood, city>", "price_range": "$ to $$$$", '
    '"rating": <0-5>, "description": "<one sentence>"}]}\n'
    "Order from best match to worst."
)

_REQUIRED_FIELDS = ("name", "cuisine", "location")


def _clean_restaurant(item: Any) -> dict[str, Any] | None:
    if not isinstance(item, dict):
        return None
    if not all(isinstance(item.get(f), str) and item[f].strip() for f in _REQUIRED_FIELDS):
        return None

    try:
        rating = float(item.get("rating") or 0.0)
    except (TypeError, ValueError):
        rating = 0.0

    return {
        "name": item["name"].strip(),
        "cuisine": item["cuisine"].strip(),
        "location": item["location"].strip(),
        "price_range": str(item.get("price_range") or "").strip() or None,
        "rating": max(0.0, min(5.0, rating)),
        "description": str(item.get("description") or "").strip(),
    }


async def generate_recommendations(
    message: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[dict[str, Any]]:
    """
    Ask Groq for restaurant recommendations matching ``message``.

    Returns a list of cleaned restaurant dicts (name, cuisine, location,
    price_range, rating, description), best match first.
    Returns an empty list on any failure (disabled, timeout, bad JSON, API error).
    """
    if not config.enabled or not config.api_key:
        return []

    if not message.strip():
        return []

    try:
        client = AsyncGroq(api_key=config.api_key, timeout=config.timeout)
        response = await client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)

        results: list[dict[str, Any]] = []
        for item in parsed.get("restaurants", []):
            cleaned = _clean_restaurant(item)
            if cleaned:
                results.append(cleaned)
            else:
                logger.warning("Dropping malformed restaurant from LLM output: %r", item)

        return results[: config.max_recommendations]

    except Exception:
        logger.warning("Groq LLM call failed, returning no recommendations", exc_info=True)
        return []
