from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


@dataclass(frozen=True)
class LLMConfig:
    """Groq settings for chat recommendations. A missing key disables the call."""

    api_key: str = field(default_factory=lambda: os.getenv("GROQ_API_KEY", ""))
    model: str = field(default_factory=lambda: os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"))
    timeout: float = 30.0
    max_tokens: int = 1000
    temperature: float = 0.7
    # Each recommendation costs one image resolution
    max_recommendations: int = 5
    enabled: bool = field(default_factory=lambda: _env_flag("CHAT_LLM_ENABLED", True))


DEFAULT_LLM_CONFIG = LLMConfig()
