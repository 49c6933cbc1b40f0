"""
config.py — Process-wide settings, read once at startup.

  load_settings() → Settings

Reads the environment (and .env via python-dotenv) into frozen values.
Nothing downstream touches os.environ: the orchestrator, adapters and
exporter receive these objects explicitly.

Environment variables:
  AI_PROVIDER           gemini | google | groq | openrouter | anthropic | claude | auto
                        (empty / auto = ordered fallback across configured providers)
  GEMINI_API_KEY        GEMINI_MODEL
  GROQ_API_KEY          GROQ_MODEL
  OPENROUTER_API_KEY    OPENROUTER_MODEL    OPENROUTER_REFERER
  ANTHROPIC_API_KEY     ANTHROPIC_MODEL
  MARKCRAFT_TIMEOUT     per-request timeout in seconds (default 60)
  INSFORGE_STORAGE_URL  INSFORGE_STORAGE_KEY  INSFORGE_BUCKET
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Fallback order when no explicit provider is configured
PROVIDER_PRIORITY: Tuple[str, ...] = ("gemini", "groq", "openrouter", "anthropic")

PROVIDER_ALIASES = {
    "gemini": "gemini",
    "google": "gemini",
    "groq": "groq",
    "openrouter": "openrouter",
    "anthropic": "anthropic",
    "claude": "anthropic",
}

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_REFERER = "https://mark-craft.zeabur.app"

# ── Per-provider defaults ─────────────────────────────────────────────────────

_PROVIDER_DEFAULTS = {
    "gemini": {
        "key_var": "GEMINI_API_KEY",
        "model_var": "GEMINI_MODEL",
        "model": "gemini-3-flash-preview",
        "endpoint": "https://generativelanguage.googleapis.com",
    },
    "groq": {
        "key_var": "GROQ_API_KEY",
        "model_var": "GROQ_MODEL",
        "model": "llama-3.3-70b-versatile",
        "endpoint": "https://api.groq.com/openai/v1/chat/completions",
    },
    "openrouter": {
        "key_var": "OPENROUTER_API_KEY",
        "model_var": "OPENROUTER_MODEL",
        "model": "anthropic/claude-3.5-sonnet",
        "endpoint": "https://openrouter.ai/api/v1/chat/completions",
    },
    "anthropic": {
        "key_var": "ANTHROPIC_API_KEY",
        "model_var": "ANTHROPIC_MODEL",
        "model": "claude-3-5-sonnet-20241022",
        "endpoint": "https://api.anthropic.com",
    },
}


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    credential: Optional[str]
    endpoint: str
    model: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    referer: str = ""   # OpenRouter attribution header only

    @property
    def enabled(self) -> bool:
        return bool(self.credential)


@dataclass(frozen=True)
class StorageConfig:
    base_url: str
    api_key: str
    bucket: str = "logos"


@dataclass(frozen=True)
class Settings:
    providers: Tuple[ProviderConfig, ...] = field(default_factory=tuple)
    explicit_provider: Optional[str] = None
    storage: Optional[StorageConfig] = None

    def provider(self, name: str) -> ProviderConfig:
        for cfg in self.providers:
            if cfg.name == name:
                return cfg
        raise KeyError(name)

    def enabled_providers(self) -> Tuple[ProviderConfig, ...]:
        return tuple(cfg for cfg in self.providers if cfg.enabled)


def normalize_provider_name(value: Optional[str]) -> Optional[str]:
    """
    Resolve an AI_PROVIDER value to a canonical provider name.

    Returns None for empty / "auto" / unknown values — all of which mean
    "use the ordered fallback chain".
    """
    key = (value or "").strip().lower()
    if not key or key == "auto":
        return None
    resolved = PROVIDER_ALIASES.get(key)
    if resolved is None:
        logger.warning("Unknown AI_PROVIDER %r — falling back to provider chain", value)
    return resolved


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid MARKCRAFT_TIMEOUT %r — using %.0fs", raw, DEFAULT_TIMEOUT_SECONDS)
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from ``env`` (defaults to os.environ after loading .env).

    Passing an explicit mapping skips .env loading entirely, which keeps
    tests independent of the developer's local .env file.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    timeout = _parse_timeout(env.get("MARKCRAFT_TIMEOUT"))

    providers = []
    for name in PROVIDER_PRIORITY:
        defaults = _PROVIDER_DEFAULTS[name]
        providers.append(ProviderConfig(
            name=name,
            credential=(env.get(defaults["key_var"]) or "").strip() or None,
            endpoint=defaults["endpoint"],
            model=(env.get(defaults["model_var"]) or "").strip() or defaults["model"],
            timeout_seconds=timeout,
            referer=(env.get("OPENROUTER_REFERER") or DEFAULT_REFERER) if name == "openrouter" else "",
        ))

    storage = None
    storage_url = (env.get("INSFORGE_STORAGE_URL") or "").strip()
    storage_key = (env.get("INSFORGE_STORAGE_KEY") or "").strip()
    if storage_url and storage_key:
        storage = StorageConfig(
            base_url=storage_url.rstrip("/"),
            api_key=storage_key,
            bucket=(env.get("INSFORGE_BUCKET") or "").strip() or "logos",
        )
    else:
        logger.debug("InsForge credentials not found — export disabled")

    settings = Settings(
        providers=tuple(providers),
        explicit_provider=normalize_provider_name(env.get("AI_PROVIDER")),
        storage=storage,
    )
    logger.debug(
        "Settings loaded: explicit=%s enabled=%s",
        settings.explicit_provider,
        [p.name for p in settings.enabled_providers()],
    )
    return settings
