"""
providers.py — One adapter per text-generation backend, one shared contract.

  adapter = build_adapter(settings.provider("groq"))
  raw_text = await adapter.invoke(prompt)

Each adapter owns its wire format (request envelope, auth header, response
path) and maps failures onto three error kinds:

  ProviderUnavailable         — no credential configured (raised before any I/O)
  ProviderRequestFailed       — non-2xx status, timeout or connection error
  ProviderResponseShapeError  — 2xx, but the text is not where it should be

Backends:
  gemini      google-genai async client   candidates[0].content.parts[0].text
  groq        httpx, chat completions     choices[0].message.content
  openrouter  httpx, chat completions     choices[0].message.content
  anthropic   anthropic async client      content[0].text
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional

import anthropic
import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .config import PROVIDER_PRIORITY, ProviderConfig, Settings
from .errors import (
    ProviderRequestFailed,
    ProviderResponseShapeError,
    ProviderUnavailable,
    excerpt,
)
from .prompts import STYLE_COMPACT, STYLE_STRUCTURED

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7

KEY_HELP = {
    "gemini": "GEMINI_API_KEY not set. Get free key at https://aistudio.google.com/apikey",
    "groq": "GROQ_API_KEY not set. Get free key at https://groq.com",
    "openrouter": "OPENROUTER_API_KEY not set. Get free key at https://openrouter.ai",
    "anthropic": "ANTHROPIC_API_KEY not set. Get key at https://console.anthropic.com",
}


class ProviderAdapter:
    """Base adapter: credential check + logging around ``_invoke``."""

    name = ""
    prompt_style = STYLE_STRUCTURED

    def __init__(self, config: ProviderConfig) -> None:
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    async def invoke(self, prompt: str) -> str:
        if not self.config.enabled:
            raise ProviderUnavailable(self.name, KEY_HELP.get(self.name, ""))
        logger.info("Calling %s API: %s", self.name, self.config.model)
        text = await self._invoke(prompt)
        logger.debug("%s raw response (%d chars): %s", self.name, len(text), excerpt(text))
        return text

    async def _invoke(self, prompt: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} model={self.config.model!r} enabled={self.enabled}>"


# ── Gemini ────────────────────────────────────────────────────────────────────

class GeminiAdapter(ProviderAdapter):
    name = "gemini"
    prompt_style = STYLE_COMPACT
    max_output_tokens = 8192

    def __init__(self, config: ProviderConfig, client=None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = genai.Client(
                api_key=self.config.credential,
                http_options=types.HttpOptions(
                    base_url=self.config.endpoint,
                    timeout=int(self.config.timeout_seconds * 1000),
                ),
            )
        return self._client

    async def _invoke(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=TEMPERATURE,
                    max_output_tokens=self.max_output_tokens,
                ),
            )
        except genai_errors.APIError as exc:
            raise ProviderRequestFailed(self.name, exc.code, exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise ProviderRequestFailed(self.name, None, f"{type(exc).__name__}: {exc}") from exc

        try:
            text = response.candidates[0].content.parts[0].text
        except (AttributeError, IndexError, TypeError) as exc:
            raise ProviderResponseShapeError(self.name, repr(response)) from exc
        if not isinstance(text, str) or not text:
            raise ProviderResponseShapeError(self.name, repr(response))
        return text


# ── OpenAI-compatible chat completions (Groq, OpenRouter) ─────────────────────

class ChatCompletionsAdapter(ProviderAdapter):
    max_tokens = 3000

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(config)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.credential}",
            "Content-Type": "application/json",
        }

    def _body(self, prompt: str) -> dict:
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": TEMPERATURE,
            "max_tokens": self.max_tokens,
        }

    async def _invoke(self, prompt: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self.config.endpoint,
                    json=self._body(prompt),
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            raise ProviderRequestFailed(self.name, None, f"{type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise ProviderRequestFailed(self.name, resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderResponseShapeError(self.name, resp.text) from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderResponseShapeError(self.name, json.dumps(data)) from exc
        if not isinstance(content, str) or not content:
            raise ProviderResponseShapeError(self.name, json.dumps(data))
        return content


class GroqAdapter(ChatCompletionsAdapter):
    name = "groq"


class OpenRouterAdapter(ChatCompletionsAdapter):
    name = "openrouter"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.config.referer:
            headers["HTTP-Referer"] = self.config.referer
        headers["X-Title"] = "MarkCraft"
        return headers


# ── Anthropic ─────────────────────────────────────────────────────────────────

class AnthropicAdapter(ProviderAdapter):
    name = "anthropic"
    max_tokens = 2000

    def __init__(self, config: ProviderConfig, client=None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.config.credential,
                base_url=self.config.endpoint,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    async def _invoke(self, prompt: str) -> str:
        client = self._get_client()
        try:
            message = await client.messages.create(
                model=self.config.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as exc:
            body = exc.response.text if exc.response is not None else exc.message
            raise ProviderRequestFailed(self.name, exc.status_code, body) from exc
        except anthropic.APIConnectionError as exc:
            raise ProviderRequestFailed(self.name, None, f"{type(exc).__name__}: {exc}") from exc

        blocks = getattr(message, "content", None) or []
        texts = [getattr(b, "text", "") for b in blocks if getattr(b, "type", None) == "text"]
        if not texts or not texts[0]:
            raise ProviderResponseShapeError(self.name, repr(message))
        return texts[0]


# ── Registry ──────────────────────────────────────────────────────────────────

ADAPTER_TYPES = {
    "gemini": GeminiAdapter,
    "groq": GroqAdapter,
    "openrouter": OpenRouterAdapter,
    "anthropic": AnthropicAdapter,
}


def build_adapter(config: ProviderConfig) -> ProviderAdapter:
    try:
        adapter_cls = ADAPTER_TYPES[config.name]
    except KeyError:
        raise ValueError(f"No adapter for provider {config.name!r}") from None
    return adapter_cls(config)


def build_adapters(settings: Settings) -> Dict[str, ProviderAdapter]:
    """One adapter per configured provider, keyed by name, in fallback priority order."""
    by_name = {cfg.name: cfg for cfg in settings.providers}
    return {
        name: build_adapter(by_name[name])
        for name in PROVIDER_PRIORITY
        if name in by_name
    }
