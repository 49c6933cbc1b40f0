"""
errors.py — Failure taxonomy for the generation / refinement pipeline.

Every error carries a stable ``kind`` string (safe to branch on) and a
bounded ``detail`` message. Raw provider payloads never travel inside an
error — only short excerpts.
"""

from __future__ import annotations

from typing import Dict, Optional

EXCERPT_LIMIT = 200


def excerpt(text: Optional[str], limit: int = EXCERPT_LIMIT) -> str:
    """Return at most ``limit`` characters of ``text`` with an ellipsis marker."""
    if not text:
        return ""
    text = str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


class MarkCraftError(Exception):
    """Base class. Subclasses override ``kind``."""

    kind = "markcraft_error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"[{self.kind}] {self.detail}"


# ── Provider errors ───────────────────────────────────────────────────────────

class ProviderUnavailable(MarkCraftError):
    """Credential missing — a configuration problem, not a transient one."""

    kind = "provider_unavailable"

    def __init__(self, provider: str, detail: str = "") -> None:
        self.provider = provider
        super().__init__(detail or f"{provider}: no API key configured")


class ProviderRequestFailed(MarkCraftError):
    kind = "provider_request_failed"

    def __init__(self, provider: str, status: Optional[int], body: str = "") -> None:
        self.provider = provider
        self.status = status
        self.body_excerpt = excerpt(body, 300)
        status_label = status if status is not None else "no response"
        super().__init__(f"{provider} API error: {status_label} - {self.body_excerpt}")


class ProviderResponseShapeError(MarkCraftError):
    kind = "provider_response_shape"

    def __init__(self, provider: str, payload: str = "") -> None:
        self.provider = provider
        super().__init__(
            f"Unexpected {provider} API response structure: {excerpt(payload)}"
        )


# ── Content errors ────────────────────────────────────────────────────────────

class MalformedGenerationResponse(MarkCraftError):
    kind = "malformed_generation_response"

    def __init__(self, text: str, parse_error: str) -> None:
        self.excerpt = excerpt(text)
        self.parse_error = excerpt(parse_error, 300)
        super().__init__(
            "Failed to parse AI response as JSON. "
            f"Error: {self.parse_error} | content: {self.excerpt}"
        )


class NoVectorDocumentFound(MarkCraftError):
    kind = "no_vector_document"

    def __init__(self, text: str, reason: str = "No valid SVG found in response") -> None:
        self.excerpt = excerpt(text)
        super().__init__(f"{reason} | content: {self.excerpt}")


# ── Orchestration errors ──────────────────────────────────────────────────────

class NoProviderAvailable(MarkCraftError):
    kind = "no_provider_available"

    def __init__(self, failures: Optional[Dict[str, str]] = None) -> None:
        self.failures = dict(failures or {})
        if self.failures:
            reasons = "; ".join(f"{name}: {why}" for name, why in self.failures.items())
            detail = f"All AI providers failed — {reasons}"
        else:
            detail = (
                "No AI provider configured. Set GEMINI_API_KEY, GROQ_API_KEY, "
                "OPENROUTER_API_KEY, or ANTHROPIC_API_KEY"
            )
        super().__init__(detail)


class InvalidDescription(MarkCraftError):
    kind = "invalid_description"


class ExportFailed(MarkCraftError):
    kind = "export_failed"

    def __init__(self, detail: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(detail)
