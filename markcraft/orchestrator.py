"""
orchestrator.py — Generation and refinement entry points.

  generator = LogoGenerator(load_settings())
  batch   = await generator.generate_concepts("Organic cold brew for night owls")
  refined = await generator.refine_concept(batch.concepts[0], batch.source_description)

Provider selection for generate_concepts:
  - AI_PROVIDER set → that provider only; its failure propagates unchanged
  - otherwise       → gemini, groq, openrouter, anthropic in order, skipping
                      providers without a key; the first provider whose
                      response survives normalization wins. Attempts are
                      sequential, so the winner is deterministic.

refine_concept never fans out: it uses the primary provider only and lets
its failure propagate (the caller retries or picks another concept).

Stateless across calls — safe to share one instance between concurrent tasks.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from .config import Settings
from .errors import InvalidDescription, MarkCraftError, NoProviderAvailable
from .models import MAX_DESCRIPTION_LENGTH, Concept, GenerationBatch
from .normalizer import extract_svg, parse_generation_response
from .prompts import build_generate_prompt, build_refine_prompt
from .providers import ProviderAdapter, build_adapters

logger = logging.getLogger(__name__)


def validate_description(description) -> str:
    """Return the stripped description or raise InvalidDescription."""
    if not isinstance(description, str) or not description.strip():
        raise InvalidDescription("Description is required and must be a string")
    description = description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidDescription(
            f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less"
        )
    return description


class LogoGenerator:
    """
    Wires prompt builder → provider adapter → normalizer.

    Args:
        settings: Frozen process settings (explicit provider, per-provider config)
        adapters: Optional name → adapter mapping, in fallback priority order.
                  Defaults to build_adapters(settings).
    """

    def __init__(
        self,
        settings: Settings,
        adapters: Optional[Mapping[str, ProviderAdapter]] = None,
    ) -> None:
        self.settings = settings
        self.adapters: Dict[str, ProviderAdapter] = dict(
            adapters if adapters is not None else build_adapters(settings)
        )

    # ── Provider resolution ───────────────────────────────────────────────────

    @property
    def primary_provider(self) -> Optional[str]:
        """Explicit provider if configured, else the first enabled one in priority order."""
        if self.settings.explicit_provider:
            return self.settings.explicit_provider
        for name, adapter in self.adapters.items():
            if adapter.enabled:
                return name
        return None

    def _adapter(self, name: str) -> ProviderAdapter:
        try:
            return self.adapters[name]
        except KeyError:
            raise NoProviderAvailable({name: "provider is not registered"}) from None

    # ── Generate ──────────────────────────────────────────────────────────────

    async def _generate_with(self, adapter: ProviderAdapter, description: str) -> GenerationBatch:
        prompt = build_generate_prompt(description, style=adapter.prompt_style)
        raw = await adapter.invoke(prompt)
        payload = parse_generation_response(raw)
        return GenerationBatch.from_payload(payload, description, provider=adapter.name)

    async def generate_concepts(self, description: str) -> GenerationBatch:
        """
        Generate brand analysis + exactly 3 logo concepts.

        Raises:
            InvalidDescription: empty or longer than 500 characters
            NoProviderAvailable: fallback mode and every provider failed / none configured
            Any provider or normalizer error: explicit-provider mode only
        """
        description = validate_description(description)

        explicit = self.settings.explicit_provider
        if explicit:
            return await self._generate_with(self._adapter(explicit), description)

        failures: Dict[str, str] = {}
        for name, adapter in self.adapters.items():
            if not adapter.enabled:
                continue
            try:
                batch = await self._generate_with(adapter, description)
            except MarkCraftError as exc:
                logger.warning("%s failed, trying next provider... (%s)", name, exc)
                failures[name] = str(exc)
                continue
            except Exception as exc:
                logger.exception("%s raised an unexpected error, trying next provider...", name)
                failures[name] = f"{type(exc).__name__}: {exc}"
                continue
            if failures:
                logger.info("Generated with %s after %d failed provider(s)", name, len(failures))
            return batch

        raise NoProviderAvailable(failures)

    # ── Refine ────────────────────────────────────────────────────────────────

    async def refine_concept(self, concept: Concept, description: str) -> Concept:
        """
        Turn one concept into a single polished SVG logo.

        Only the concept's name and the description feed the prompt; the
        returned concept is independent of the batch it came from.
        """
        description = validate_description(description)
        name = self.primary_provider
        if name is None:
            raise NoProviderAvailable()

        adapter = self._adapter(name)
        logger.info("Refining logo: %s (%s)", concept.name, name)
        raw = await adapter.invoke(build_refine_prompt(concept.name, description))
        svg = extract_svg(raw)
        return Concept.refined_from(concept, svg)
