"""
models.py — Pydantic schema for generated logo concepts.

  BrandAnalysis     — keywords + tone derived once per description
  Concept           — one logo candidate with its inline SVG document
  GenerationPayload — the JSON object a provider must return for "generate"
  GenerationBatch   — validated payload + the description and provider it came from

Every model is frozen: a batch is handed to the caller and never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .svg_tools import is_well_formed_svg

CONCEPTS_PER_BATCH = 3
MAX_DESCRIPTION_LENGTH = 500

REFINED_ID = "refined"
REFINED_NAME_SUFFIX = "Professional"
REFINED_TECHNIQUE = "Professional minimalist design"


class BrandAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: List[str] = Field(description="Short brand keywords, most important first")
    tone: str = Field(description="One adjective describing the brand personality")


class Concept(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str = Field(description="Unique within one generation batch")
    name: str = Field(description="Short evocative concept name")
    description: str = Field(description="Brief explanation of the concept")
    svg: str = Field(description="Complete <svg>…</svg> document, viewBox 0 0 200 200")
    colors: Optional[List[str]] = Field(default=None, description="Hex colors used, if reported")
    technique: Optional[str] = Field(default=None, description="Design technique label")
    refined: bool = False

    @field_validator("svg")
    @classmethod
    def _svg_well_formed(cls, value: str) -> str:
        value = value.strip()
        if not is_well_formed_svg(value):
            raise ValueError("svg must be a single well-formed <svg>…</svg> document")
        return value

    @classmethod
    def refined_from(cls, source: "Concept", svg: str) -> "Concept":
        """Wrap a refined SVG as a new concept derived from ``source``."""
        return cls(
            id=REFINED_ID,
            name=f"{source.name} {REFINED_NAME_SUFFIX}",
            description=f"Refined professional logo for {source.name}",
            svg=svg,
            colors=[],
            technique=REFINED_TECHNIQUE,
            refined=True,
        )


class GenerationPayload(BaseModel):
    """Schema a provider's "generate" response must satisfy. Extra keys are ignored."""

    model_config = ConfigDict(frozen=True)

    keywords: List[str]
    tone: str
    logos: List[Concept]

    @field_validator("logos")
    @classmethod
    def _exactly_three(cls, logos: List[Concept]) -> List[Concept]:
        if len(logos) != CONCEPTS_PER_BATCH:
            raise ValueError(
                f"expected exactly {CONCEPTS_PER_BATCH} logos, got {len(logos)}"
            )
        ids = [logo.id for logo in logos]
        if len(set(ids)) != len(ids):
            raise ValueError(f"logo ids must be unique within a batch, got {ids}")
        return logos


class GenerationBatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    analysis: BrandAnalysis
    concepts: Tuple[Concept, ...]
    source_description: str
    provider: str = ""

    @model_validator(mode="after")
    def _batch_size(self) -> "GenerationBatch":
        if len(self.concepts) != CONCEPTS_PER_BATCH:
            raise ValueError(f"a batch holds exactly {CONCEPTS_PER_BATCH} concepts")
        return self

    @classmethod
    def from_payload(
        cls,
        payload: GenerationPayload,
        description: str,
        provider: str = "",
    ) -> "GenerationBatch":
        return cls(
            analysis=BrandAnalysis(keywords=payload.keywords, tone=payload.tone),
            concepts=tuple(payload.logos),
            source_description=description,
            provider=provider,
        )

    def concept(self, concept_id: str) -> Concept:
        for c in self.concepts:
            if c.id == concept_id:
                return c
        raise KeyError(concept_id)

    def to_payload(self) -> Dict[str, Any]:
        """Wire-shaped dict: {keywords, tone, logos} as the HTTP layer returns it."""
        return {
            "keywords": list(self.analysis.keywords),
            "tone": self.analysis.tone,
            "logos": [c.model_dump(exclude_none=True) for c in self.concepts],
        }
