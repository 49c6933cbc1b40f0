"""
normalizer.py — Defensive parsing of free-form provider output.

  parse_generation_response(raw) → GenerationPayload   (after "generate")
  extract_svg(raw)               → single-line SVG str (after "refine")

Both follow the same skeleton: locate a candidate span in the raw text,
then validate it. Recoverable defects get exactly one bounded repair pass;
everything else fails with a classified error carrying a short excerpt.

JSON extraction:
  1. ```json fenced block → its interior; else first "{" … last "}"; else the whole text
  2. drop commas directly before "}" or "]"
  3. json.loads; on failure escape raw newlines/tabs inside string literals, retry once
  4. validate against GenerationPayload (exactly 3 logos, each with a well-formed svg)

SVG extraction:
  1. drop every ``` fence marker, whatever its language tag
  2. first <svg …>…</svg> span (non-greedy); fallback: opening tag only
  3. collapse whitespace to single spaces
  4. check well-formedness
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, TypeVar

from pydantic import ValidationError

from .errors import MalformedGenerationResponse, NoVectorDocumentFound, excerpt
from .models import GenerationPayload
from .svg_tools import is_well_formed_svg

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_FENCE_MARKER_RE = re.compile(r"```[\w+-]*")
_SVG_DOCUMENT_RE = re.compile(r"<svg[^>]*>[\s\S]*?</svg>", re.IGNORECASE)
_SVG_OPEN_TAG_RE = re.compile(r"<svg[\s\S]+?>", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _extract(raw: str, locate: Callable[[str], str], validate: Callable[[str, str], T]) -> T:
    """Locate a candidate span in ``raw``, then hand (candidate, raw) to ``validate``."""
    text = raw if isinstance(raw, str) else ""
    return validate(locate(text), text)


# ── JSON object extraction ────────────────────────────────────────────────────

def _locate_json_object(text: str) -> str:
    fenced = _FENCED_JSON_RE.search(text)
    if fenced:
        candidate = fenced.group(1).strip()
    else:
        span = _OBJECT_SPAN_RE.search(text)
        candidate = span.group(0) if span else text
    return strip_trailing_commas(candidate)


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def escape_control_chars_in_strings(text: str) -> str:
    """Escape literal newline / CR / tab characters that sit inside JSON string literals."""
    out = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch in _CONTROL_ESCAPES:
                out.append(_CONTROL_ESCAPES[ch])
                continue
        elif ch == '"':
            in_string = True
        out.append(ch)
    return "".join(out)


def _loads_with_repair(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as first_error:
        logger.warning("Failed to parse JSON response (%s), attempting to fix...", first_error)
        logger.debug("Content preview: %s", excerpt(candidate, 500))

    repaired = escape_control_chars_in_strings(candidate)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise MalformedGenerationResponse(candidate, str(exc)) from exc


def _decode_object(candidate: str, _raw: str) -> Dict[str, Any]:
    data = _loads_with_repair(candidate)
    if not isinstance(data, dict):
        raise MalformedGenerationResponse(candidate, "top-level JSON value is not an object")
    return data


def extract_json_object(raw: str) -> Dict[str, Any]:
    """Steps 1–3: pull a JSON object out of ``raw``. No schema check."""
    return _extract(raw, _locate_json_object, _decode_object)


def _summarize_validation(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors()[:5]:
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        problems.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(problems)


def _validate_payload(candidate: str, raw: str) -> GenerationPayload:
    data = _decode_object(candidate, raw)
    try:
        payload = GenerationPayload.model_validate(data)
    except ValidationError as exc:
        raise MalformedGenerationResponse(candidate, _summarize_validation(exc)) from exc
    logger.info(
        "Parsed generation response: %d keywords, tone=%r, %d logos",
        len(payload.keywords), payload.tone, len(payload.logos),
    )
    return payload


def parse_generation_response(raw: str) -> GenerationPayload:
    """
    Full "generate" normalization. A single bad concept fails the whole
    batch — concepts are never dropped silently.

    Raises:
        MalformedGenerationResponse
    """
    return _extract(raw, _locate_json_object, _validate_payload)


# ── SVG extraction ────────────────────────────────────────────────────────────

def _locate_svg(text: str) -> str:
    text = _FENCE_MARKER_RE.sub("", text).strip()
    match = _SVG_DOCUMENT_RE.search(text) or _SVG_OPEN_TAG_RE.search(text)
    if not match:
        return ""
    return _WHITESPACE_RE.sub(" ", match.group(0)).strip()


def _validate_svg(candidate: str, raw: str) -> str:
    if not candidate:
        raise NoVectorDocumentFound(raw)
    if not is_well_formed_svg(candidate):
        raise NoVectorDocumentFound(raw, "Invalid SVG structure")
    logger.info("Extracted SVG (%d chars): %s", len(candidate), excerpt(candidate))
    return candidate


def extract_svg(raw: str) -> str:
    """
    Pull the FIRST complete <svg>…</svg> document out of ``raw`` as one line.

    Raises:
        NoVectorDocumentFound
    """
    return _extract(raw, _locate_svg, _validate_svg)
