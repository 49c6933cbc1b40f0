"""
prompts.py — Instruction text for the two pipeline operations.

  generate → brand keywords, a tone word and exactly 3 logo concepts as ONE JSON object
  refine   → a single SVG document, no JSON wrapper

Two generate styles exist because providers differ in how well they follow
a pretty-printed template:
  "compact"    — one-line minified JSON example, escaped quotes (Gemini)
  "structured" — indented JSON template + design guidelines (chat-completion APIs)

Pure string building: no I/O, never raises.
"""

from __future__ import annotations

from typing import Optional

GENERATE = "generate"
REFINE = "refine"

STYLE_COMPACT = "compact"
STYLE_STRUCTURED = "structured"

VIEWBOX = "0 0 200 200"


# ── Generate ──────────────────────────────────────────────────────────────────

GENERATE_COMPACT_TEMPLATE = """\
You are a branding expert. Generate logo concepts for this product: "{description}"

Return ONLY valid JSON in this compact format (no markdown, no newlines in values):

{{"keywords":["k1","k2","k3"],"tone":"word","logos":[{{"id":"1","name":"Name","description":"Brief","svg":"<svg xmlns=\\"http://www.w3.org/2000/svg\\" viewBox=\\"{viewbox}\\"><circle cx=\\"100\\" cy=\\"100\\" r=\\"50\\" fill=\\"#6366f1\\"/></svg>"}},{{"id":"2","name":"Name","description":"Brief","svg":"..."}},{{"id":"3","name":"Name","description":"Brief","svg":"..."}}]}}

CRITICAL RULES:
- Entire response must be ONE LINE of valid JSON
- Exactly 3 logos, ids "1", "2", "3"
- SVG must be minified (no line breaks, no extra spaces)
- Escape all quotes in SVG: use \\" not "
- Keep SVG simple: basic shapes only (circle, rect, ellipse, polygon, path, line)
- Use only 2-3 hex colors like #6366f1, #22c55e, #ef4444
- No comments, no markdown blocks, no text outside JSON

Example SVG: <svg xmlns="http://www.w3.org/2000/svg" viewBox="{viewbox}"><circle cx="100" cy="100" r="50" fill="#6366f1"/><rect x="70" y="70" width="60" height="60" fill="#22c55e"/></svg>"""

GENERATE_STRUCTURED_TEMPLATE = """\
You are a branding expert. Given this product description, extract brand keywords, tone, and create 3 unique logo concepts.

Product description: "{description}"

Respond ONLY with valid JSON in this exact format (no markdown, no code blocks):
{{
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "tone": "adjective describing the brand personality",
  "logos": [
    {{
      "id": "1",
      "name": "Concept Name",
      "description": "Brief explanation of the concept",
      "svg": "<svg>...</svg>"
    }},
    {{
      "id": "2",
      "name": "Concept Name",
      "description": "Brief explanation of the concept",
      "svg": "<svg>...</svg>"
    }},
    {{
      "id": "3",
      "name": "Concept Name",
      "description": "Brief explanation of the concept",
      "svg": "<svg>...</svg>"
    }}
  ]
}}

Design guidelines for SVG logos:
- Use simple, clean geometric shapes
- Maximum 3 colors from a harmonious palette
- ViewBox should be "{viewbox}"
- Include text only if it's a wordmark style (keep it short)
- Ensure contrast and scalability
- Use modern, minimal aesthetics"""


# ── Refine ────────────────────────────────────────────────────────────────────

REFINE_TEMPLATE = """\
Create a minimalist SVG logo. 200x200 viewBox ("{viewbox}"). Use geometric shapes and 2-3 colors.
Make it more sophisticated than a first sketch: balanced negative space, consistent stroke weights, precise alignment.

Logo name: {name}
Context: {description}

Return ONLY the SVG code. No markdown, no explanation."""


def build_generate_prompt(description: str, style: str = STYLE_STRUCTURED) -> str:
    template = GENERATE_COMPACT_TEMPLATE if style == STYLE_COMPACT else GENERATE_STRUCTURED_TEMPLATE
    return template.format(description=description, viewbox=VIEWBOX)


def build_refine_prompt(concept_name: str, description: str) -> str:
    return REFINE_TEMPLATE.format(name=concept_name, description=description, viewbox=VIEWBOX)


def build_prompt(
    operation: str,
    description: str,
    concept=None,
    style: str = STYLE_STRUCTURED,
) -> Optional[str]:
    """
    Dispatch on ``operation``. ``concept`` (anything with a ``name``) is used by
    "refine" only. Unknown operations return None rather than raising.
    """
    if operation == GENERATE:
        return build_generate_prompt(description, style=style)
    if operation == REFINE:
        name = getattr(concept, "name", None) or "Logo"
        return build_refine_prompt(name, description)
    return None
