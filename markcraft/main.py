"""
MarkCraft — Logo concept generator CLI

Usage:
  python -m markcraft.main "Organic cold brew for night owls"
  python -m markcraft.main "Fintech app for freelancers" --provider groq --select 2
  python -m markcraft.main "Yoga studio in Lisbon" --select 1 --mono black --export
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.rule import Rule

from .config import PROVIDER_ALIASES, Settings, load_settings, normalize_provider_name
from .errors import MarkCraftError
from .models import Concept, GenerationBatch
from .orchestrator import LogoGenerator
from .storage import LogoExporter
from .svg_tools import MONOCHROME_PRESETS, resolve_color, to_monochrome

console = Console()
logger = logging.getLogger(__name__)

OUTPUTS_ROOT = Path("outputs")

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_-]")


# ── CLI ───────────────────────────────────────────────────────────────────────

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="MarkCraft — AI logo concepts from a product description"
    )
    parser.add_argument("description", help="Product description (max 500 characters)")
    parser.add_argument(
        "--provider",
        default=None,
        type=str.lower,
        choices=sorted(PROVIDER_ALIASES) + ["auto"],
        help="Force one provider; overrides AI_PROVIDER (auto = fallback chain)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output directory (default: outputs/<timestamp>)",
    )
    parser.add_argument(
        "--select",
        default=None,
        help="Concept id to refine without prompting",
    )
    parser.add_argument(
        "--no-refine",
        action="store_true",
        help="Stop after the 3 concepts (no refinement)",
    )
    parser.add_argument(
        "--mono",
        default=None,
        help=f"Monochrome export color: hex value or one of {', '.join(MONOCHROME_PRESETS)}",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Upload the final SVG to InsForge storage",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall timeout in seconds for each generate / refine call",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)
    if args.mono and args.no_refine:
        parser.error("--mono recolors the refined logo and cannot be combined with --no-refine")
    return args


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.provider:
        settings = dataclasses.replace(
            settings, explicit_provider=normalize_provider_name(args.provider)
        )
    return settings


# ── Output helpers ────────────────────────────────────────────────────────────

def display_batch(batch: GenerationBatch) -> None:
    console.print(
        Panel(
            f"[bold]Keywords:[/bold] {escape(', '.join(batch.analysis.keywords))}\n"
            f"[bold]Tone:[/bold] {escape(batch.analysis.tone)}\n"
            f"[dim]provider: {batch.provider}[/dim]",
            title="[bold]Brand Analysis[/bold]",
            border_style="blue",
        )
    )
    for c in batch.concepts:
        console.print(
            Panel(
                f"{escape(c.description)}\n\n[dim]{len(c.svg)} chars of SVG[/dim]",
                title=f"[bold]Concept {escape(c.id)} — {escape(c.name)}[/bold]",
                border_style="cyan",
            )
        )


def _safe_id(concept_id: str) -> str:
    """Provider-chosen ids end up in file names; keep them to one path segment."""
    return _UNSAFE_FILENAME_RE.sub("_", concept_id) or "_"


def save_batch(batch: GenerationBatch, output_dir: Path) -> Path:
    """Save concepts.json plus one .svg file per concept."""
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / "concepts.json"
    json_path.write_text(batch.model_dump_json(indent=2), encoding="utf-8")
    for c in batch.concepts:
        (output_dir / f"concept_{_safe_id(c.id)}.svg").write_text(c.svg, encoding="utf-8")
    return json_path


def _choose_concept(batch: GenerationBatch, select: Optional[str]) -> Optional[Concept]:
    ids = [c.id for c in batch.concepts]
    if select is None:
        if not sys.stdin.isatty():
            return None
        select = Prompt.ask("Refine which concept?", choices=ids + ["skip"], default="skip")
        if select == "skip":
            return None
    try:
        return batch.concept(str(select))
    except KeyError:
        console.print(f"[yellow]⚠ No concept with id {escape(repr(select))} (have: {', '.join(ids)})[/yellow]")
        return None


# ── Pipeline ──────────────────────────────────────────────────────────────────

async def run(args: argparse.Namespace) -> int:
    settings = _apply_overrides(load_settings(), args)
    generator = LogoGenerator(settings)

    output_dir = Path(args.output) if args.output else OUTPUTS_ROOT / datetime.now().strftime("%Y%m%d_%H%M%S")

    console.print(Rule("[bold]MarkCraft[/bold]"))
    console.print("\n[bold cyan]→ Generating logo concepts...[/bold cyan]")
    batch = await asyncio.wait_for(generator.generate_concepts(args.description), args.timeout)
    display_batch(batch)
    json_path = save_batch(batch, output_dir)
    console.print(f"  [green]✓ Saved[/green] → {json_path}")

    if args.no_refine:
        return 0

    chosen = _choose_concept(batch, args.select)
    if chosen is None:
        if args.mono:
            console.print("[yellow]⚠ No concept refined, --mono skipped[/yellow]")
        return 0

    console.print(f"\n[bold cyan]→ Refining {escape(chosen.name)}...[/bold cyan]")
    final = await asyncio.wait_for(
        generator.refine_concept(chosen, batch.source_description), args.timeout
    )
    (output_dir / "refined.svg").write_text(final.svg, encoding="utf-8")
    console.print(f"  [green]✓ Refined[/green] → {escape(final.name)} ({output_dir / 'refined.svg'})")

    mono_color = resolve_color(args.mono) if args.mono else None
    if mono_color:
        mono_path = output_dir / "refined_mono.svg"
        mono_path.write_text(to_monochrome(final.svg, mono_color), encoding="utf-8")
        console.print(f"  [green]✓ Monochrome {mono_color}[/green] → {mono_path}")

    if args.export:
        exporter = LogoExporter(settings.storage)
        result = await exporter.export_concept(final, mono_color=mono_color)
        console.print(f"  [green]✓ Exported[/green] → {result.url}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        format="%(asctime)s — %(levelname)s — %(name)s — %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )
    try:
        return asyncio.run(run(args))
    except MarkCraftError as exc:
        console.print(f"\n[bold red]✗ {exc.kind}[/bold red] {escape(exc.detail)}")
        return 1
    except asyncio.TimeoutError:
        console.print(f"\n[bold red]✗ timeout[/bold red] no result within {args.timeout}s")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
