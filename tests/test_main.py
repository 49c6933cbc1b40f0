"""Tests for the CLI helpers (argument parsing, saving, concept selection)."""

import asyncio
import json

import pytest
from rich.console import Console

from markcraft import main as cli
from markcraft.config import Settings
from markcraft.main import _apply_overrides, _choose_concept, parse_args, save_batch
from markcraft.models import GenerationBatch
from markcraft.normalizer import parse_generation_response


def _batch(payload_json):
    return GenerationBatch.from_payload(parse_generation_response(payload_json), "desc", provider="groq")


class TestParseArgs:

    def test_defaults(self):
        args = parse_args(["Organic cold brew"])
        assert args.description == "Organic cold brew"
        assert args.provider is None
        assert args.select is None
        assert args.mono is None
        assert args.timeout is None
        assert not args.no_refine and not args.export

    def test_provider_override(self):
        args = parse_args(["x", "--provider", "Claude"])
        settings = _apply_overrides(Settings(providers=()), args)
        assert settings.explicit_provider == "anthropic"

    def test_no_override_keeps_settings(self):
        settings = Settings(providers=(), explicit_provider="groq")
        assert _apply_overrides(settings, parse_args(["x"])) is settings

    def test_unknown_provider_is_rejected(self):
        with pytest.raises(SystemExit) as info:
            parse_args(["x", "--provider", "bogus"])
        assert info.value.code == 2

    def test_mono_without_refinement_is_rejected(self):
        with pytest.raises(SystemExit) as info:
            parse_args(["x", "--mono", "black", "--no-refine"])
        assert info.value.code == 2


class TestSaveBatch:

    def test_writes_json_and_svgs(self, tmp_path, payload_json):
        batch = _batch(payload_json)
        json_path = save_batch(batch, tmp_path / "run")
        saved = json.loads(json_path.read_text(encoding="utf-8"))
        assert saved["provider"] == "groq"
        assert len(saved["concepts"]) == 3
        for concept in batch.concepts:
            assert (tmp_path / "run" / f"concept_{concept.id}.svg").read_text(encoding="utf-8") == concept.svg

    def test_ids_with_path_separators_stay_in_output_dir(self, tmp_path, payload_dict, logo_factory):
        payload_dict["logos"] = [logo_factory("a/b"), logo_factory("../up"), logo_factory("3")]
        batch = _batch(json.dumps(payload_dict))
        save_batch(batch, tmp_path / "run")
        names = sorted(p.name for p in (tmp_path / "run").iterdir())
        assert names == ["concept_3.svg", "concept____up.svg", "concept_a_b.svg", "concepts.json"]
        assert not (tmp_path / "up").exists()


class TestChooseConcept:

    def test_select_by_id(self, payload_json):
        assert _choose_concept(_batch(payload_json), "2").id == "2"

    def test_unknown_id(self, payload_json):
        assert _choose_concept(_batch(payload_json), "7") is None


class _FakeGenerator:

    def __init__(self, batch):
        self.batch = batch

    async def generate_concepts(self, description):
        return self.batch

    async def refine_concept(self, concept, description):
        raise AssertionError("refine must not run without a chosen concept")


def test_mono_is_reported_when_nothing_is_refined(tmp_path, monkeypatch, payload_json):
    batch = _batch(payload_json)
    recorder = Console(record=True, width=200)
    monkeypatch.setattr(cli, "console", recorder)
    monkeypatch.setattr(cli, "LogoGenerator", lambda settings: _FakeGenerator(batch))

    args = parse_args(["desc", "--select", "9", "--mono", "black", "--output", str(tmp_path)])
    assert asyncio.run(cli.run(args)) == 0

    assert "--mono skipped" in recorder.export_text()
    assert not (tmp_path / "refined_mono.svg").exists()
