"""Shared fixtures: sample SVG documents, provider payloads and a scripted adapter."""

import json

import pytest

from markcraft.config import ProviderConfig, Settings, load_settings
from markcraft.providers import ProviderAdapter

SIMPLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 200">'
    '<circle cx="100" cy="100" r="50" fill="#6366f1"/></svg>'
)

GRADIENT_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 200">'
    '<defs><linearGradient id="grad1">'
    '<stop offset="0" stop-color="#ff0000"/><stop offset="1" stop-color="#0000ff"/>'
    '</linearGradient></defs>'
    '<circle cx="100" cy="100" r="80" fill="url(#grad1)" fill-opacity="0.5"/>'
    '<rect x="60" y="60" width="80" height="80" fill="none" stroke="#22c55e" stroke-width="4"/>'
    '<path d="M10 10 L190 190" stroke="#ef4444" stroke-opacity="0.3"/>'
    '</svg>'
)


def make_logo(logo_id, svg=SIMPLE_SVG, name=None):
    return {
        "id": logo_id,
        "name": name or f"Concept {logo_id}",
        "description": f"Brief for concept {logo_id}",
        "svg": svg,
    }


class ScriptedAdapter(ProviderAdapter):
    """Adapter that replays a canned response (or raises a canned error)."""

    def __init__(self, name, response=None, error=None, enabled=True, style="structured", calls=None):
        super().__init__(ProviderConfig(
            name=name,
            credential="test-key" if enabled else None,
            endpoint="http://provider.test",
            model=f"{name}-model",
        ))
        self.name = name
        self.prompt_style = style
        self.response = response
        self.error = error
        self.prompts = []
        self.calls = calls if calls is not None else []

    async def _invoke(self, prompt):
        self.prompts.append(prompt)
        self.calls.append(self.name)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def simple_svg():
    return SIMPLE_SVG


@pytest.fixture
def gradient_svg():
    return GRADIENT_SVG


@pytest.fixture
def logo_factory():
    return make_logo


@pytest.fixture
def payload_dict():
    return {
        "keywords": ["coffee", "night", "organic"],
        "tone": "bold",
        "logos": [make_logo("1"), make_logo("2"), make_logo("3")],
    }


@pytest.fixture
def payload_json(payload_dict):
    return json.dumps(payload_dict)


@pytest.fixture
def scripted_adapter():
    return ScriptedAdapter


@pytest.fixture
def fallback_settings():
    return Settings(providers=(), explicit_provider=None)


@pytest.fixture
def env_settings():
    def _build(**env):
        return load_settings(env)
    return _build
