"""Tests for settings loading."""

import dataclasses

import pytest

from markcraft.config import (
    DEFAULT_TIMEOUT_SECONDS,
    PROVIDER_PRIORITY,
    ProviderConfig,
    normalize_provider_name,
)


class TestLoadSettings:

    def test_empty_environment(self, env_settings):
        settings = env_settings()
        assert [p.name for p in settings.providers] == list(PROVIDER_PRIORITY)
        assert settings.enabled_providers() == ()
        assert settings.explicit_provider is None
        assert settings.storage is None

    def test_credentials_enable_providers(self, env_settings):
        settings = env_settings(GROQ_API_KEY="gsk", ANTHROPIC_API_KEY="sk-ant")
        assert [p.name for p in settings.enabled_providers()] == ["groq", "anthropic"]
        assert settings.provider("groq").credential == "gsk"

    def test_blank_credential_is_disabled(self, env_settings):
        settings = env_settings(GEMINI_API_KEY="   ")
        assert not settings.provider("gemini").enabled

    def test_default_models_and_overrides(self, env_settings):
        settings = env_settings(GEMINI_MODEL="gemini-2.5-flash")
        assert settings.provider("gemini").model == "gemini-2.5-flash"
        assert settings.provider("groq").model == "llama-3.3-70b-versatile"
        assert settings.provider("openrouter").model == "anthropic/claude-3.5-sonnet"
        assert settings.provider("anthropic").model == "claude-3-5-sonnet-20241022"

    def test_openrouter_referer(self, env_settings):
        assert env_settings().provider("openrouter").referer == "https://mark-craft.zeabur.app"
        assert env_settings().provider("groq").referer == ""

    def test_timeout(self, env_settings):
        assert env_settings(MARKCRAFT_TIMEOUT="15").provider("gemini").timeout_seconds == 15.0
        assert env_settings(MARKCRAFT_TIMEOUT="soon").provider("gemini").timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert env_settings(MARKCRAFT_TIMEOUT="-3").provider("gemini").timeout_seconds == DEFAULT_TIMEOUT_SECONDS

    def test_storage_requires_url_and_key(self, env_settings):
        assert env_settings(INSFORGE_STORAGE_URL="https://x.insforge.app").storage is None
        storage = env_settings(
            INSFORGE_STORAGE_URL="https://x.insforge.app/",
            INSFORGE_STORAGE_KEY="secret",
        ).storage
        assert storage.base_url == "https://x.insforge.app"
        assert storage.bucket == "logos"

    def test_explicit_provider(self, env_settings):
        assert env_settings(AI_PROVIDER="claude").explicit_provider == "anthropic"

    def test_settings_are_frozen(self, env_settings):
        settings = env_settings()
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.explicit_provider = "groq"

    def test_unknown_provider_lookup(self, env_settings):
        with pytest.raises(KeyError):
            env_settings().provider("mistral")


class TestNormalizeProviderName:

    @pytest.mark.parametrize("value,expected", [
        ("gemini", "gemini"),
        ("Google", "gemini"),
        ("groq", "groq"),
        ("openrouter", "openrouter"),
        ("anthropic", "anthropic"),
        ("claude", "anthropic"),
        ("auto", None),
        ("", None),
        (None, None),
        ("mistral", None),
    ])
    def test_aliases(self, value, expected):
        assert normalize_provider_name(value) == expected


def test_provider_config_enabled():
    assert ProviderConfig("groq", "k", "http://x", "m").enabled
    assert not ProviderConfig("groq", None, "http://x", "m").enabled
