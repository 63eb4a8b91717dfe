import pytest

from ask_philip.providers import create_provider
from ask_philip.providers.gemini_client import GeminiClient
from ask_philip.providers.registry import GEMINI_CONFIG, get_provider_config, resolve_model


class DummySettings:
    default_provider = "gemini"
    gemini_api_key = "g-key-123456"
    http_timeout = 1.0
    gemini_base_url = "https://generativelanguage.googleapis.com/v1beta"


def test_create_provider_default(monkeypatch):
    monkeypatch.setattr("ask_philip.providers.settings", DummySettings())
    provider = create_provider()
    assert isinstance(provider, GeminiClient)
    assert provider.configured


def test_create_provider_explicit_cfg():
    class NoKey(DummySettings):
        gemini_api_key = None

    provider = create_provider("Gemini", cfg=NoKey())
    assert isinstance(provider, GeminiClient)
    assert not provider.configured


def test_create_provider_unknown():
    with pytest.raises(KeyError):
        create_provider("openai", cfg=DummySettings())


def test_registry_lookup():
    assert get_provider_config("GEMINI") is GEMINI_CONFIG
    assert resolve_model(GEMINI_CONFIG, "philip-chat").provider_model == "gemini-2.0-flash"
    # 未登记的名字按原样透传
    assert resolve_model(GEMINI_CONFIG, "gemini-2.5-pro").provider_model == "gemini-2.5-pro"
