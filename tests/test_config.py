from pathlib import Path

import pytest

from rank_rent_factory.config import HAIKU_MODEL, SONNET_MODEL, Settings
from rank_rent_factory.errors import ConfigurationError


def test_from_env_reads_variables(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setenv("RANK_RENT_SYNTHESIS_MODEL", "claude-custom")
    monkeypatch.setenv("RANK_RENT_SYNTHESIS_MAX_TOKENS", "8000")
    monkeypatch.setenv("RANK_RENT_PLANS_DIR", "/tmp/plans")
    monkeypatch.delenv("RANK_RENT_RECON_MODEL", raising=False)

    settings = Settings.from_env()

    assert settings.api_key == "sk-test"
    assert settings.recon_model == HAIKU_MODEL
    assert settings.synthesis_model == "claude-custom"
    assert settings.synthesis_max_tokens == 8000
    assert settings.plans_dir == Path("/tmp/plans")


def test_defaults(monkeypatch):
    monkeypatch.delenv("RANK_RENT_SYNTHESIS_MODEL", raising=False)
    monkeypatch.delenv("RANK_RENT_SYNTHESIS_MAX_TOKENS", raising=False)
    settings = Settings.from_env()
    assert settings.synthesis_model == SONNET_MODEL
    assert settings.synthesis_max_tokens == 16000


@pytest.mark.parametrize("api_key", [None, "", "   "])
def test_require_api_key_raises(api_key):
    with pytest.raises(ConfigurationError):
        Settings(api_key=api_key).require_api_key()


def test_require_api_key_returns_key():
    assert Settings(api_key="sk-test").require_api_key() == "sk-test"
