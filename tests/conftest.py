"""Shared test fixtures for pytest."""

import json

import pytest

import clawprep.config
from clawprep.config import Settings
from clawprep.logging import configure_logging

ENV_VARS = (
    "TEST_CONFIG_DIR",
    "OPENCLAW_CONFIG_FILE",
    "OLLAMA_BASE_URL",
    "OLLAMA_API_KEY",
    "OLLAMA_MODEL",
    "OLLAMA_CONTEXT_WINDOW",
    "CLAWPREP_LOG_LEVEL",
    "CLAWPREP_LOG_JSON",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Start every test without startup variables and with fresh settings."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clawprep.config.get_settings.cache_clear()
    configure_logging(level="DEBUG")
    yield
    clawprep.config.get_settings.cache_clear()


@pytest.fixture
def config_dir(tmp_path):
    """Config directory that does not exist yet."""
    return tmp_path / "openclaw"


@pytest.fixture
def make_settings(config_dir):
    """Build settings pointing at the temporary config directory."""

    def _make(**overrides) -> Settings:
        overrides.setdefault("config_dir", config_dir)
        return Settings(**overrides)

    return _make


@pytest.fixture
def ollama_settings(make_settings):
    """Settings with a fully configured Ollama provider."""
    return make_settings(
        ollama_base_url="http://172.17.0.1:11434/v1",
        ollama_api_key="ollama-local",
        ollama_model="qwen2.5-coder:32b",
    )


@pytest.fixture
def write_config(config_dir):
    """Write a pre-existing configuration document."""

    def _write(document) -> None:
        config_dir.mkdir(parents=True, exist_ok=True)
        text = document if isinstance(document, str) else json.dumps(document, indent=2)
        (config_dir / "openclaw.json").write_text(text, encoding="utf-8")

    return _write


@pytest.fixture
def read_config(config_dir):
    """Read the persisted configuration document."""

    def _read() -> dict:
        return json.loads((config_dir / "openclaw.json").read_text(encoding="utf-8"))

    return _read
