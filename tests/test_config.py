"""Tests for settings loading."""

import tempfile
from pathlib import Path

import pytest

from agentreg.config import Settings, load_settings, settings_to_dict
from agentreg.errors import ConfigError


def _write_config(home: Path, text: str) -> Path:
    path = home / "config.yaml"
    path.write_text(text)
    return path


def test_defaults_without_config_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = load_settings(home=tmpdir, env={})

        assert settings.home == Path(tmpdir)
        assert settings.storage_key == "unified_agent_data"
        assert settings.cache_ttl_seconds == 300.0
        assert settings.default_page_size == 12
        assert settings.enable_persistence
        assert not settings.invalidate_on_write
        assert settings.ledger_gateway == "simulated"


def test_yaml_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        _write_config(
            home,
            "store:\n"
            "  storage_key: team_agents\n"
            "  seed_on_empty: false\n"
            "query:\n"
            "  cache_ttl_seconds: 60\n"
            "  invalidate_on_write: true\n"
            "ledger:\n"
            "  gateway: deterministic\n",
        )
        settings = load_settings(home=home, env={})

        assert settings.storage_key == "team_agents"
        assert not settings.seed_on_empty
        assert settings.cache_ttl_seconds == 60
        assert settings.invalidate_on_write
        assert settings.ledger_gateway == "deterministic"
        assert settings.config_path == home / "config.yaml"


def test_environment_overrides_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        _write_config(home, "query:\n  cache_ttl_seconds: 60\n  default_page_size: 5\n")
        settings = load_settings(
            home=home,
            env={"AGENTREG_CACHE_TTL": "2.5", "AGENTREG_STORAGE_KEY": "from_env"},
        )

        assert settings.cache_ttl_seconds == 2.5
        assert settings.default_page_size == 5
        assert settings.storage_key == "from_env"


def test_home_from_environment():
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = load_settings(env={"AGENTREG_HOME": tmpdir})
        assert settings.home == Path(tmpdir)


def test_explicit_config_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "elsewhere.yaml"
        path.write_text("query:\n  default_page_size: 3\n")
        settings = load_settings(path, home=tmpdir, env={})
        assert settings.default_page_size == 3


def test_empty_config_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        _write_config(Path(tmpdir), "")
        assert load_settings(home=tmpdir, env={}).default_page_size == 12


def test_invalid_config_files():
    cases = [
        "store: [unclosed\n",
        "- just\n- a list\n",
        "store:\n  colour: blue\n",
        "query: 5\n",
        "query:\n  default_page_size: 0\n",
        "ledger:\n  gateway: mainnet\n",
    ]
    for text in cases:
        with tempfile.TemporaryDirectory() as tmpdir:
            _write_config(Path(tmpdir), text)
            with pytest.raises(ConfigError):
                load_settings(home=tmpdir, env={})


def test_invalid_environment_values():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ConfigError):
            load_settings(home=tmpdir, env={"AGENTREG_PAGE_SIZE": "many"})
        with pytest.raises(ConfigError):
            load_settings(home=tmpdir, env={"AGENTREG_CACHE_TTL": "-1"})


def test_settings_validation():
    with pytest.raises(ConfigError):
        Settings(storage_key="")
    with pytest.raises(ConfigError):
        Settings(ledger_gateway="mainnet")


def test_settings_to_dict():
    with tempfile.TemporaryDirectory() as tmpdir:
        data = settings_to_dict(Settings(home=tmpdir))
        assert data["home"] == str(Path(tmpdir))
        assert data["ledger_gateway"] == "simulated"
