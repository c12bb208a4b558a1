"""Summary: Tests for configuration loading.

Importance: Ensures defaults, .env, and environment overrides behave correctly.
Alternatives: Validate configuration manually during runtime.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from inboxrules.app import build_context, build_store
from inboxrules.config import EngineConfig, load_defaults, load_dotenv, parse_bool
from inboxrules.storage.base import MemoryRuleStore
from inboxrules.storage.json_store import JsonFileRuleStore
from inboxrules.storage.sqlite_store import SqliteRuleStore

DEFAULTS = """
{
  "store_backend": "json",
  "store_path": "data",
  "seed_default_rules": "true",
  "notifications_enabled": "false",
  "log_level": "info",
  "api_key": ""
}
""".strip()


def _write_defaults(tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    path = tmp_path / "config" / "defaults.json"
    path.write_text(DEFAULTS, encoding="utf-8")
    return path


def test_load_defaults_reads_json(tmp_path: Path) -> None:
    """Summary: Verify defaults are parsed from JSON.

    Importance: Confirms config file is the source of truth for variables.
    Alternatives: Hardcode defaults in the test.
    """

    defaults = load_defaults(_write_defaults(tmp_path))
    assert defaults["store_backend"] == "json"
    with pytest.raises(FileNotFoundError):
        load_defaults(tmp_path / "missing.json")


def test_load_dotenv_sets_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Ensure .env values populate environment variables.

    Importance: Validates local overrides without external tools.
    Alternatives: Assume OS environment is always set.
    """

    env_path = tmp_path / ".env"
    env_path.write_text("# local\nINBOXRULES_STORE_BACKEND=sqlite\n", encoding="utf-8")
    monkeypatch.delenv("INBOXRULES_STORE_BACKEND", raising=False)
    load_dotenv(env_path)
    assert os.getenv("INBOXRULES_STORE_BACKEND") == "sqlite"


def test_engine_config_uses_defaults_and_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Summary: Verify EngineConfig honors defaults and environment overrides.

    Importance: Confirms config file remains the baseline for variables.
    Alternatives: Inline defaults directly in the EngineConfig class.
    """

    _write_defaults(tmp_path)
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("INBOXRULES_"):
            monkeypatch.delenv(key)
    config = EngineConfig.from_env()
    assert config.store_backend == "json"
    assert config.seed_default_rules is True
    assert config.notifications_enabled is False
    assert config.log_level == "INFO"

    monkeypatch.setenv("INBOXRULES_STORE_BACKEND", "SQLITE")
    monkeypatch.setenv("INBOXRULES_API_KEY", "local-key")
    config = EngineConfig.from_env()
    assert config.store_backend == "sqlite"
    assert config.api_key == "local-key"

    monkeypatch.setenv("INBOXRULES_STORE_BACKEND", "redis")
    with pytest.raises(ValueError):
        EngineConfig.from_env()


def test_parse_bool() -> None:
    assert parse_bool("True")
    assert parse_bool(" yes ")
    assert not parse_bool("0")
    assert not parse_bool("")


def test_build_store_selects_backend(tmp_path: Path) -> None:
    """Summary: Verify the configured backend is built.

    Importance: Entry points share one construction path.
    Alternatives: Construct stores directly in each entry point.
    """

    base = dict(
        store_path=str(tmp_path / "store"),
        seed_default_rules=False,
        notifications_enabled=True,
        log_level="INFO",
        api_key="",
    )
    assert isinstance(build_store(EngineConfig(store_backend="memory", **base)), MemoryRuleStore)
    assert isinstance(build_store(EngineConfig(store_backend="json", **base)), JsonFileRuleStore)
    sqlite_config = EngineConfig(store_backend="sqlite", **base)
    assert isinstance(build_store(sqlite_config), SqliteRuleStore)
    assert (tmp_path / "store" / "inboxrules.db").exists()

    context = build_context(sqlite_config)
    assert context.engine.rules == []
    assert context.notifier is not None
