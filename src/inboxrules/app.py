"""Summary: Application factory wiring the rule engine and its collaborators.

Importance: Centralizes dependency creation for CLI and API layers.
Alternatives: Instantiate the engine manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from inboxrules.collaborators import LoggingNotifier, Notifier, RecordingMailStore
from inboxrules.config import EngineConfig
from inboxrules.engine import RuleEngine
from inboxrules.storage.base import MemoryRuleStore, RuleStore
from inboxrules.storage.json_store import JsonFileRuleStore
from inboxrules.storage.sqlite_store import SqliteRuleStore


@dataclass(frozen=True)
class EngineContext:
    """Summary: Bundle of the engine and the collaborators it was built with.

    Importance: Lets entry points inspect queued side effects after a run.
    Alternatives: Use a dependency injection container.
    """

    engine: RuleEngine
    mail_store: RecordingMailStore
    notifier: Notifier | None
    config: EngineConfig


def build_store(config: EngineConfig) -> RuleStore:
    """Summary: Build the configured rule store.

    Importance: Keeps backend selection out of the engine.
    Alternatives: Always use the JSON file store.
    """

    if config.store_backend == "memory":
        return MemoryRuleStore()
    if config.store_backend == "sqlite":
        path = Path(config.store_path)
        if path.suffix != ".db":
            path = path / "inboxrules.db"
        store = SqliteRuleStore(str(path))
        store.initialize()
        return store
    return JsonFileRuleStore(config.store_path)


def build_context(config: EngineConfig) -> EngineContext:
    """Summary: Build the engine with its store, mail store, and notifier.

    Importance: Provides a single construction path for the application.
    Alternatives: Construct dependencies separately per request.
    """

    mail_store = RecordingMailStore()
    notifier = LoggingNotifier() if config.notifications_enabled else None
    engine = RuleEngine(
        store=build_store(config),
        mail_store=mail_store,
        notifier=notifier,
        seed_default_rules=config.seed_default_rules,
    )
    return EngineContext(engine=engine, mail_store=mail_store, notifier=notifier, config=config)
