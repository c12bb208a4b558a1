"""Summary: Tests for rule storage backends and engine persistence.

Importance: Ensures rules and statistics persist and that storage failures stay contained.
Alternatives: Rely on manual testing for storage operations.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from inboxrules.actions import MarkRead
from inboxrules.conditions import IsUnread
from inboxrules.engine import RuleEngine
from inboxrules.models import MessageRecord
from inboxrules.rules import Rule
from inboxrules.statistics import RunStatistics
from inboxrules.storage.base import MemoryRuleStore, RuleStore
from inboxrules.storage.json_store import JsonFileRuleStore
from inboxrules.storage.sqlite_store import SqliteRuleStore

NOW = datetime(2026, 3, 10, 12, 0)


class BrokenStore(RuleStore):
    def load_rules(self) -> list[Rule] | None:
        raise OSError("disk unavailable")

    def save_rules(self, rules: list[Rule]) -> None:
        raise OSError("disk unavailable")

    def load_statistics(self) -> RunStatistics | None:
        raise OSError("disk unavailable")

    def save_statistics(self, stats: RunStatistics) -> None:
        raise OSError("disk unavailable")


def _message() -> MessageRecord:
    return MessageRecord(
        id="m-1",
        reference_id="ref-1",
        sender="Sender",
        sender_email="sender@example.com",
        subject="Hello",
        received_at=NOW - timedelta(hours=2),
    )


def _sqlite_store(tmp_path: Path) -> SqliteRuleStore:
    store = SqliteRuleStore(str(tmp_path / "rules.db"))
    store.initialize()
    return store


@pytest.mark.parametrize("factory", [_sqlite_store, lambda tmp: JsonFileRuleStore(str(tmp / "rules"))])
def test_store_persists_rules_in_order(tmp_path: Path, factory) -> None:
    """Summary: Verify rules and statistics reload in saved order.

    Importance: Tie order between equal priorities must survive restarts.
    Alternatives: Re-sort rules by name on load.
    """

    store = factory(tmp_path)
    assert store.load_rules() is None
    assert store.load_statistics() is None
    rules = [
        Rule(name="second", conditions=(IsUnread(),), actions=(MarkRead(),), priority=50),
        Rule(name="first", conditions=(IsUnread(),), actions=(), priority=50),
    ]
    store.save_rules(rules)
    stats = RunStatistics(total_rules=2, enabled_rules=2, total_executions=5, avg_execution_time=0.1)
    store.save_statistics(stats)
    assert store.load_rules() == rules
    assert store.load_statistics() == stats
    store.save_rules([])
    assert store.load_rules() == []


def test_engine_seeds_defaults_into_empty_store(tmp_path: Path) -> None:
    """Summary: Verify a fresh store receives the default rule pack.

    Importance: New users start with useful automation.
    Alternatives: Start with no rules.
    """

    store = _sqlite_store(tmp_path)
    engine = RuleEngine(store=store, clock=lambda: NOW)
    assert [rule.priority for rule in engine.rules] == [95, 90, 80]
    assert [rule.name for rule in store.load_rules()] == [rule.name for rule in engine.rules]
    assert engine.statistics.total_rules == 3


def test_engine_restores_saved_state(tmp_path: Path) -> None:
    """Summary: Verify a second engine sees the first engine's rules and statistics.

    Importance: Execution counts and statistics are cumulative across sessions.
    Alternatives: Keep statistics in memory only.
    """

    directory = str(tmp_path / "rules")
    first = RuleEngine(store=JsonFileRuleStore(directory), clock=lambda: NOW, seed_default_rules=False)
    rule = first.add_rule(Rule(name="Read", conditions=(IsUnread(),), actions=(MarkRead(),)))
    first.run([_message()])

    second = RuleEngine(store=JsonFileRuleStore(directory), clock=lambda: NOW)
    assert [saved.id for saved in second.rules] == [rule.id]
    assert second.get_rule(rule.id).execution_count == 1
    assert second.statistics.total_executions == 1
    assert second.statistics.last_execution_at == NOW


def test_engine_survives_broken_store() -> None:
    """Summary: Verify load and save failures fall back without raising.

    Importance: Losing persistence is better than crashing mid-automation.
    Alternatives: Fail engine construction when storage is unavailable.
    """

    engine = RuleEngine(store=BrokenStore(), clock=lambda: NOW)
    assert len(engine.rules) == 3
    assert engine.statistics == RunStatistics(total_rules=3, enabled_rules=3)
    rule = engine.add_rule(Rule(name="Read", conditions=(IsUnread(),), actions=(MarkRead(),)))
    report = engine.run([_message()])
    assert report.records[0].is_read
    assert engine.get_rule(rule.id).execution_count == 1


def test_engine_falls_back_to_empty_without_seeding() -> None:
    """Summary: Verify seeding can be disabled.

    Importance: Hosts that manage their own rules want a clean slate.
    Alternatives: Always seed defaults.
    """

    engine = RuleEngine(store=BrokenStore(), seed_default_rules=False)
    assert engine.rules == []
    assert RuleEngine(store=MemoryRuleStore(rules=[])).rules == []


def test_duplicate_import_leaves_sqlite_store_intact(tmp_path: Path) -> None:
    """Summary: Verify a duplicate-id import never reaches the database.

    Importance: A rejected save would silently drop every later rule edit.
    Alternatives: Let the UNIQUE constraint surface as a logged warning.
    """

    store = _sqlite_store(tmp_path)
    engine = RuleEngine(store=store, clock=lambda: NOW, seed_default_rules=False)
    kept = engine.add_rule(Rule(name="Kept", conditions=(IsUnread(),), actions=(MarkRead(),)))
    duplicate = (
        '[{"id": "dup", "name": "One", "conditions": [{"type": "isUnread"}]},'
        ' {"id": "dup", "name": "Two", "conditions": [{"type": "isRead"}]}]'
    )
    assert not engine.import_rules(duplicate)
    assert [rule.id for rule in store.load_rules()] == [kept.id]
