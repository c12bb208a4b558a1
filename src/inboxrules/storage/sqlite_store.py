"""Summary: SQLite storage implementation for InboxRules.

Importance: Provides a local-first persistence layer for rules and statistics.
Alternatives: Use an ORM or an external database immediately.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from inboxrules.codec import decode_rule, decode_statistics, encode_rule, encode_statistics
from inboxrules.rules import Rule
from inboxrules.statistics import RunStatistics
from inboxrules.storage.base import RuleStore


class SqliteRuleStore(RuleStore):
    """Summary: SQLite-backed storage for the rule collection.

    Importance: Enables local-first persistence with minimal dependencies.
    Alternatives: Use Postgres and SQLAlchemy from day one.
    """

    def __init__(self, db_path: str) -> None:
        """Summary: Initialize the storage with a database path.

        Importance: Allows configurable database location per environment.
        Alternatives: Hardcode a default path in the class.
        """

        self._db_path = Path(db_path)

    def initialize(self) -> None:
        """Summary: Create tables if they do not exist.

        Importance: Ensures the database is ready before the engine loads rules.
        Alternatives: Run migrations using a dedicated migration tool.
        """

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS rules (
                    id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    payload TEXT NOT NULL
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS rule_statistics (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    payload TEXT NOT NULL
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS store_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            connection.commit()

    def load_rules(self) -> list[Rule] | None:
        """Summary: Load rules in their saved order.

        Importance: Preserves tie order between rules of equal priority.
        Alternatives: Sort by priority in SQL and lose insertion order.
        """

        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute("SELECT value FROM store_meta WHERE key = 'rules_saved_at'")
            if cursor.fetchone() is None:
                return None
            cursor.execute("SELECT payload FROM rules ORDER BY position")
            rows = cursor.fetchall()
        return [decode_rule(json.loads(row[0])) for row in rows]

    def save_rules(self, rules: list[Rule]) -> None:
        """Summary: Replace the stored rule collection in one transaction.

        Importance: A failed save never leaves a partially written collection.
        Alternatives: Upsert rules individually.
        """

        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute("DELETE FROM rules")
            cursor.executemany(
                "INSERT INTO rules (id, position, name, payload) VALUES (?, ?, ?, ?)",
                [
                    (rule.id, position, rule.name, json.dumps(encode_rule(rule)))
                    for position, rule in enumerate(rules)
                ],
            )
            cursor.execute(
                "INSERT OR REPLACE INTO store_meta (key, value) VALUES ('rules_saved_at', ?)",
                (datetime.now().isoformat(),),
            )
            connection.commit()

    def load_statistics(self) -> RunStatistics | None:
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute("SELECT payload FROM rule_statistics WHERE id = 1")
            row = cursor.fetchone()
        if row is None:
            return None
        return decode_statistics(json.loads(row[0]))

    def save_statistics(self, stats: RunStatistics) -> None:
        with self._connection() as connection:
            cursor = connection.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO rule_statistics (id, payload) VALUES (1, ?)",
                (json.dumps(encode_statistics(stats)),),
            )
            connection.commit()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Summary: Context manager for SQLite connections.

        Importance: Ensures connections are closed cleanly after use.
        Alternatives: Keep a single long-lived connection.
        """

        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
        finally:
            connection.close()
