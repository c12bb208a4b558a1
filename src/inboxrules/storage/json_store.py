"""Summary: JSON file storage for rules and statistics.

Importance: Human-readable persistence that doubles as an export format.
Alternatives: Store everything in SQLite.
"""

from __future__ import annotations

import json
from pathlib import Path

from inboxrules.codec import decode_rules, decode_statistics, encode_rules, encode_statistics
from inboxrules.rules import Rule
from inboxrules.statistics import RunStatistics
from inboxrules.storage.base import RuleStore


class JsonFileRuleStore(RuleStore):
    """Summary: Persists rules and statistics as two JSON files in a directory.

    Importance: Keeps user rules editable by hand.
    Alternatives: Use a single combined JSON document.
    """

    def __init__(self, directory: str) -> None:
        self._directory = Path(directory)
        self._rules_path = self._directory / "rules.json"
        self._stats_path = self._directory / "statistics.json"

    def load_rules(self) -> list[Rule] | None:
        if not self._rules_path.exists():
            return None
        return decode_rules(self._rules_path.read_text(encoding="utf-8"))

    def save_rules(self, rules: list[Rule]) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        self._rules_path.write_text(encode_rules(rules), encoding="utf-8")

    def load_statistics(self) -> RunStatistics | None:
        if not self._stats_path.exists():
            return None
        return decode_statistics(json.loads(self._stats_path.read_text(encoding="utf-8")))

    def save_statistics(self, stats: RunStatistics) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        self._stats_path.write_text(
            json.dumps(encode_statistics(stats), indent=2), encoding="utf-8"
        )
