"""Summary: Storage port for rules and run statistics.

Importance: Keeps the engine storage-agnostic and testable without real persistent state.
Alternatives: Read and write a fixed settings file from inside the engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from inboxrules.rules import Rule
from inboxrules.statistics import RunStatistics


class RuleStore(ABC):
    """Summary: Abstract interface for persisting the rule collection.

    Importance: Lets hosts choose JSON files, SQLite, or memory without engine changes.
    Alternatives: Hardcode a single storage backend.
    """

    @abstractmethod
    def load_rules(self) -> list[Rule] | None:
        """Summary: Load the saved rule collection.

        Importance: Returning None means nothing has been saved yet.
        Alternatives: Return an empty list for both missing and empty collections.
        """

    @abstractmethod
    def save_rules(self, rules: list[Rule]) -> None:
        """Summary: Replace the saved rule collection."""

    @abstractmethod
    def load_statistics(self) -> RunStatistics | None:
        """Summary: Load saved statistics, or None when absent."""

    @abstractmethod
    def save_statistics(self, stats: RunStatistics) -> None:
        """Summary: Replace the saved statistics."""


class MemoryRuleStore(RuleStore):
    """Summary: Keeps rules and statistics in process memory.

    Importance: Default store for tests and throwaway engine instances.
    Alternatives: Use a temporary SQLite database.
    """

    def __init__(
        self, rules: list[Rule] | None = None, stats: RunStatistics | None = None
    ) -> None:
        self._rules = list(rules) if rules is not None else None
        self._stats = stats

    def load_rules(self) -> list[Rule] | None:
        return list(self._rules) if self._rules is not None else None

    def save_rules(self, rules: list[Rule]) -> None:
        self._rules = list(rules)

    def load_statistics(self) -> RunStatistics | None:
        return self._stats

    def save_statistics(self, stats: RunStatistics) -> None:
        self._stats = stats
