"""Summary: Rule engine orchestrating matching, actions, and statistics.

Importance: Runs the ordered rule pipeline over a batch of message records.
Alternatives: Evaluate each rule independently and merge the results afterwards.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable

from inboxrules.actions import ActionExecutor
from inboxrules.codec import decode_rules, encode_rules
from inboxrules.collaborators import MailStoreMutator, Notifier, SideEffectRequest
from inboxrules.defaults import default_rules
from inboxrules.models import MessageRecord
from inboxrules.rules import Rule, matches, sort_by_priority
from inboxrules.statistics import ExecutionResult, RunStatistics, StatisticsRecorder
from inboxrules.storage.base import MemoryRuleStore, RuleStore


logger = logging.getLogger(__name__)

REORDER_BASE_PRIORITY = 100


@dataclass(frozen=True)
class RunReport:
    """Summary: Everything a single engine run produced.

    Importance: Callers get the updated batch, per-rule results, and pending side effects.
    Alternatives: Return only the updated batch and keep results on the engine.
    """

    records: list[MessageRecord]
    results: list[ExecutionResult] = field(default_factory=list)
    side_effects: list[SideEffectRequest] = field(default_factory=list)


class RuleEngine:
    """Summary: Owns the rule collection and applies it to message batches.

    Importance: Central automation component shared by the CLI and API.
    Alternatives: Use a process-wide singleton with ambient settings storage.
    """

    def __init__(
        self,
        store: RuleStore | None = None,
        mail_store: MailStoreMutator | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = datetime.now,
        seed_default_rules: bool = True,
    ) -> None:
        """Summary: Build an engine and load its rules and statistics.

        Importance: Storage failures fall back to defaults instead of failing startup.
        Alternatives: Require callers to load rules explicitly.
        """

        self._store = store or MemoryRuleStore()
        self._mail_store = mail_store
        self._executor = ActionExecutor(notifier)
        self._clock = clock
        self._seed_default_rules = seed_default_rules
        self._lock = threading.RLock()
        self._rules: list[Rule] = []
        self._stats = StatisticsRecorder(self._load_statistics())
        self.last_results: list[ExecutionResult] = []
        self._load_rules()

    @property
    def rules(self) -> list[Rule]:
        with self._lock:
            return list(self._rules)

    @property
    def statistics(self) -> RunStatistics:
        return self._stats.snapshot

    def get_rule(self, rule_id: str) -> Rule | None:
        with self._lock:
            return next((rule for rule in self._rules if rule.id == rule_id), None)

    def add_rule(self, rule: Rule) -> Rule:
        """Summary: Add a rule and re-sort the collection by priority.

        Importance: New rules take effect on the next run.
        Alternatives: Append without sorting and sort lazily at run time.
        """

        with self._lock:
            if self._index_of(rule.id) is not None:
                raise ValueError(f"Rule id already exists: {rule.id}")
            added = replace(rule, last_modified=self._clock())
            self._rules.append(added)
            self._after_change()
        logger.info("Added rule %s (%s).", added.name, added.id)
        return added

    def update_rule(self, rule: Rule) -> bool:
        """Summary: Replace an existing rule with an edited copy.

        Importance: Keeps the stored execution count and creation time intact.
        Alternatives: Delete and re-add the rule, resetting its history.
        """

        with self._lock:
            index = self._index_of(rule.id)
            if index is None:
                return False
            current = self._rules[index]
            self._rules[index] = replace(
                rule,
                created_at=current.created_at,
                execution_count=current.execution_count,
                last_modified=self._clock(),
            )
            self._after_change()
        logger.info("Updated rule %s (%s).", rule.name, rule.id)
        return True

    def delete_rule(self, rule_id: str) -> bool:
        with self._lock:
            index = self._index_of(rule_id)
            if index is None:
                return False
            removed = self._rules.pop(index)
            self._after_change()
        logger.info("Deleted rule %s (%s).", removed.name, removed.id)
        return True

    def toggle_rule(self, rule_id: str) -> bool:
        with self._lock:
            index = self._index_of(rule_id)
            if index is None:
                return False
            current = self._rules[index]
            self._rules[index] = replace(
                current, enabled=not current.enabled, last_modified=self._clock()
            )
            self._after_change()
        return True

    def reorder_rules(self, ordered_ids: list[str]) -> bool:
        """Summary: Apply an explicit user ordering to the rules.

        Importance: Reassigns priorities so no two rules share a priority afterwards.
        Alternatives: Store a separate position column and keep priorities untouched.
        """

        with self._lock:
            by_id = {rule.id: rule for rule in self._rules}
            if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
                return False
            self._rules = [
                replace(by_id[rule_id], priority=REORDER_BASE_PRIORITY - index)
                for index, rule_id in enumerate(ordered_ids)
            ]
            self._after_change()
        return True

    def move_rule(self, rule_id: str, destination: int) -> bool:
        with self._lock:
            ordered = [rule.id for rule in self._rules]
            if rule_id not in ordered:
                return False
            ordered.remove(rule_id)
            destination = min(max(destination, 0), len(ordered))
            ordered.insert(destination, rule_id)
            return self.reorder_rules(ordered)

    def run(self, records: list[MessageRecord]) -> RunReport:
        """Summary: Apply every enabled rule, in priority order, to a batch.

        Importance: Each rule sees the changes made by the rules before it.
        Alternatives: Evaluate all rules against the original batch in parallel.
        """

        with self._lock:
            batch = list(records)
            enabled = [rule for rule in self._rules if rule.enabled]
            if not enabled:
                self.last_results = []
                return RunReport(records=batch)

            started = time.perf_counter()
            now = self._clock()
            results: list[ExecutionResult] = []
            side_effects: list[SideEffectRequest] = []
            for rule in enabled:
                result = self._run_rule(rule, batch, now, side_effects)
                results.append(result)
                if result.matched:
                    self._increment_execution_count(rule.id)

            self._stats.record_run(results, finished_at=self._clock())
            self.last_results = results
            self._persist_rules()
            self._persist_statistics()
            logger.info(
                "Applied %s rules to %s messages in %.2fs.",
                len(enabled),
                len(batch),
                time.perf_counter() - started,
            )
            return RunReport(records=batch, results=results, side_effects=side_effects)

    def test_rule(self, rule: Rule, records: list[MessageRecord]) -> tuple[int, int]:
        """Summary: Count how many records a rule would match.

        Importance: Previews a rule without running actions or touching statistics.
        Alternatives: Run the rule in a sandboxed copy of the engine.
        """

        now = self._clock()
        match_count = sum(1 for record in records if matches(rule, record, now))
        return match_count, len(records)

    def export_rules(self) -> str:
        with self._lock:
            return encode_rules(self._rules)

    def import_rules(self, text: str) -> bool:
        """Summary: Replace all rules with the contents of an export.

        Importance: A malformed import leaves the current rules untouched.
        Alternatives: Merge imported rules into the existing collection.
        """

        try:
            imported = decode_rules(text)
        except (TypeError, ValueError) as exc:
            logger.warning("Rule import rejected: %s", exc)
            return False
        with self._lock:
            self._rules = imported
            self._after_change()
        logger.info("Imported %s rules.", len(imported))
        return True

    def _run_rule(
        self,
        rule: Rule,
        batch: list[MessageRecord],
        now: datetime,
        side_effects: list[SideEffectRequest],
    ) -> ExecutionResult:
        rule_started = time.perf_counter()
        matched_count = 0
        actions_executed = 0
        errors: list[str] = []
        for index, record in enumerate(batch):
            if not matches(rule, record, now):
                continue
            matched_count += 1
            current = record
            for action in rule.actions:
                try:
                    outcome = self._executor.apply(action, current, rule_id=rule.id)
                    if outcome.side_effect is not None:
                        self._dispatch(outcome.side_effect)
                        side_effects.append(outcome.side_effect)
                except Exception as exc:
                    errors.append(f"Action '{action.display_name}' failed: {exc}")
                    logger.warning(
                        "Rule %s action %s failed on message %s: %s",
                        rule.name,
                        action.display_name,
                        record.id,
                        exc,
                    )
                    continue
                current = outcome.record
                actions_executed += 1
                if outcome.stop:
                    break
            batch[index] = current
        return ExecutionResult(
            rule_id=rule.id,
            rule_name=rule.name,
            matched=matched_count > 0,
            matched_count=matched_count,
            actions_executed=actions_executed,
            errors=tuple(errors),
            duration=time.perf_counter() - rule_started,
        )

    def _dispatch(self, request: SideEffectRequest) -> None:
        if self._mail_store is not None and request.targets_mail_store:
            self._mail_store.submit(request)

    def _increment_execution_count(self, rule_id: str) -> None:
        index = self._index_of(rule_id)
        if index is not None:
            current = self._rules[index]
            self._rules[index] = replace(current, execution_count=current.execution_count + 1)

    def _index_of(self, rule_id: str) -> int | None:
        return next((i for i, rule in enumerate(self._rules) if rule.id == rule_id), None)

    def _after_change(self) -> None:
        self._rules = sort_by_priority(self._rules)
        self._refresh_counts()
        self._persist_rules()
        self._persist_statistics()

    def _refresh_counts(self) -> None:
        self._stats.refresh_rule_counts(
            total=len(self._rules),
            enabled=sum(1 for rule in self._rules if rule.enabled),
        )

    def _load_rules(self) -> None:
        try:
            loaded = self._store.load_rules()
        except Exception as exc:
            logger.warning("Failed to load rules, using defaults: %s", exc)
            self._rules = default_rules() if self._seed_default_rules else []
            self._refresh_counts()
            return
        if loaded is None:
            self._rules = default_rules() if self._seed_default_rules else []
            self._after_change()
            return
        self._rules = sort_by_priority(loaded)
        self._refresh_counts()

    def _load_statistics(self) -> RunStatistics | None:
        try:
            return self._store.load_statistics()
        except Exception as exc:
            logger.warning("Failed to load rule statistics: %s", exc)
            return None

    def _persist_rules(self) -> None:
        try:
            self._store.save_rules(self._rules)
        except Exception as exc:
            logger.warning("Failed to save rules: %s", exc)

    def _persist_statistics(self) -> None:
        try:
            self._store.save_statistics(self._stats.snapshot)
        except Exception as exc:
            logger.warning("Failed to save rule statistics: %s", exc)
