"""Summary: Execution results and cumulative rule statistics.

Importance: Gives users visibility into what their rules did and how reliably.
Alternatives: Emit metrics to an external monitoring system only.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True)
class ExecutionResult:
    """Summary: Outcome of one rule during one engine run.

    Importance: The only user-facing error surface of a run.
    Alternatives: Raise the first action error to the caller.
    """

    rule_id: str
    rule_name: str
    matched: bool
    matched_count: int
    actions_executed: int
    errors: tuple[str, ...]
    duration: float

    @property
    def is_success(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class RunStatistics:
    """Summary: Engine-wide counters accumulated across every run.

    Importance: Powers the statistics view and persists between sessions.
    Alternatives: Recompute statistics from a stored execution log.
    """

    total_rules: int = 0
    enabled_rules: int = 0
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    last_execution_at: datetime | None = None
    avg_execution_time: float = 0.0

    @property
    def success_rate(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.successful_executions / self.total_executions


class StatisticsRecorder:
    """Summary: Single writer for the engine's run statistics.

    Importance: Keeps rule counts and historical timing consistent.
    Alternatives: Update statistics fields directly from the engine.
    """

    def __init__(self, initial: RunStatistics | None = None) -> None:
        self._stats = initial or RunStatistics()

    @property
    def snapshot(self) -> RunStatistics:
        return self._stats

    def refresh_rule_counts(self, total: int, enabled: int) -> RunStatistics:
        self._stats = replace(self._stats, total_rules=total, enabled_rules=enabled)
        return self._stats

    def record_run(self, results: list[ExecutionResult], finished_at: datetime) -> RunStatistics:
        """Summary: Fold one run's results into the cumulative statistics.

        Importance: The average covers every per-rule duration ever recorded.
        Alternatives: Keep a moving window of recent durations.
        """

        if not results:
            return self._stats
        previous = self._stats
        successes = sum(1 for result in results if result.is_success)
        total = previous.total_executions + len(results)
        duration_sum = previous.avg_execution_time * previous.total_executions
        duration_sum += sum(result.duration for result in results)
        self._stats = replace(
            previous,
            total_executions=total,
            successful_executions=previous.successful_executions + successes,
            failed_executions=previous.failed_executions + len(results) - successes,
            last_execution_at=finished_at,
            avg_execution_time=duration_sum / total,
        )
        return self._stats
