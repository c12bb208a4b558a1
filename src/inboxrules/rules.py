"""Summary: Rule definition and the rule matcher.

Importance: A rule binds a list of conditions to a list of actions.
Alternatives: Express rules as scripts evaluated by an embedded interpreter.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from inboxrules.actions import Action
from inboxrules.conditions import Condition, evaluate
from inboxrules.models import MessageRecord

DEFAULT_PRIORITY = 50


class MatchMode(str, Enum):
    ALL = "all"
    ANY = "any"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def new_rule_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Rule:
    """Summary: Represents a user-authored automation rule.

    Importance: Unit of ordering, enablement, and execution accounting.
    Alternatives: Flatten conditions and actions into separate tables keyed by rule.
    """

    name: str
    conditions: tuple[Condition, ...]
    actions: tuple[Action, ...]
    id: str = field(default_factory=new_rule_id)
    enabled: bool = True
    priority: int = DEFAULT_PRIORITY
    match_mode: MatchMode = MatchMode.ALL
    created_at: datetime = field(default_factory=datetime.now)
    last_modified: datetime = field(default_factory=datetime.now)
    execution_count: int = 0

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and bool(self.conditions) and bool(self.actions)

    @property
    def summary(self) -> str:
        conditions = _plural(len(self.conditions), "condition")
        actions = _plural(len(self.actions), "action")
        return f"{conditions}, {actions}"


def matches(rule: Rule, record: MessageRecord, now: datetime | None = None) -> bool:
    """Summary: Decide whether a rule applies to a message record.

    Importance: Disabled rules and rules without conditions never match.
    Alternatives: Treat an empty condition list as a catch-all rule.
    """

    if not rule.enabled:
        return False
    if not rule.conditions:
        return False
    if rule.match_mode == MatchMode.ANY:
        return any(evaluate(condition, record, now) for condition in rule.conditions)
    return all(evaluate(condition, record, now) for condition in rule.conditions)


def sort_by_priority(rules: list[Rule]) -> list[Rule]:
    return sorted(rules, key=lambda rule: rule.priority, reverse=True)


def _plural(count: int, noun: str) -> str:
    return f"1 {noun}" if count == 1 else f"{count} {noun}s"
