"""Summary: Rule action variants and the action executor.

Importance: Actions are the effect half of every rule.
Alternatives: Dispatch actions through a registry of callables keyed by name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Union

from inboxrules.collaborators import Notification, Notifier, SideEffectRequest
from inboxrules.models import EmailCategory, MessageRecord


logger = logging.getLogger(__name__)

MIN_PRIORITY = 1
MAX_PRIORITY = 10


@dataclass(frozen=True)
class Categorize:
    category: EmailCategory

    @property
    def display_name(self) -> str:
        return f"Categorize as {self.category.value}"


@dataclass(frozen=True)
class SetPriority:
    value: int

    @property
    def display_name(self) -> str:
        return f"Set priority to {self.value}"


@dataclass(frozen=True)
class Delete:
    @property
    def display_name(self) -> str:
        return "Delete"


@dataclass(frozen=True)
class Archive:
    @property
    def display_name(self) -> str:
        return "Archive"


@dataclass(frozen=True)
class MarkRead:
    @property
    def display_name(self) -> str:
        return "Mark as read"


@dataclass(frozen=True)
class MarkUnread:
    @property
    def display_name(self) -> str:
        return "Mark as unread"


@dataclass(frozen=True)
class MoveTo:
    mailbox: str

    @property
    def display_name(self) -> str:
        return f"Move to '{self.mailbox}'"


@dataclass(frozen=True)
class Snooze:
    until: datetime

    @property
    def display_name(self) -> str:
        return f"Snooze until {self.until:%Y-%m-%d %H:%M}"


@dataclass(frozen=True)
class AddTag:
    tag: str

    @property
    def display_name(self) -> str:
        return f"Add tag '{self.tag}'"


@dataclass(frozen=True)
class Notify:
    message: str

    @property
    def display_name(self) -> str:
        return f"Notify: {self.message}"


@dataclass(frozen=True)
class StopProcessing:
    """Summary: Stops the remaining actions of the current rule for one message.

    Importance: Lets a rule guard its later actions behind an early exit.
    Alternatives: Split the rule into two rules with exclusive conditions.
    """

    @property
    def display_name(self) -> str:
        return "Stop processing rules"


Action = Union[
    Categorize,
    SetPriority,
    Delete,
    Archive,
    MarkRead,
    MarkUnread,
    MoveTo,
    Snooze,
    AddTag,
    Notify,
    StopProcessing,
]


def is_destructive(action: Action) -> bool:
    return isinstance(action, Delete)


@dataclass(frozen=True)
class ActionOutcome:
    """Summary: Result of applying one action to one record.

    Importance: Carries the updated record, the stop signal, and any side effect.
    Alternatives: Mutate the record in place and return only a flag.
    """

    record: MessageRecord
    stop: bool = False
    side_effect: SideEffectRequest | None = None


class ActionExecutor:
    """Summary: Applies rule actions to message records.

    Importance: Owns in-memory field updates and emits requests for everything else.
    Alternatives: Let each action variant implement its own apply method.
    """

    def __init__(self, notifier: Notifier | None = None) -> None:
        self._notifier = notifier

    def apply(self, action: Action, record: MessageRecord, rule_id: str | None = None) -> ActionOutcome:
        """Summary: Apply a single action and report its outcome.

        Importance: The engine chains these calls for every matched record.
        Alternatives: Batch all actions of a rule into a single update.
        """

        if isinstance(action, Categorize):
            return ActionOutcome(record=replace(record, category=action.category))
        if isinstance(action, SetPriority):
            clamped = min(max(action.value, MIN_PRIORITY), MAX_PRIORITY)
            return ActionOutcome(record=replace(record, priority=clamped))
        if isinstance(action, Delete):
            return ActionOutcome(record=record, side_effect=_request("delete", record, rule_id))
        if isinstance(action, Archive):
            return ActionOutcome(record=record, side_effect=_request("archive", record, rule_id))
        if isinstance(action, MarkRead):
            return ActionOutcome(
                record=replace(record, is_read=True),
                side_effect=_request("mark_read", record, rule_id),
            )
        if isinstance(action, MarkUnread):
            return ActionOutcome(
                record=replace(record, is_read=False),
                side_effect=_request("mark_unread", record, rule_id),
            )
        if isinstance(action, MoveTo):
            return ActionOutcome(
                record=record,
                side_effect=_request("move", record, rule_id, mailbox=action.mailbox),
            )
        if isinstance(action, Snooze):
            return ActionOutcome(record=replace(record, is_snoozed=True, snooze_until=action.until))
        if isinstance(action, AddTag):
            return ActionOutcome(
                record=record, side_effect=_request("add_tag", record, rule_id, tag=action.tag)
            )
        if isinstance(action, Notify):
            notification = Notification(title=f"Rule: {record.subject}", body=action.message)
            self._deliver(notification)
            return ActionOutcome(
                record=record,
                side_effect=_request(
                    "notify", record, rule_id, title=notification.title, body=notification.body
                ),
            )
        if isinstance(action, StopProcessing):
            return ActionOutcome(record=record, stop=True)
        raise TypeError(f"Unsupported action: {action!r}")

    def _deliver(self, notification: Notification) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(notification)
        except Exception as exc:
            logger.warning("Notification failed: %s", exc)


def _request(kind: str, record: MessageRecord, rule_id: str | None, **fields: str) -> SideEffectRequest:
    return SideEffectRequest(
        kind=kind,
        message_id=record.id,
        reference_id=record.reference_id,
        rule_id=rule_id,
        **fields,
    )
