"""Summary: Rule condition variants and the condition evaluator.

Importance: Conditions are the predicate half of every rule.
Alternatives: Store conditions as loosely typed dicts and interpret them at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from inboxrules.models import EmailCategory, MessageRecord


@dataclass(frozen=True)
class SenderContains:
    text: str

    @property
    def display_name(self) -> str:
        return f"Sender contains '{self.text}'"


@dataclass(frozen=True)
class SenderIs:
    email: str

    @property
    def display_name(self) -> str:
        return f"Sender is '{self.email}'"


@dataclass(frozen=True)
class SenderDomain:
    domain: str

    @property
    def display_name(self) -> str:
        return f"Sender domain is '{self.domain}'"


@dataclass(frozen=True)
class SubjectContains:
    text: str

    @property
    def display_name(self) -> str:
        return f"Subject contains '{self.text}'"


@dataclass(frozen=True)
class BodyContains:
    text: str

    @property
    def display_name(self) -> str:
        return f"Body contains '{self.text}'"


@dataclass(frozen=True)
class CategoryIs:
    category: EmailCategory

    @property
    def display_name(self) -> str:
        return f"Category is {self.category.value}"


@dataclass(frozen=True)
class PriorityGreaterThan:
    value: int

    @property
    def display_name(self) -> str:
        return f"Priority > {self.value}"


@dataclass(frozen=True)
class PriorityLessThan:
    value: int

    @property
    def display_name(self) -> str:
        return f"Priority < {self.value}"


@dataclass(frozen=True)
class AgeGreaterThan:
    days: int

    @property
    def display_name(self) -> str:
        return f"Older than {self.days} day{'' if self.days == 1 else 's'}"


@dataclass(frozen=True)
class AgeLessThan:
    days: int

    @property
    def display_name(self) -> str:
        return f"Newer than {self.days} day{'' if self.days == 1 else 's'}"


@dataclass(frozen=True)
class HasAttachment:
    """Summary: Matches messages with attachments.

    Importance: Kept so saved rules stay loadable; no attachment index is wired yet.
    Alternatives: Drop the condition until attachment data is available.
    """

    @property
    def display_name(self) -> str:
        return "Has attachment"


@dataclass(frozen=True)
class IsUnread:
    @property
    def display_name(self) -> str:
        return "Is unread"


@dataclass(frozen=True)
class IsRead:
    @property
    def display_name(self) -> str:
        return "Is read"


@dataclass(frozen=True)
class HasActionItems:
    @property
    def display_name(self) -> str:
        return "Has action items"


@dataclass(frozen=True)
class SenderIsVip:
    """Summary: Matches messages from VIP senders.

    Importance: Reserved for a VIP registry; evaluates false until one exists.
    Alternatives: Derive VIP status from sender reputation scores.
    """

    @property
    def display_name(self) -> str:
        return "Sender is VIP"


Condition = Union[
    SenderContains,
    SenderIs,
    SenderDomain,
    SubjectContains,
    BodyContains,
    CategoryIs,
    PriorityGreaterThan,
    PriorityLessThan,
    AgeGreaterThan,
    AgeLessThan,
    HasAttachment,
    IsUnread,
    IsRead,
    HasActionItems,
    SenderIsVip,
]


def evaluate(condition: Condition, record: MessageRecord, now: datetime | None = None) -> bool:
    """Summary: Evaluate a single condition against a message record.

    Importance: Pure predicate used by the rule matcher and rule previews.
    Alternatives: Compile conditions into closures once per rule.
    """

    if isinstance(condition, SenderContains):
        return _contains(record.sender, condition.text) or _contains(
            record.sender_email, condition.text
        )
    if isinstance(condition, SenderIs):
        return record.sender_email.lower() == condition.email.lower()
    if isinstance(condition, SenderDomain):
        return record.sender_email.lower().endswith(f"@{condition.domain.lower()}")
    if isinstance(condition, SubjectContains):
        return _contains(record.subject, condition.text)
    if isinstance(condition, BodyContains):
        if record.body is None:
            return False
        return _contains(record.body, condition.text)
    if isinstance(condition, CategoryIs):
        return record.category == condition.category
    if isinstance(condition, PriorityGreaterThan):
        if record.priority is None:
            return False
        return record.priority > condition.value
    if isinstance(condition, PriorityLessThan):
        if record.priority is None:
            return False
        return record.priority < condition.value
    if isinstance(condition, AgeGreaterThan):
        return age_in_days(record.received_at, now or datetime.now()) > condition.days
    if isinstance(condition, AgeLessThan):
        return age_in_days(record.received_at, now or datetime.now()) < condition.days
    if isinstance(condition, HasAttachment):
        return False
    if isinstance(condition, IsUnread):
        return not record.is_read
    if isinstance(condition, IsRead):
        return record.is_read
    if isinstance(condition, HasActionItems):
        return bool(record.action_items)
    if isinstance(condition, SenderIsVip):
        return False
    raise TypeError(f"Unsupported condition: {condition!r}")


def age_in_days(received_at: datetime, now: datetime) -> int:
    """Summary: Count calendar days between receipt and now.

    Importance: A message received earlier today is zero days old regardless of the hour.
    Alternatives: Use elapsed 24-hour periods.
    """

    if received_at.tzinfo is not None and now.tzinfo is not None:
        received_at = received_at.astimezone(now.tzinfo)
    return (now.date() - received_at.date()).days


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()
