"""Summary: Domain model dataclasses for InboxRules.

Importance: Defines the message records that rules are evaluated against.
Alternatives: Use Pydantic models or ORM classes directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EmailCategory(str, Enum):
    """Summary: Fixed set of categories a message can be filed under.

    Importance: Shared vocabulary between categorization and rule conditions.
    Alternatives: Allow free-form category strings.
    """

    BILLS = "Bills"
    ORDERS = "Orders"
    WORK = "Work"
    PERSONAL = "Personal"
    MARKETING = "Marketing"
    NEWSLETTERS = "Newsletters"
    SOCIAL = "Social"
    SPAM = "Spam"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> "EmailCategory":
        """Summary: Resolve a category from its value or member name.

        Importance: Accepts both "Bills" and "bills" from hand-written rule files.
        Alternatives: Require the exact serialized value.
        """

        lowered = value.strip().lower()
        for category in cls:
            if category.value.lower() == lowered or category.name.lower() == lowered:
                return category
        raise ValueError(f"Unknown category: {value}")


class ActionItemKind(str, Enum):
    DEADLINE = "deadline"
    MEETING = "meeting"
    TASK = "task"
    REMINDER = "reminder"


@dataclass(frozen=True)
class ActionItem:
    """Summary: An action item extracted from a message.

    Importance: Lets rules react to messages that ask something of the user.
    Alternatives: Store extracted items as plain strings.
    """

    kind: ActionItemKind
    text: str
    due: datetime | None = None


@dataclass(frozen=True)
class MessageRecord:
    """Summary: Represents one email as seen by the rule engine.

    Importance: Core unit for condition evaluation and action execution.
    Alternatives: Evaluate rules directly against provider payloads.
    """

    id: str
    reference_id: str
    sender: str
    sender_email: str
    subject: str
    received_at: datetime
    body: str | None = None
    is_read: bool = False
    category: EmailCategory | None = None
    priority: int | None = None
    is_snoozed: bool = False
    snooze_until: datetime | None = None
    action_items: tuple[ActionItem, ...] = field(default_factory=tuple)
    sender_reputation: float | None = None
