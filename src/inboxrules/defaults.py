"""Summary: Starter rule pack seeded into empty rule stores.

Importance: Gives new users working automation before they write any rules.
Alternatives: Start every user with an empty rule list.
"""

from __future__ import annotations

from inboxrules.actions import Delete, MarkRead, SetPriority
from inboxrules.conditions import AgeGreaterThan, CategoryIs
from inboxrules.models import EmailCategory
from inboxrules.rules import MatchMode, Rule


def default_rules() -> list[Rule]:
    """Summary: Build the default rules with fresh ids and timestamps.

    Importance: Each engine instance gets its own copies.
    Alternatives: Ship the defaults as a JSON file.
    """

    return [
        Rule(
            name="Auto-delete old marketing",
            conditions=(CategoryIs(EmailCategory.MARKETING), AgeGreaterThan(7)),
            actions=(Delete(),),
            priority=90,
            match_mode=MatchMode.ALL,
        ),
        Rule(
            name="Mark newsletters as read",
            conditions=(CategoryIs(EmailCategory.NEWSLETTERS), AgeGreaterThan(3)),
            actions=(MarkRead(),),
            priority=80,
            match_mode=MatchMode.ALL,
        ),
        Rule(
            name="Prioritize bills",
            conditions=(CategoryIs(EmailCategory.BILLS),),
            actions=(SetPriority(9),),
            priority=95,
            match_mode=MatchMode.ALL,
        ),
    ]
