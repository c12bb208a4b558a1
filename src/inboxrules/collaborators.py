"""Summary: Interfaces for the systems that carry out rule side effects.

Importance: Keeps the engine unaware of how mail is deleted, moved, or announced.
Alternatives: Call mail client scripts directly from the action executor.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass


logger = logging.getLogger(__name__)

MAIL_STORE_KINDS = frozenset({"delete", "archive", "mark_read", "mark_unread", "move"})


@dataclass(frozen=True)
class SideEffectRequest:
    """Summary: Intent to change something outside the engine.

    Importance: Lets the engine report what should happen without doing it.
    Alternatives: Execute mail store mutations inline and return nothing.
    """

    kind: str
    message_id: str
    reference_id: str
    rule_id: str | None = None
    mailbox: str | None = None
    tag: str | None = None
    title: str | None = None
    body: str | None = None

    @property
    def targets_mail_store(self) -> bool:
        return self.kind in MAIL_STORE_KINDS


@dataclass(frozen=True)
class Notification:
    title: str
    body: str


class MailStoreMutator(ABC):
    """Summary: Abstract interface for applying side effects to the mail store.

    Importance: Standardizes delete, archive, read-state and move requests.
    Alternatives: Use provider-specific clients directly in the engine.
    """

    @abstractmethod
    def submit(self, request: SideEffectRequest) -> None:
        """Summary: Apply a single request keyed by its reference id.

        Importance: Raising signals a rejected request to the caller.
        Alternatives: Return a status flag instead of raising.
        """


class Notifier(ABC):
    """Summary: Abstract interface for fire-and-forget notifications.

    Importance: Lets notify actions reach the user on any platform.
    Alternatives: Write notifications to the log only.
    """

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Summary: Deliver a notification without waiting for acknowledgment."""


class RecordingMailStore(MailStoreMutator):
    """Summary: Mail store that records requests in memory.

    Importance: Supports dry runs, local demos, and tests.
    Alternatives: Write requests to a queue for a separate worker.
    """

    def __init__(self) -> None:
        self.requests: list[SideEffectRequest] = []

    def submit(self, request: SideEffectRequest) -> None:
        logger.info(
            "Queued %s for message %s (rule %s).", request.kind, request.reference_id, request.rule_id
        )
        self.requests.append(request)


class NullMailStore(MailStoreMutator):
    def submit(self, request: SideEffectRequest) -> None:
        return None


class LoggingNotifier(Notifier):
    """Summary: Notifier that writes notifications to the application log.

    Importance: Default delivery path for headless runs.
    Alternatives: Send desktop notifications through the OS.
    """

    def notify(self, notification: Notification) -> None:
        logger.info("Notification: %s - %s", notification.title, notification.body)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
