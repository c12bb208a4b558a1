"""Summary: JSON encoding for rules, statistics, and message records.

Importance: Rules and statistics must survive restarts and round-trip through export files.
Alternatives: Pickle the dataclasses or map them onto ORM tables.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable

from inboxrules import actions as act
from inboxrules import conditions as cond
from inboxrules.actions import Action
from inboxrules.collaborators import SideEffectRequest
from inboxrules.conditions import Condition
from inboxrules.models import ActionItem, ActionItemKind, EmailCategory, MessageRecord
from inboxrules.rules import DEFAULT_PRIORITY, MatchMode, Rule
from inboxrules.statistics import ExecutionResult, RunStatistics


class CodecError(ValueError):
    """Summary: Raised when a payload cannot be decoded.

    Importance: Gives importers a single error type to catch.
    Alternatives: Let KeyError and TypeError escape from decoding.
    """


_CONDITION_TYPES: dict[type, str] = {
    cond.SenderContains: "senderContains",
    cond.SenderIs: "senderIs",
    cond.SenderDomain: "senderDomain",
    cond.SubjectContains: "subjectContains",
    cond.BodyContains: "bodyContains",
    cond.CategoryIs: "categoryIs",
    cond.PriorityGreaterThan: "priorityGreaterThan",
    cond.PriorityLessThan: "priorityLessThan",
    cond.AgeGreaterThan: "ageGreaterThan",
    cond.AgeLessThan: "ageLessThan",
    cond.HasAttachment: "hasAttachment",
    cond.IsUnread: "isUnread",
    cond.IsRead: "isRead",
    cond.HasActionItems: "hasActionItems",
    cond.SenderIsVip: "senderIsVIP",
}

_ACTION_TYPES: dict[type, str] = {
    act.Categorize: "categorize",
    act.SetPriority: "setPriority",
    act.Delete: "delete",
    act.Archive: "archive",
    act.MarkRead: "markRead",
    act.MarkUnread: "markUnread",
    act.MoveTo: "move",
    act.Snooze: "snooze",
    act.AddTag: "addTag",
    act.Notify: "notify",
    act.StopProcessing: "stopProcessing",
}


def encode_condition(condition: Condition) -> dict[str, Any]:
    """Summary: Encode a condition as a flat tagged dict.

    Importance: The "type" key names the variant; payload keys depend on it.
    Alternatives: Nest the payload under a single "args" key.
    """

    payload: dict[str, Any] = {"type": _tag(_CONDITION_TYPES, condition)}
    if isinstance(condition, (cond.SenderContains, cond.SubjectContains, cond.BodyContains)):
        payload["value"] = condition.text
    elif isinstance(condition, cond.SenderIs):
        payload["value"] = condition.email
    elif isinstance(condition, cond.SenderDomain):
        payload["value"] = condition.domain
    elif isinstance(condition, cond.CategoryIs):
        payload["category"] = condition.category.value
    elif isinstance(condition, (cond.PriorityGreaterThan, cond.PriorityLessThan)):
        payload["value"] = condition.value
    elif isinstance(condition, (cond.AgeGreaterThan, cond.AgeLessThan)):
        payload["days"] = condition.days
    return payload


def decode_condition(payload: dict[str, Any]) -> Condition:
    kind = _kind(payload)
    builders: dict[str, Callable[[], Condition]] = {
        "senderContains": lambda: cond.SenderContains(_str(payload, "value")),
        "senderIs": lambda: cond.SenderIs(_str(payload, "value")),
        "senderDomain": lambda: cond.SenderDomain(_str(payload, "value")),
        "subjectContains": lambda: cond.SubjectContains(_str(payload, "value")),
        "bodyContains": lambda: cond.BodyContains(_str(payload, "value")),
        "categoryIs": lambda: cond.CategoryIs(_category(payload, "category")),
        "priorityGreaterThan": lambda: cond.PriorityGreaterThan(_int(payload, "value")),
        "priorityLessThan": lambda: cond.PriorityLessThan(_int(payload, "value")),
        "ageGreaterThan": lambda: cond.AgeGreaterThan(_int(payload, "days")),
        "ageLessThan": lambda: cond.AgeLessThan(_int(payload, "days")),
        "hasAttachment": cond.HasAttachment,
        "isUnread": cond.IsUnread,
        "isRead": cond.IsRead,
        "hasActionItems": cond.HasActionItems,
        "senderIsVIP": cond.SenderIsVip,
    }
    if kind not in builders:
        raise CodecError(f"Unknown condition type: {kind}")
    return builders[kind]()


def encode_action(action: Action) -> dict[str, Any]:
    payload: dict[str, Any] = {"type": _tag(_ACTION_TYPES, action)}
    if isinstance(action, act.Categorize):
        payload["category"] = action.category.value
    elif isinstance(action, act.SetPriority):
        payload["value"] = action.value
    elif isinstance(action, act.MoveTo):
        payload["mailbox"] = action.mailbox
    elif isinstance(action, act.Snooze):
        payload["date"] = action.until.isoformat()
    elif isinstance(action, act.AddTag):
        payload["tag"] = action.tag
    elif isinstance(action, act.Notify):
        payload["message"] = action.message
    return payload


def decode_action(payload: dict[str, Any]) -> Action:
    kind = _kind(payload)
    builders: dict[str, Callable[[], Action]] = {
        "categorize": lambda: act.Categorize(_category(payload, "category")),
        "setPriority": lambda: act.SetPriority(_int(payload, "value")),
        "delete": act.Delete,
        "archive": act.Archive,
        "markRead": act.MarkRead,
        "markUnread": act.MarkUnread,
        "move": lambda: act.MoveTo(_str(payload, "mailbox")),
        "snooze": lambda: act.Snooze(_datetime(payload, "date")),
        "addTag": lambda: act.AddTag(_str(payload, "tag")),
        "notify": lambda: act.Notify(_str(payload, "message")),
        "stopProcessing": act.StopProcessing,
    }
    if kind not in builders:
        raise CodecError(f"Unknown action type: {kind}")
    return builders[kind]()


def encode_rule(rule: Rule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "name": rule.name,
        "enabled": rule.enabled,
        "priority": rule.priority,
        "match_mode": rule.match_mode.value,
        "conditions": [encode_condition(condition) for condition in rule.conditions],
        "actions": [encode_action(action) for action in rule.actions],
        "created_at": rule.created_at.isoformat(),
        "last_modified": rule.last_modified.isoformat(),
        "execution_count": rule.execution_count,
    }


def decode_rule(payload: dict[str, Any]) -> Rule:
    """Summary: Decode a rule dict produced by encode_rule.

    Importance: Validates every nested condition and action before accepting the rule.
    Alternatives: Decode lazily and skip broken entries at run time.
    """

    if not isinstance(payload, dict):
        raise CodecError("Rule payload must be an object")
    conditions = payload.get("conditions", [])
    actions = payload.get("actions", [])
    if not isinstance(conditions, list) or not isinstance(actions, list):
        raise CodecError("Rule conditions and actions must be lists")
    try:
        match_mode = MatchMode(str(payload.get("match_mode", MatchMode.ALL.value)).lower())
    except ValueError as exc:
        raise CodecError(f"Unknown match mode: {payload.get('match_mode')}") from exc
    fields: dict[str, Any] = {
        "name": _str(payload, "name"),
        "conditions": tuple(decode_condition(item) for item in conditions),
        "actions": tuple(decode_action(item) for item in actions),
        "enabled": _bool(payload, "enabled", default=True),
        "priority": _int(payload, "priority") if "priority" in payload else DEFAULT_PRIORITY,
        "match_mode": match_mode,
        "execution_count": _int(payload, "execution_count") if "execution_count" in payload else 0,
    }
    if payload.get("id"):
        fields["id"] = str(payload["id"])
    if payload.get("created_at"):
        fields["created_at"] = _datetime(payload, "created_at")
    if payload.get("last_modified"):
        fields["last_modified"] = _datetime(payload, "last_modified")
    return Rule(**fields)


def encode_rules(rules: list[Rule]) -> str:
    return json.dumps([encode_rule(rule) for rule in rules], indent=2)


def decode_rules(text: str) -> list[Rule]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise CodecError(f"Invalid rules JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CodecError("Rules JSON must be a list")
    rules = [decode_rule(item) for item in data]
    seen: set[str] = set()
    for rule in rules:
        if rule.id in seen:
            raise CodecError(f"Duplicate rule id: {rule.id}")
        seen.add(rule.id)
    return rules


def encode_statistics(stats: RunStatistics) -> dict[str, Any]:
    return {
        "total_rules": stats.total_rules,
        "enabled_rules": stats.enabled_rules,
        "total_executions": stats.total_executions,
        "successful_executions": stats.successful_executions,
        "failed_executions": stats.failed_executions,
        "last_execution_at": stats.last_execution_at.isoformat()
        if stats.last_execution_at
        else None,
        "avg_execution_time": stats.avg_execution_time,
    }


def decode_statistics(payload: dict[str, Any]) -> RunStatistics:
    if not isinstance(payload, dict):
        raise CodecError("Statistics payload must be an object")
    try:
        return RunStatistics(
            total_rules=int(payload.get("total_rules", 0)),
            enabled_rules=int(payload.get("enabled_rules", 0)),
            total_executions=int(payload.get("total_executions", 0)),
            successful_executions=int(payload.get("successful_executions", 0)),
            failed_executions=int(payload.get("failed_executions", 0)),
            last_execution_at=_datetime(payload, "last_execution_at")
            if payload.get("last_execution_at")
            else None,
            avg_execution_time=float(payload.get("avg_execution_time", 0.0)),
        )
    except (TypeError, ValueError) as exc:
        raise CodecError(f"Invalid statistics payload: {exc}") from exc


def encode_result(result: ExecutionResult) -> dict[str, Any]:
    return {
        "rule_id": result.rule_id,
        "rule_name": result.rule_name,
        "matched": result.matched,
        "matched_count": result.matched_count,
        "actions_executed": result.actions_executed,
        "errors": list(result.errors),
        "duration": result.duration,
        "success": result.is_success,
    }


def encode_side_effect(request: SideEffectRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "kind": request.kind,
        "message_id": request.message_id,
        "reference_id": request.reference_id,
        "rule_id": request.rule_id,
    }
    for key in ("mailbox", "tag", "title", "body"):
        value = getattr(request, key)
        if value is not None:
            payload[key] = value
    return payload


def encode_message(record: MessageRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "reference_id": record.reference_id,
        "sender": record.sender,
        "sender_email": record.sender_email,
        "subject": record.subject,
        "body": record.body,
        "received_at": record.received_at.isoformat(),
        "is_read": record.is_read,
        "category": record.category.value if record.category else None,
        "priority": record.priority,
        "is_snoozed": record.is_snoozed,
        "snooze_until": record.snooze_until.isoformat() if record.snooze_until else None,
        "action_items": [
            {
                "kind": item.kind.value,
                "text": item.text,
                "due": item.due.isoformat() if item.due else None,
            }
            for item in record.action_items
        ],
        "sender_reputation": record.sender_reputation,
    }


def decode_message(payload: dict[str, Any]) -> MessageRecord:
    """Summary: Decode a message record from a fixture or API payload.

    Importance: Lets the CLI and API feed arbitrary batches into the engine.
    Alternatives: Fetch records from a live mail provider only.
    """

    if not isinstance(payload, dict):
        raise CodecError("Message payload must be an object")
    try:
        items = tuple(
            ActionItem(
                kind=ActionItemKind(item["kind"]),
                text=str(item.get("text", "")),
                due=datetime.fromisoformat(item["due"]) if item.get("due") else None,
            )
            for item in payload.get("action_items", [])
        )
        return MessageRecord(
            id=str(payload["id"]),
            reference_id=str(payload.get("reference_id") or payload["id"]),
            sender=str(payload.get("sender", "")),
            sender_email=str(payload.get("sender_email", "")),
            subject=str(payload.get("subject", "")),
            received_at=_datetime(payload, "received_at"),
            body=_optional_str(payload, "body"),
            is_read=_bool(payload, "is_read", default=False),
            category=_category(payload, "category") if payload.get("category") else None,
            priority=int(payload["priority"]) if payload.get("priority") is not None else None,
            is_snoozed=_bool(payload, "is_snoozed", default=False),
            snooze_until=_datetime(payload, "snooze_until") if payload.get("snooze_until") else None,
            action_items=items,
            sender_reputation=float(payload["sender_reputation"])
            if payload.get("sender_reputation") is not None
            else None,
        )
    except CodecError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise CodecError(f"Invalid message payload: {exc}") from exc


def decode_messages(text: str) -> list[MessageRecord]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise CodecError(f"Invalid messages JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CodecError("Messages JSON must be a list")
    return [decode_message(item) for item in data]


def _tag(table: dict[type, str], value: object) -> str:
    tag = table.get(type(value))
    if tag is None:
        raise CodecError(f"Cannot encode {value!r}")
    return tag


def _kind(payload: dict[str, Any]) -> str:
    if not isinstance(payload, dict) or "type" not in payload:
        raise CodecError("Payload is missing a type discriminator")
    return str(payload["type"])


def _str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise CodecError(f"Field '{key}' must be a string")
    return value


def _int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CodecError(f"Field '{key}' must be an integer")
    return value


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    if payload.get(key) is None:
        return None
    return _str(payload, key)


def _bool(payload: dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise CodecError(f"Field '{key}' must be a boolean")
    return value


def _category(payload: dict[str, Any], key: str) -> EmailCategory:
    try:
        return EmailCategory.parse(_str(payload, key))
    except CodecError:
        raise
    except ValueError as exc:
        raise CodecError(str(exc)) from exc


def _datetime(payload: dict[str, Any], key: str) -> datetime:
    try:
        return datetime.fromisoformat(_str(payload, key))
    except CodecError:
        raise
    except ValueError as exc:
        raise CodecError(f"Field '{key}' must be an ISO-8601 timestamp") from exc
