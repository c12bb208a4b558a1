"""Summary: FastAPI application for InboxRules.

Importance: Exposes rule management and batch runs to integrations and UI clients.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from inboxrules.app import build_context
from inboxrules.codec import (
    CodecError,
    decode_message,
    decode_rule,
    encode_message,
    encode_result,
    encode_rule,
    encode_side_effect,
    encode_statistics,
)
from inboxrules.config import EngineConfig
from inboxrules.models import MessageRecord
from inboxrules.rules import DEFAULT_PRIORITY, Rule


class RuleRequest(BaseModel):
    """Summary: Request payload for creating or editing a rule.

    Importance: Uses the same condition and action encoding as rule exports.
    Alternatives: Define one pydantic model per condition and action variant.
    """

    name: str = Field(min_length=1)
    enabled: bool = True
    priority: int = DEFAULT_PRIORITY
    match_mode: str = "all"
    conditions: list[dict[str, Any]] = Field(default_factory=list)
    actions: list[dict[str, Any]] = Field(default_factory=list)


class ReorderRequest(BaseModel):
    rule_ids: list[str]


class MessagesRequest(BaseModel):
    """Summary: Request payload carrying a batch of message records.

    Importance: Lets clients run rules against mail fetched elsewhere.
    Alternatives: Reference stored messages by id.
    """

    messages: list[dict[str, Any]]


class RuleTestRequest(MessagesRequest):
    rule: RuleRequest


class ImportRequest(BaseModel):
    payload: str


def create_app(config: EngineConfig) -> FastAPI:
    """Summary: Create a FastAPI app wired to the rule engine.

    Importance: Ensures the API layer shares the same configuration and storage.
    Alternatives: Instantiate the engine globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, config.log_level, logging.INFO),
            format="%(levelname)s %(name)s: %(message)s",
        )
    app = FastAPI(title="InboxRules API", version="0.1.0")
    context = build_context(config)
    engine = context.engine
    app.state.context = context

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    def _to_rule(payload: RuleRequest, rule_id: str | None = None) -> Rule:
        data = payload.model_dump()
        if rule_id:
            data["id"] = rule_id
        try:
            rule = decode_rule(data)
        except CodecError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not rule.is_valid:
            raise HTTPException(
                status_code=400, detail="Rule needs at least one condition and one action"
            )
        return rule

    def _to_records(items: list[dict[str, Any]]) -> list[MessageRecord]:
        try:
            return [decode_message(item) for item in items]
        except CodecError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/health")
    def health() -> dict[str, str]:
        """Summary: Health check endpoint.

        Importance: Supports uptime checks in local and cloud deployments.
        Alternatives: Use a metrics endpoint only.
        """

        return {"status": "ok"}

    @app.get("/rules", dependencies=[Depends(require_api_key)])
    def list_rules() -> list[dict[str, Any]]:
        return [encode_rule(rule) for rule in engine.rules]

    @app.post("/rules", dependencies=[Depends(require_api_key)])
    def create_rule(payload: RuleRequest) -> dict[str, Any]:
        """Summary: Create a rule from a JSON definition.

        Importance: Enables rule authoring from any client.
        Alternatives: Create rules only through imports.
        """

        rule = engine.add_rule(_to_rule(payload))
        return encode_rule(rule)

    @app.get("/rules/export", dependencies=[Depends(require_api_key)])
    def export_rules() -> dict[str, str]:
        return {"payload": engine.export_rules()}

    @app.post("/rules/import", dependencies=[Depends(require_api_key)])
    def import_rules(payload: ImportRequest) -> dict[str, Any]:
        """Summary: Replace all rules with an exported payload.

        Importance: A rejected import leaves existing rules in place.
        Alternatives: Merge imported rules by id.
        """

        if not engine.import_rules(payload.payload):
            raise HTTPException(status_code=400, detail="Invalid rules payload")
        return {"imported": len(engine.rules)}

    @app.post("/rules/reorder", dependencies=[Depends(require_api_key)])
    def reorder_rules(payload: ReorderRequest) -> list[dict[str, Any]]:
        if not engine.reorder_rules(payload.rule_ids):
            raise HTTPException(status_code=400, detail="Rule ids must match the current rules")
        return [encode_rule(rule) for rule in engine.rules]

    @app.post("/rules/test", dependencies=[Depends(require_api_key)])
    def test_rule(payload: RuleTestRequest) -> dict[str, int]:
        """Summary: Preview how many messages a draft rule would match.

        Importance: Supports rule authoring without side effects.
        Alternatives: Require saving a rule before testing it.
        """

        matched, total = engine.test_rule(_to_rule(payload.rule), _to_records(payload.messages))
        return {"matches": matched, "total": total}

    @app.get("/rules/{rule_id}", dependencies=[Depends(require_api_key)])
    def get_rule(rule_id: str) -> dict[str, Any]:
        rule = engine.get_rule(rule_id)
        if rule is None:
            raise HTTPException(status_code=404, detail="Rule not found")
        return encode_rule(rule)

    @app.put("/rules/{rule_id}", dependencies=[Depends(require_api_key)])
    def update_rule(rule_id: str, payload: RuleRequest) -> dict[str, Any]:
        if not engine.update_rule(_to_rule(payload, rule_id)):
            raise HTTPException(status_code=404, detail="Rule not found")
        return encode_rule(engine.get_rule(rule_id))

    @app.delete("/rules/{rule_id}", dependencies=[Depends(require_api_key)])
    def delete_rule(rule_id: str) -> dict[str, str]:
        if not engine.delete_rule(rule_id):
            raise HTTPException(status_code=404, detail="Rule not found")
        return {"status": "deleted"}

    @app.post("/rules/{rule_id}/toggle", dependencies=[Depends(require_api_key)])
    def toggle_rule(rule_id: str) -> dict[str, Any]:
        if not engine.toggle_rule(rule_id):
            raise HTTPException(status_code=404, detail="Rule not found")
        return encode_rule(engine.get_rule(rule_id))

    @app.post("/run", dependencies=[Depends(require_api_key)])
    def run_rules(payload: MessagesRequest) -> dict[str, Any]:
        """Summary: Apply enabled rules to a batch of messages.

        Importance: Returns updated records, per-rule results, and side effects to carry out.
        Alternatives: Queue runs and return results asynchronously.
        """

        report = engine.run(_to_records(payload.messages))
        return {
            "records": [encode_message(record) for record in report.records],
            "results": [encode_result(result) for result in report.results],
            "side_effects": [encode_side_effect(request) for request in report.side_effects],
        }

    @app.get("/stats", dependencies=[Depends(require_api_key)])
    def stats() -> dict[str, Any]:
        snapshot = engine.statistics
        payload = encode_statistics(snapshot)
        payload["success_rate"] = snapshot.success_rate
        return payload

    return app
