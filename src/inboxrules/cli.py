"""Summary: Command-line interface for InboxRules.

Importance: Provides a local-first entry point for managing and running rules.
Alternatives: Build a web UI or desktop client first.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from inboxrules.actions import is_destructive
from inboxrules.app import build_context
from inboxrules.codec import decode_messages, encode_message, encode_result, encode_side_effect
from inboxrules.config import EngineConfig
from inboxrules.defaults import default_rules


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="InboxRules CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-rules", help="List rules in priority order")
    subparsers.add_parser("show-stats", help="Show cumulative rule statistics")
    subparsers.add_parser("seed-defaults", help="Add the default rule pack")

    toggle = subparsers.add_parser("toggle-rule", help="Enable or disable a rule")
    toggle.add_argument("rule_id", type=str)

    delete = subparsers.add_parser("delete-rule", help="Delete a rule")
    delete.add_argument("rule_id", type=str)

    set_priority = subparsers.add_parser("set-priority", help="Change a rule's priority")
    set_priority.add_argument("rule_id", type=str)
    set_priority.add_argument("priority", type=int)

    export_rules = subparsers.add_parser("export-rules", help="Export rules as JSON")
    export_rules.add_argument("--output", type=str, default=None)

    import_rules = subparsers.add_parser("import-rules", help="Replace rules from a JSON export")
    import_rules.add_argument("path", type=str)

    test_rule = subparsers.add_parser("test-rule", help="Count messages a rule would match")
    test_rule.add_argument("rule_id", type=str)
    test_rule.add_argument("fixture", type=str)

    run = subparsers.add_parser("run", help="Apply enabled rules to a message fixture")
    run.add_argument("fixture", type=str)
    run.add_argument("--output", type=str, default=None)

    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives rule management without a UI.
    Alternatives: Invoke the engine via the HTTP API.
    """

    parser = build_parser()
    args = parser.parse_args(argv)
    config = EngineConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    context = build_context(config)
    engine = context.engine

    if args.command == "list-rules":
        for rule in engine.rules:
            state = "on" if rule.enabled else "off"
            flag = " [destructive]" if any(is_destructive(action) for action in rule.actions) else ""
            print(
                f"{rule.id}: [{rule.priority}] {rule.name} ({state}, "
                f"{rule.match_mode.display_name}, {rule.summary}, fired {rule.execution_count}x)"
                f"{flag}"
            )
        return 0

    if args.command == "show-stats":
        stats = engine.statistics
        print(f"total_rules: {stats.total_rules}")
        print(f"enabled_rules: {stats.enabled_rules}")
        print(f"total_executions: {stats.total_executions}")
        print(f"successful_executions: {stats.successful_executions}")
        print(f"failed_executions: {stats.failed_executions}")
        print(f"success_rate: {stats.success_rate * 100:.1f}%")
        print(f"avg_execution_time: {stats.avg_execution_time:.4f}s")
        print(f"last_execution_at: {stats.last_execution_at or 'never'}")
        return 0

    if args.command == "seed-defaults":
        for rule in default_rules():
            engine.add_rule(rule)
        print(f"Rules now: {len(engine.rules)}.")
        return 0

    if args.command == "toggle-rule":
        if not engine.toggle_rule(args.rule_id):
            print(f"Rule {args.rule_id} not found.")
            return 1
        print("Rule toggled.")
        return 0

    if args.command == "delete-rule":
        if not engine.delete_rule(args.rule_id):
            print(f"Rule {args.rule_id} not found.")
            return 1
        print("Rule deleted.")
        return 0

    if args.command == "set-priority":
        rule = engine.get_rule(args.rule_id)
        if rule is None:
            print(f"Rule {args.rule_id} not found.")
            return 1
        engine.update_rule(replace(rule, priority=args.priority))
        print(f"Priority of {rule.name} set to {args.priority}.")
        return 0

    if args.command == "export-rules":
        exported = engine.export_rules()
        if args.output:
            Path(args.output).write_text(exported, encoding="utf-8")
            print(f"Exported {len(engine.rules)} rules to {args.output}.")
        else:
            print(exported)
        return 0

    if args.command == "import-rules":
        text = Path(args.path).read_text(encoding="utf-8")
        if not engine.import_rules(text):
            print("Import failed; existing rules kept.")
            return 1
        print(f"Imported {len(engine.rules)} rules.")
        return 0

    if args.command == "test-rule":
        rule = engine.get_rule(args.rule_id)
        if rule is None:
            print(f"Rule {args.rule_id} not found.")
            return 1
        records = decode_messages(Path(args.fixture).read_text(encoding="utf-8"))
        matched, total = engine.test_rule(rule, records)
        print(f"{rule.name}: {matched}/{total} messages match.")
        return 0

    if args.command == "run":
        records = decode_messages(Path(args.fixture).read_text(encoding="utf-8"))
        report = engine.run(records)
        for result in report.results:
            status = "ok" if result.is_success else f"{len(result.errors)} errors"
            print(
                f"{result.rule_name}: matched {result.matched_count}, "
                f"{result.actions_executed} actions, {status}"
            )
        for request in report.side_effects:
            print(f"{request.kind}: {request.reference_id}")
        if args.output:
            payload = {
                "records": [encode_message(record) for record in report.records],
                "results": [encode_result(result) for result in report.results],
                "side_effects": [encode_side_effect(request) for request in report.side_effects],
            }
            Path(args.output).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(run_cli())
