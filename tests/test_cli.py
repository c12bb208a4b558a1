"""Summary: Tests for the command-line interface.

Importance: Ensures local rule management and batch runs work end to end.
Alternatives: Exercise the CLI manually against a scratch directory.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from inboxrules.cli import run_cli

DEFAULTS = {
    "store_backend": "json",
    "store_path": "data",
    "seed_default_rules": "true",
    "notifications_enabled": "false",
    "log_level": "WARNING",
    "api_key": "",
}

FIXTURE = [
    {
        "id": "m1",
        "reference_id": "imap-1",
        "sender": "Acme Deals",
        "sender_email": "deals@acme.com",
        "subject": "Old sale",
        "received_at": "2020-01-01T09:00:00",
        "category": "Marketing",
    },
    {
        "id": "m2",
        "reference_id": "imap-2",
        "sender": "City Power",
        "sender_email": "billing@power.example",
        "subject": "Your bill",
        "received_at": "2020-01-02T09:00:00",
        "category": "Bills",
    },
    {
        "id": "m3",
        "reference_id": "imap-3",
        "sender": "Alice",
        "sender_email": "alice@work.com",
        "subject": "Standup",
        "received_at": "2020-01-03T09:00:00",
        "category": "Work",
    },
]


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Summary: Prepare an isolated working directory with config defaults.

    Importance: The CLI resolves config and storage relative to the cwd.
    Alternatives: Point the CLI at the repository's own config directory.
    """

    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "defaults.json").write_text(json.dumps(DEFAULTS), encoding="utf-8")
    (tmp_path / "messages.json").write_text(json.dumps(FIXTURE), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("INBOXRULES_"):
            monkeypatch.delenv(key)
    return tmp_path


def _rule_ids(workspace: Path) -> dict[str, str]:
    assert run_cli(["export-rules", "--output", "rules.json"]) == 0
    exported = json.loads((workspace / "rules.json").read_text(encoding="utf-8"))
    return {rule["name"]: rule["id"] for rule in exported}


def test_list_rules_seeds_defaults(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["list-rules"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 3
    assert "[95] Prioritize bills" in lines[0]
    assert "[90] Auto-delete old marketing" in lines[1]
    assert lines[1].endswith("[destructive]")
    assert not lines[0].endswith("[destructive]")
    assert (workspace / "data" / "rules.json").exists()


def test_run_fixture_writes_report(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Summary: Verify a batch run over a fixture file.

    Importance: Confirms default rules change records and queue side effects.
    Alternatives: Validate only through the API run endpoint.
    """

    assert run_cli(["run", "messages.json", "--output", "report.json"]) == 0
    out = capsys.readouterr().out
    assert "Prioritize bills: matched 1, 1 actions, ok" in out
    assert "delete: imap-1" in out

    report = json.loads((workspace / "report.json").read_text(encoding="utf-8"))
    records = {record["id"]: record for record in report["records"]}
    assert records["m2"]["priority"] == 9
    assert records["m3"]["priority"] is None
    assert [request["kind"] for request in report["side_effects"]] == ["delete"]

    assert run_cli(["show-stats"]) == 0
    stats_out = capsys.readouterr().out
    assert "total_executions: 3" in stats_out
    assert "success_rate: 100.0%" in stats_out


def test_rule_management_commands(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    ids = _rule_ids(workspace)
    bills = ids["Prioritize bills"]

    assert run_cli(["test-rule", bills, "messages.json"]) == 0
    assert "Prioritize bills: 1/3 messages match." in capsys.readouterr().out

    assert run_cli(["set-priority", bills, "10"]) == 0
    assert run_cli(["toggle-rule", bills]) == 0
    capsys.readouterr()
    assert run_cli(["list-rules"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert "[90] Auto-delete old marketing" in lines[0]
    assert "[10] Prioritize bills (off" in lines[-1]

    assert run_cli(["delete-rule", bills]) == 0
    assert run_cli(["delete-rule", bills]) == 1
    assert run_cli(["toggle-rule", "missing"]) == 1


def test_import_rules_replaces_collection(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    ids = _rule_ids(workspace)
    exported = json.loads((workspace / "rules.json").read_text(encoding="utf-8"))
    (workspace / "one.json").write_text(json.dumps(exported[:1]), encoding="utf-8")
    (workspace / "broken.json").write_text("[{\"name\": 3}]", encoding="utf-8")

    assert run_cli(["import-rules", "broken.json"]) == 1
    assert run_cli(["import-rules", "one.json"]) == 0
    capsys.readouterr()
    assert run_cli(["list-rules"]) == 0
    out = capsys.readouterr().out.strip().splitlines()
    assert len(out) == 1
    assert out[0].startswith(ids["Prioritize bills"])


def test_seed_defaults_adds_rule_pack(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["seed-defaults"]) == 0
    assert "Rules now: 6." in capsys.readouterr().out
