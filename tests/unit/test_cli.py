"""Unit tests for the qbonotes command line"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from qbonotes.cli import main, run_composer
from qbonotes.composer.client import NotesClientError
from qbonotes.composer.composer import NoteComposer
from qbonotes.scraper.types import TransactionData

URL = "https://qbo.intuit.com/app/invoice?txnId=42"

PAGE = """
<form data-automation-id="invoice-form">
  <input data-automation-id="customer-combo" value="Acme Corp">
  <input data-automation-id="amount-input" value="$250.00">
</form>
"""


@pytest.fixture
def page(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE)
    return path


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("QBONOTES_DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("NOTES_STORAGE_DIR", str(tmp_path / "fallback"))
    monkeypatch.setenv("QBONOTES_AUTH_FILE", str(tmp_path / "auth.json"))
    monkeypatch.setenv("QBONOTES_AUTH_BYPASS", "true")
    for name in (
        "SLACK_WEBHOOK_URL",
        "SLACK_BOT_TOKEN",
        "GOOGLE_SHEETS_ID",
        "GOOGLE_SERVICE_ACCOUNT_EMAIL",
        "GOOGLE_PRIVATE_KEY",
        "DAILY_REPORT_SCHEDULE",
        "QBONOTES_AUTH_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_extract_prints_fields(page, capsys):
    assert main(["extract", "--url", URL, "--html", str(page)]) == 0

    result = json.loads(capsys.readouterr().out)
    assert result["is_transaction_page"] is True
    assert result["transaction"]["amount"] == 250.0
    assert result["transaction"]["customer_vendor"] == "Acme Corp"


def test_check_schedule(capsys):
    assert main(["check-schedule", "0 9 * * 1-5", "--count", "2"]) == 0

    out = capsys.readouterr().out
    assert "America/Los_Angeles" in out
    assert len([line for line in out.splitlines() if line.startswith("  ")]) == 2


def test_check_schedule_rejects_bad_expression(capsys):
    assert main(["check-schedule", "every day"]) == 2
    assert "Invalid schedule" in capsys.readouterr().err


def test_compose_refuses_non_transaction_page(page, capsys):
    assert main(["compose", "--url", "https://qbo.intuit.com/app/invoices", "--html", str(page)]) == 2
    assert "Not a transaction page" in capsys.readouterr().err


def test_compose_refuses_other_hosts(page, capsys):
    url = "https://example.com/app/invoice?txnId=42"

    assert main(["compose", "--url", url, "--html", str(page), "--note", "hi"]) == 2
    assert "Not a transaction page" in capsys.readouterr().err


def test_compose_requires_login(isolated_env, page, capsys):
    assert main(["compose", "--url", URL, "--html", str(page), "--note", "hi"]) == 3
    assert "qbonotes login" in capsys.readouterr().err


def test_compose_after_login_sends_note(isolated_env, page, monkeypatch, capsys):
    client_cls = MagicMock()
    client_cls.return_value.create_note.return_value = "note-1"
    monkeypatch.setattr("qbonotes.cli.NotesClient", client_cls)

    assert main(["login", "dana@example.com"]) == 0
    assert main(["compose", "--url", URL, "--html", str(page), "--note", "Paid"]) == 0

    payload = client_cls.return_value.create_note.call_args.args[0]
    assert payload["note"] == "Paid"
    assert "Note saved: note-1" in capsys.readouterr().out


def test_login_status_and_logout(isolated_env, tmp_path, capsys):
    assert main(["auth-status"]) == 1
    assert "Not signed in" in capsys.readouterr().out

    assert main(["login", "dana@example.com"]) == 0
    assert "plan: bypass" in capsys.readouterr().out
    assert (tmp_path / "auth.json").exists()

    assert main(["auth-status"]) == 0
    assert "dana@example.com: active" in capsys.readouterr().out

    assert main(["logout"]) == 0
    assert not (tmp_path / "auth.json").exists()


def test_login_rejected_by_endpoint(isolated_env, monkeypatch, capsys):
    monkeypatch.setenv("QBONOTES_AUTH_BYPASS", "false")
    monkeypatch.setenv("QBONOTES_AUTH_ENDPOINT", "https://auth.example.com/validate")
    response = MagicMock(ok=True, status_code=200)
    response.json.return_value = {"valid": False}
    monkeypatch.setattr("requests.Session.post", lambda self, *args, **kwargs: response)

    assert main(["login", "lapsed@example.com"]) == 1
    assert "No active subscription" in capsys.readouterr().err


def test_report_writes_csv(isolated_env, tmp_path, capsys):
    out_path = tmp_path / "report.csv"

    assert main(["report", "--date", "2024-03-10", "--csv", str(out_path)]) == 0

    assert "DAILY SUMMARY" in out_path.read_text()
    assert '"total_notes": 0' in capsys.readouterr().out


def test_report_rejects_bad_date(isolated_env, capsys):
    assert main(["report", "--date", "03/10/2024"]) == 2
    assert "Invalid date" in capsys.readouterr().err


class TestRunComposer:
    def make_composer(self):
        return NoteComposer(TransactionData(transaction_url=URL, transaction_type="Invoice", amount=250.0))

    def test_interactive_edit_and_send(self, capsys):
        answers = iter(["", "", "", "", "Acme West", "", "Paid by card"])
        client = MagicMock()
        client.create_note.return_value = "note-9"

        code = run_composer(self.make_composer(), client, input_fn=lambda _prompt: next(answers))

        assert code == 0
        payload = client.create_note.call_args.args[0]
        assert payload["customer_vendor"] == "Acme West"
        assert payload["note"] == "Paid by card"
        assert "note-9" in capsys.readouterr().out

    def test_retry_after_failure(self, capsys):
        answers = iter([""] * 6 + ["first try", "second try"])
        client = MagicMock()
        client.create_note.side_effect = [NotesClientError("HTTP 500"), "note-10"]

        code = run_composer(self.make_composer(), client, input_fn=lambda _prompt: next(answers))

        assert code == 0
        assert client.create_note.call_count == 2
        assert client.create_note.call_args.args[0]["note"] == "second try"
        assert "Failed to send note: HTTP 500" in capsys.readouterr().err

    def test_note_flag_does_not_retry(self):
        client = MagicMock()
        client.create_note.side_effect = NotesClientError("HTTP 500")

        assert run_composer(self.make_composer(), client, note="one shot") == 1
        assert client.create_note.call_count == 1

    def test_empty_note_cancels(self, capsys):
        answers = iter([""] * 6 + ["   "])
        client = MagicMock()

        code = run_composer(self.make_composer(), client, input_fn=lambda _prompt: next(answers))

        assert code == 1
        client.create_note.assert_not_called()
        assert "Cancelled" in capsys.readouterr().out
