import json
from types import SimpleNamespace

from typer.testing import CliRunner

import drive_relay.cli.relay as relay
from drive_relay.cli.relay import app
from drive_relay.cli.status import CheckResult
from drive_relay.domain.credentials import Token
from drive_relay.infrastructure.credential_store import CredentialStore
from tests.http_stubs import CLIENT_ID

runner = CliRunner()


def test_auth_url_prints_consent_link(configured_settings):
    result = runner.invoke(app, ["auth-url"])

    assert result.exit_code == 0
    assert "accounts.google.com" in result.stdout
    assert CLIENT_ID in result.stdout


def test_auth_url_fails_without_credentials(configured_settings, tmp_path, monkeypatch):
    monkeypatch.setattr(configured_settings, "CREDENTIALS_PATH", tmp_path / "absent.json")

    result = runner.invoke(app, ["auth-url"])

    assert result.exit_code == 1


def test_exchange_code_saves_tokens(configured_settings, fake_google):
    result = runner.invoke(app, ["exchange-code", "VALIDCODE"])

    assert result.exit_code == 0
    assert "[OK]" in result.stdout
    assert json.loads(configured_settings.TOKEN_PATH.read_text())["refresh_token"] == "refresh-1"


def test_exchange_code_rejected(configured_settings, fake_google):
    result = runner.invoke(app, ["exchange-code", "bogus"])

    assert result.exit_code == 1
    assert "InvalidGrant" in result.stdout
    assert not configured_settings.TOKEN_PATH.exists()


def test_refresh_updates_stored_token(configured_settings, fake_google):
    CredentialStore.from_settings().save_token(Token(access_token="old", refresh_token="refresh-1"))

    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 0
    assert CredentialStore.from_settings().load_token().access_token == "access-1"


def test_refresh_without_token_fails(configured_settings, fake_google):
    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 1
    assert "Unauthorized" in result.stdout


def test_status_all_ok(monkeypatch):
    monkeypatch.setattr(
        relay,
        "run_status_checks",
        lambda **kwargs: [CheckResult("Credentials", True, "ok"), CheckResult("Token", True, "stored")],
    )

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Credentials" in result.stdout
    assert "FAIL" not in result.stdout


def test_status_failure_exits_non_zero(monkeypatch):
    monkeypatch.setattr(
        relay,
        "run_status_checks",
        lambda **kwargs: [CheckResult("Credentials", True, "ok"), CheckResult("Token", False, "missing")],
    )

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 1
    assert "FAIL" in result.stdout


def test_logs_prints_tail(tmp_path, monkeypatch):
    log_file = tmp_path / "relay_history.log"
    log_file.write_text("".join(f"line {i}\n" for i in range(10)), encoding="utf-8")
    monkeypatch.setattr(relay, "settings", SimpleNamespace(log_path=log_file))

    result = runner.invoke(app, ["logs", "--lines", "3"])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["line 7", "line 8", "line 9"]


def test_logs_missing_file_exits_non_zero(tmp_path, monkeypatch):
    monkeypatch.setattr(relay, "settings", SimpleNamespace(log_path=tmp_path / "absent.log"))

    result = runner.invoke(app, ["logs"])

    assert result.exit_code == 1
    assert "Log file not found" in result.stdout
