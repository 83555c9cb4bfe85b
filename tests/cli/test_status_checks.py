from drive_relay.cli.status import (
    CheckResult,
    check_access_token,
    check_client_secret,
    check_refresh_token,
    run_status_checks,
)
from drive_relay.domain.credentials import Token
from drive_relay.infrastructure.credential_store import CredentialStore

NOW_MS = 1_714_552_200_000  # 2024-05-01 08:30 UTC


def test_client_secret_ok(store):
    result = check_client_secret(store)

    assert result.ok
    assert "googleCallback" in result.detail


def test_client_secret_missing(tmp_path):
    result = check_client_secret(CredentialStore(tmp_path / "absent.json", tmp_path / "token.json"))

    assert not result.ok
    assert "not found" in result.detail


def test_refresh_token_missing_file(store):
    result = check_refresh_token(store)

    assert not result.ok
    assert "auth-url" in result.detail


def test_refresh_token_without_refresh_field(store):
    store.save_token(Token(access_token="a"))

    assert not check_refresh_token(store).ok


def test_refresh_token_stored(store):
    store.save_token(Token(access_token="a", refresh_token="r"))

    assert check_refresh_token(store) == CheckResult(name="Token", ok=True, detail="refresh token stored")


def test_access_token_expired_but_refreshable(store):
    store.save_token(Token(access_token="a", refresh_token="r", expiry_date=NOW_MS - 1))

    result = check_access_token(store, now_ms=NOW_MS)

    assert result.ok
    assert result.detail.startswith("expired 2024-05-01 08:29 UTC")


def test_access_token_expired_without_refresh_token(store):
    store.save_token(Token(access_token="a", expiry_date=NOW_MS - 1))

    assert not check_access_token(store, now_ms=NOW_MS).ok


def test_access_token_valid(store):
    store.save_token(Token(access_token="a", refresh_token="r", expiry_date=NOW_MS + 30 * 60_000))

    result = check_access_token(store, now_ms=NOW_MS)

    assert result.ok
    assert "30 min left" in result.detail


def test_run_status_checks_uses_overrides():
    results = run_status_checks(checks=[lambda: CheckResult("X", True, "fine")])

    assert results == [CheckResult("X", True, "fine")]


def test_run_status_checks_default_set(store):
    names = [result.name for result in run_status_checks(store=store)]

    assert names == ["Credentials", "Token", "Access"]
