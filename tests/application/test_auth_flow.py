import json
from urllib.parse import parse_qs, urlparse

import pytest

from drive_relay.application.auth_flow import build_authorization_url, exchange_code_for_token
from drive_relay.application.exceptions import ConfigMissing, InvalidGrant
from drive_relay.application.token_lifecycle import authenticated_client
from drive_relay.infrastructure.credential_store import CredentialStore
from tests.http_stubs import CLIENT_ID, SCOPES


def test_build_authorization_url_uses_configured_scopes(configured_settings):
    query = parse_qs(urlparse(build_authorization_url()).query)

    assert query["client_id"] == [CLIENT_ID]
    assert query["access_type"] == ["offline"]
    assert query["scope"][0].split(" ") == SCOPES


def test_build_authorization_url_with_explicit_scopes(store):
    url = build_authorization_url(["https://www.googleapis.com/auth/drive.file"], store=store)

    assert parse_qs(urlparse(url).query)["scope"] == ["https://www.googleapis.com/auth/drive.file"]


def test_build_authorization_url_missing_credentials(tmp_path):
    store = CredentialStore(tmp_path / "absent.json", tmp_path / "token.json")

    with pytest.raises(ConfigMissing):
        build_authorization_url(store=store)


def test_exchange_persists_token_and_later_loads_skip_token_endpoint(store, token_path, fake_google):
    token = exchange_code_for_token("VALIDCODE", store=store)

    saved = json.loads(token_path.read_text())
    assert saved["access_token"] == token.access_token
    assert saved["refresh_token"] == "refresh-1"
    assert len(fake_google.token_calls) == 1

    for _ in range(3):
        client = authenticated_client(store)
        assert client.credentials.access_token == token.access_token

    assert len(fake_google.token_calls) == 1


def test_replayed_code_is_invalid_grant(store, token_path, fake_google):
    exchange_code_for_token("VALIDCODE", store=store)
    first = token_path.read_text()

    with pytest.raises(InvalidGrant):
        exchange_code_for_token("VALIDCODE", store=store)

    assert token_path.read_text() == first


@pytest.mark.parametrize("code", [None, "", "not-a-real-code"])
def test_bad_codes_are_invalid_grant(store, token_path, fake_google, code):
    with pytest.raises(InvalidGrant):
        exchange_code_for_token(code, store=store)

    assert not token_path.exists()
