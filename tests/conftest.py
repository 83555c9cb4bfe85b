import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from drive_relay import logging_setup
from drive_relay.config import settings
from drive_relay.infrastructure.credential_store import CredentialStore
from tests.http_stubs import CLIENT_ID, CLIENT_SECRET, REDIRECT_URI, FakeGoogle


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path_factory):
    log_dir = tmp_path_factory.mktemp("logs")
    logging_setup.configure_logging(log_path=log_dir / "relay_history.log", console=False)
    yield
    logging_setup.reset_logging()


@pytest.fixture()
def credentials_file(tmp_path) -> Path:
    path = tmp_path / "credentials.json"
    path.write_text(
        json.dumps(
            {
                "web": {
                    "client_id": CLIENT_ID,
                    "client_secret": CLIENT_SECRET,
                    "redirect_uris": [REDIRECT_URI],
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def token_path(tmp_path) -> Path:
    return tmp_path / "token.json"


@pytest.fixture()
def store(credentials_file, token_path) -> CredentialStore:
    return CredentialStore(credentials_file, token_path)


@pytest.fixture()
def fake_google(monkeypatch) -> FakeGoogle:
    fake = FakeGoogle()
    fake.install(monkeypatch)
    return fake


@pytest.fixture()
def configured_settings(monkeypatch, tmp_path, credentials_file, token_path):
    """Point the global settings at per-test files."""
    monkeypatch.setattr(settings, "CREDENTIALS_PATH", credentials_file)
    monkeypatch.setattr(settings, "TOKEN_PATH", token_path)
    monkeypatch.setattr(settings, "UPLOAD_DIR", tmp_path / "uploads")
    monkeypatch.setattr(settings, "AUTH_REDIRECT_DELAY_SECONDS", 0.0)
    return settings
