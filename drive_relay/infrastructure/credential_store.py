"""Local credential files: client secrets (read-only) and the issued token."""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from drive_relay.application.exceptions import ConfigMissing
from drive_relay.config import settings
from drive_relay.domain.credentials import ClientSecret, Token, TokenStorage
from drive_relay.infrastructure.log_utils import log_message
from drive_relay.infrastructure.token_storage import JsonFileTokenStorage


class CredentialStore:
    """Reads ``credentials.json`` and reads/writes ``token.json``."""

    def __init__(
        self,
        credentials_path: Path | str,
        token_path: Path | str,
        *,
        token_storage: Optional[TokenStorage] = None,
    ) -> None:
        self.credentials_path = Path(credentials_path)
        self.token_path = Path(token_path)
        self._token_storage = token_storage or JsonFileTokenStorage(self.token_path)

    @classmethod
    def from_settings(cls) -> "CredentialStore":
        return cls(settings.CREDENTIALS_PATH, settings.TOKEN_PATH)

    def load_client_secret(self) -> ClientSecret:
        if not self.credentials_path.exists():
            raise ConfigMissing(f"Client secrets file not found: {self.credentials_path}")
        try:
            payload = json.loads(self.credentials_path.read_text(encoding="utf-8"))
            return ClientSecret.from_payload(payload)
        except (ValueError, TypeError, AttributeError) as exc:
            raise ConfigMissing(f"Client secrets file {self.credentials_path} is malformed: {exc}") from exc

    def load_token(self) -> Optional[Token]:
        try:
            payload = self._token_storage.read_tokens()
        except (OSError, ValueError) as exc:
            raise ConfigMissing(f"Token file {self.token_path} could not be read: {exc}") from exc
        if not payload:
            return None
        if not isinstance(payload, dict):
            raise ConfigMissing(f"Token file {self.token_path} does not hold a JSON object")
        try:
            return Token.from_dict(payload)
        except (TypeError, ValueError) as exc:
            raise ConfigMissing(f"Token file {self.token_path} is malformed: {exc}") from exc

    def save_token(self, token: Token) -> None:
        self._token_storage.save_tokens(token.to_dict())
        log_message(f"Token saved to {self.token_path}.", "INFO")

    @contextmanager
    def transaction(self) -> Iterator["CredentialStore"]:
        """Hold the token file lock across a read-modify-write sequence."""
        lock = getattr(self._token_storage, "lock", None)
        if lock is None:
            yield self
            return
        with lock:
            yield self


__all__ = ["CredentialStore"]
