"""Credential entities: the OAuth client secret and the issued token."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Protocol

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ClientSecret:
    """OAuth2 application credentials issued by the identity provider."""

    client_id: str
    client_secret: str
    redirect_uri: str
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ClientSecret":
        """Build from Google's client secrets download or a flat mapping.

        Google wraps the values in a ``web`` (or ``installed``) section and lists
        redirect URIs; the first one is used.
        """
        section = payload.get("web") or payload.get("installed") or payload
        if not isinstance(section, Mapping):
            raise ValueError("client secrets must be a JSON object")

        redirect_uri = section.get("redirect_uri")
        if not redirect_uri:
            uris = section.get("redirect_uris") or []
            redirect_uri = uris[0] if uris else None

        missing = [
            name
            for name, value in (
                ("client_id", section.get("client_id")),
                ("client_secret", section.get("client_secret")),
                ("redirect_uri", redirect_uri),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"client secrets missing {', '.join(missing)}")

        return cls(
            client_id=str(section["client_id"]),
            client_secret=str(section["client_secret"]),
            redirect_uri=str(redirect_uri),
            auth_uri=str(section.get("auth_uri") or GOOGLE_AUTH_URI),
            token_uri=str(section.get("token_uri") or GOOGLE_TOKEN_URI),
        )


@dataclass(frozen=True)
class Token:
    """OAuth2 access/refresh pair plus expiry metadata.

    ``expiry_date`` is the access token expiry in epoch milliseconds.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    token_type: Optional[str] = None
    expiry_date: Optional[int] = None
    id_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Token":
        known = {f.name for f in fields(cls)}
        values = {key: data[key] for key in known if data.get(key) is not None}
        if "expiry_date" in values:
            values["expiry_date"] = int(values["expiry_date"])
        return cls(**values)

    @classmethod
    def from_token_response(cls, payload: Mapping[str, Any], *, now_ms: Optional[int] = None) -> "Token":
        """Translate a token endpoint response (``expires_in`` seconds) into a Token."""
        token = cls.from_dict(payload)
        expires_in = payload.get("expires_in")
        if expires_in is not None:
            base = now_ms if now_ms is not None else _now_ms()
            token = replace(token, expiry_date=base + int(expires_in) * 1000)
        return token

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}

    def merged_with(self, update: "Token") -> "Token":
        """Overlay the non-empty fields of ``update``; a refresh keeps the old refresh_token."""
        changes = {key: value for key, value in asdict(update).items() if value is not None}
        return replace(self, **changes)

    def expires_within(self, seconds: float, *, now_ms: Optional[int] = None) -> bool:
        if self.expiry_date is None:
            return False
        current = now_ms if now_ms is not None else _now_ms()
        return self.expiry_date <= current + int(seconds * 1000)


class TokenStorage(Protocol):
    """Abstraction for persisting OAuth token payloads."""

    def read_tokens(self) -> Optional[Dict[str, object]]:
        """Return persisted tokens if available, otherwise ``None``."""

    def save_tokens(self, tokens: Dict[str, object]) -> None:
        """Persist the provided token payload."""


__all__ = ["ClientSecret", "Token", "TokenStorage", "GOOGLE_AUTH_URI", "GOOGLE_TOKEN_URI"]
