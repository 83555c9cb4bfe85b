"""Google OAuth2 client: builds consent URLs, exchanges codes, refreshes tokens
and issues bearer-authenticated requests against Google APIs."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Type
from urllib.parse import urlencode

import requests

from drive_relay.application.exceptions import (
    ApplicationError,
    InvalidGrant,
    RefreshFailed,
    RemoteApiError,
    Unauthorized,
)
from drive_relay.config import settings
from drive_relay.domain.credentials import ClientSecret, Token
from drive_relay.infrastructure.log_utils import log_message


def _payload(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _reason(payload: Dict[str, Any]) -> str:
    error = payload.get("error")
    if isinstance(error, dict):
        # Google API errors: {"error": {"code": 403, "message": "...", "status": "..."}}
        return str(error.get("message") or error.get("status") or "")
    parts = [str(value) for value in (error, payload.get("error_description")) if value]
    return ": ".join(parts)


class GoogleOAuthClient:
    """Client handle bound to one application secret and, once loaded, one Token."""

    def __init__(
        self,
        client_secret: ClientSecret,
        *,
        request_timeout: Optional[float] = None,
        refresh_margin_seconds: Optional[float] = None,
    ) -> None:
        self.client_secret = client_secret
        self._request_timeout = (
            request_timeout if request_timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        )
        self._refresh_margin = (
            refresh_margin_seconds
            if refresh_margin_seconds is not None
            else settings.TOKEN_REFRESH_MARGIN_SECONDS
        )
        self.credentials: Optional[Token] = None

    def set_credentials(self, token: Optional[Token]) -> None:
        self.credentials = token

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    @property
    def has_access_token(self) -> bool:
        return bool(self.credentials and self.credentials.access_token)

    # --- authorization code flow ---

    def generate_auth_url(
        self,
        scopes: Iterable[str],
        *,
        access_type: str = "offline",
        state: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> str:
        params = {
            "access_type": access_type,
            "scope": " ".join(scopes),
            "response_type": "code",
            "client_id": self.client_secret.client_id,
            "redirect_uri": self.client_secret.redirect_uri,
        }
        if state:
            params["state"] = state
        if prompt:
            params["prompt"] = prompt
        return f"{self.client_secret.auth_uri}?{urlencode(params)}"

    def get_token(self, code: str) -> Token:
        """Exchange an authorization code for a Token."""
        if not code or not code.strip():
            raise InvalidGrant("Authorization code is missing.")

        payload = self._post_token_endpoint(
            {
                "code": code.strip(),
                "client_id": self.client_secret.client_id,
                "client_secret": self.client_secret.client_secret,
                "redirect_uri": self.client_secret.redirect_uri,
                "grant_type": "authorization_code",
            },
            context="code exchange",
            rejection=InvalidGrant,
        )
        token = Token.from_token_response(payload)
        self.credentials = token
        return token

    # --- refresh ---

    def is_token_expiring(self, *, now_ms: Optional[int] = None) -> bool:
        """True when the loaded access token is expired or inside the refresh margin.

        A token without ``expiry_date`` is treated as valid; a token holding only a
        refresh_token needs a refresh before it can be used.
        """
        token = self.credentials
        if token is None:
            return False
        if not token.access_token:
            return bool(token.refresh_token)
        return token.expires_within(self._refresh_margin, now_ms=now_ms)

    def refresh_access_token(self) -> Token:
        """Exchange the refresh token for a new access token; returns the merged Token."""
        token = self.credentials
        if token is None or not token.refresh_token:
            raise RefreshFailed("No refresh token is available; re-authorize via /authenticate.")

        log_message("Refreshing Google access token.", "INFO")
        payload = self._post_token_endpoint(
            {
                "refresh_token": token.refresh_token,
                "client_id": self.client_secret.client_id,
                "client_secret": self.client_secret.client_secret,
                "grant_type": "refresh_token",
            },
            context="token refresh",
            rejection=RefreshFailed,
        )
        refreshed = token.merged_with(Token.from_token_response(payload))
        self.credentials = refreshed
        return refreshed

    # --- authenticated API calls ---

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send an authenticated request; 401 maps to Unauthorized, other failures to RemoteApiError."""
        token = self.credentials
        if token is None or not token.access_token:
            raise Unauthorized("No access token available; authorize via /authenticate first.")

        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"{token.token_type or 'Bearer'} {token.access_token}"
        kwargs.setdefault("timeout", self._request_timeout)

        try:
            response = requests.request(method, url, headers=headers, **kwargs)
        except requests.exceptions.RequestException as exc:
            log_message(f"{method} {url} failed: {exc}", "ERROR")
            raise RemoteApiError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 401:
            reason = _reason(_payload(response)) or "HTTP 401"
            raise Unauthorized(f"{url} rejected the access token: {reason}")
        if response.status_code >= 400:
            reason = _reason(_payload(response)) or f"HTTP {response.status_code}"
            raise RemoteApiError(
                f"{method} {url} failed: {reason}", http_status=response.status_code
            )
        return response

    def _post_token_endpoint(
        self,
        data: Dict[str, str],
        *,
        context: str,
        rejection: Type[ApplicationError],
    ) -> Dict[str, Any]:
        try:
            response = requests.post(self.client_secret.token_uri, data=data, timeout=self._request_timeout)
        except requests.exceptions.RequestException as exc:
            log_message(f"Token endpoint request failed during {context}: {exc}", "ERROR")
            raise RemoteApiError(f"Token endpoint unreachable during {context}: {exc}") from exc

        payload = _payload(response)
        if response.status_code >= 500:
            raise RemoteApiError(
                f"Token endpoint error during {context}: HTTP {response.status_code}",
                http_status=response.status_code,
            )
        if response.status_code >= 400 or payload.get("error"):
            reason = _reason(payload) or f"HTTP {response.status_code}"
            raise rejection(f"{context.capitalize()} rejected: {reason}")
        if not payload.get("access_token"):
            raise rejection(f"{context.capitalize()} returned no access_token")
        return payload


__all__ = ["GoogleOAuthClient"]
