"""Authorization code flow: consent URL and code-for-token exchange.

No session state is kept between the redirect and the callback; the code and
the client secret are enough to finish the exchange.
"""

from __future__ import annotations

from typing import Iterable, Optional

from drive_relay.config import settings
from drive_relay.domain.credentials import Token
from drive_relay.infrastructure.credential_store import CredentialStore
from drive_relay.infrastructure.google_oauth_client import GoogleOAuthClient
from drive_relay.infrastructure.log_utils import log_message


def build_authorization_url(
    scopes: Optional[Iterable[str]] = None,
    *,
    store: Optional[CredentialStore] = None,
) -> str:
    store = store or CredentialStore.from_settings()
    client = GoogleOAuthClient(store.load_client_secret())
    requested = list(scopes) if scopes is not None else list(settings.OAUTH_SCOPES)
    return client.generate_auth_url(requested, access_type="offline")


def exchange_code_for_token(code: Optional[str], *, store: Optional[CredentialStore] = None) -> Token:
    """Exchange ``code`` at the token endpoint and persist the resulting Token."""
    store = store or CredentialStore.from_settings()
    client = GoogleOAuthClient(store.load_client_secret())

    token = client.get_token(code or "")
    with store.transaction():
        store.save_token(token)
    if not token.refresh_token:
        log_message(
            "Provider issued no refresh_token; revoke the app's access and re-authorize "
            "if the stored token cannot be refreshed later.",
            "WARN",
        )
    return token


__all__ = ["build_authorization_url", "exchange_code_for_token"]
