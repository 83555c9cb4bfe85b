"""Turns the stored credentials into an authenticated client handle.

Every call re-reads ``credentials.json`` and ``token.json``; nothing is cached
between requests. Refreshes happen under the credential store lock so two
concurrent requests cannot overwrite each other's token.
"""

from __future__ import annotations

from typing import Optional

from drive_relay.application.exceptions import RefreshFailed, Unauthorized
from drive_relay.domain.credentials import Token
from drive_relay.infrastructure.credential_store import CredentialStore
from drive_relay.infrastructure.google_oauth_client import GoogleOAuthClient
from drive_relay.infrastructure.log_utils import log_message


def authenticated_client(store: Optional[CredentialStore] = None) -> GoogleOAuthClient:
    """Return a client handle preloaded with the stored token, refreshed if expiring.

    Raises ``ConfigMissing`` when the client secrets cannot be read and
    ``RefreshFailed`` when an expiring token cannot be refreshed. With no stored
    token the handle carries no credentials.
    """
    store = store or CredentialStore.from_settings()
    client = GoogleOAuthClient(store.load_client_secret())

    with store.transaction():
        token = store.load_token()
        if token is None:
            log_message("No stored token; authorize via /authenticate.", "WARN")
            return client

        client.set_credentials(token)
        if not client.is_token_expiring():
            return client

        log_message("Token is expired or about to expire. Refreshing token...", "INFO")
        try:
            refreshed = client.refresh_access_token()
        except RefreshFailed as exc:
            log_message(f"Error refreshing access token: {exc}", "ERROR")
            raise

        store.save_token(refreshed)
        log_message("Token refreshed successfully.", "INFO")
    return client


def force_refresh(store: Optional[CredentialStore] = None) -> Token:
    """Refresh the stored token regardless of its expiry and persist the result."""
    store = store or CredentialStore.from_settings()
    client = GoogleOAuthClient(store.load_client_secret())

    with store.transaction():
        token = store.load_token()
        if token is None or not token.refresh_token:
            raise Unauthorized("No stored refresh token; authorize via /authenticate first.")
        client.set_credentials(token)
        refreshed = client.refresh_access_token()
        store.save_token(refreshed)
    log_message("Token refreshed on request.", "INFO")
    return refreshed


__all__ = ["authenticated_client", "force_refresh"]
