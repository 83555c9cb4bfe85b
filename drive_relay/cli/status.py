"""Local credential checks for the drive-relay CLI.

No network calls are made; the checks only read the client secrets and token
files the server itself relies on.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Sequence

from drive_relay.application.exceptions import ConfigMissing
from drive_relay.infrastructure.credential_store import CredentialStore


@dataclass
class CheckResult:
    """Represents a single credential check outcome."""

    name: str
    ok: bool
    detail: str


def _format_exception(exc: Exception) -> str:
    message = str(exc).strip()
    if not message:
        message = exc.__class__.__name__
    return message.splitlines()[0]


def _format_expiry(expiry_ms: int, now_ms: int) -> str:
    stamp = datetime.fromtimestamp(expiry_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    if expiry_ms <= now_ms:
        return f"expired {stamp}"
    minutes = (expiry_ms - now_ms) // 60000
    return f"valid until {stamp} ({minutes} min left)"


def check_client_secret(store: CredentialStore) -> CheckResult:
    try:
        secret = store.load_client_secret()
    except ConfigMissing as exc:
        return CheckResult(name="Credentials", ok=False, detail=_format_exception(exc))
    return CheckResult(
        name="Credentials",
        ok=True,
        detail=f"client {secret.client_id} -> {secret.redirect_uri}",
    )


def check_refresh_token(store: CredentialStore) -> CheckResult:
    try:
        token = store.load_token()
    except ConfigMissing as exc:
        return CheckResult(name="Token", ok=False, detail=_format_exception(exc))
    if token is None:
        return CheckResult(
            name="Token",
            ok=False,
            detail=f"{store.token_path.name} not found; run `drive-relay auth-url` or visit /authenticate",
        )
    if not token.refresh_token:
        return CheckResult(name="Token", ok=False, detail="stored token has no refresh_token; re-authorize")
    return CheckResult(name="Token", ok=True, detail="refresh token stored")


def check_access_token(store: CredentialStore, *, now_ms: int | None = None) -> CheckResult:
    """Report access token expiry; an expired token is fine while a refresh token exists."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    try:
        token = store.load_token()
    except ConfigMissing as exc:
        return CheckResult(name="Access", ok=False, detail=_format_exception(exc))
    if token is None or not token.access_token:
        return CheckResult(name="Access", ok=False, detail="no access token")
    if token.expiry_date is None:
        return CheckResult(name="Access", ok=True, detail="no expiry recorded")
    expired = token.expiry_date <= now_ms
    return CheckResult(
        name="Access",
        ok=not expired or bool(token.refresh_token),
        detail=_format_expiry(token.expiry_date, now_ms),
    )


def run_status_checks(
    *,
    store: CredentialStore | None = None,
    checks: Sequence[Callable[[], CheckResult]] | None = None,
) -> List[CheckResult]:
    """Executes credential checks, allowing override for testing."""

    if checks is None:
        store = store or CredentialStore.from_settings()
        checks = (
            lambda: check_client_secret(store),
            lambda: check_refresh_token(store),
            lambda: check_access_token(store),
        )

    return [check() for check in checks]
