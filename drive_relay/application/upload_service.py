"""Upload handling: stage the incoming file, push it to Drive, greet the owner."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from drive_relay.application.exceptions import PayloadTooLarge, Unauthorized
from drive_relay.application.token_lifecycle import authenticated_client
from drive_relay.config import settings
from drive_relay.infrastructure.credential_store import CredentialStore
from drive_relay.infrastructure.drive_client import DriveClient
from drive_relay.infrastructure.google_oauth_client import GoogleOAuthClient
from drive_relay.infrastructure.log_utils import log_message
from drive_relay.infrastructure.people_client import PeopleClient, display_name, email_addresses

CHUNK_SIZE = 1024 * 1024
FALLBACK_GREETING_NAME = "there"


@dataclass
class UploadResult:
    file_id: str
    file_name: str
    display_name: str
    email: Optional[str] = None

    def message(self) -> str:
        return f"Hi! {self.display_name}, File uploaded successfully! File ID: {self.file_id}"


@contextmanager
def staged_upload(
    source: BinaryIO,
    *,
    upload_dir: Optional[Path] = None,
    max_bytes: Optional[int] = None,
) -> Iterator[Path]:
    """Copy ``source`` to ``<upload_dir>/<random hex>`` and remove it on exit, whatever happens."""
    directory = Path(upload_dir or settings.UPLOAD_DIR)
    limit = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / uuid.uuid4().hex

    try:
        written = 0
        with path.open("wb") as handle:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if limit and written > limit:
                    raise PayloadTooLarge(f"Upload exceeds the {limit} byte limit.")
                handle.write(chunk)
        log_message(f"Staged {written} bytes at {path}.", "DEBUG")
        yield path
    finally:
        path.unlink(missing_ok=True)


def upload_file(
    staged_path: Path,
    original_name: str,
    *,
    client: Optional[GoogleOAuthClient] = None,
    store: Optional[CredentialStore] = None,
) -> UploadResult:
    """Send a staged file to Drive under ``original_name`` and look up who owns the account."""
    client = client or authenticated_client(store)
    if not client.has_access_token:
        raise Unauthorized("No access token available; authorize via /authenticate first.")

    file_data = DriveClient(client).create_file(staged_path, original_name)
    person = PeopleClient(client).get_me()

    name = display_name(person)
    emails = email_addresses(person)
    log_message(f"User info: name={name!r} email={', '.join(emails) or 'n/a'}", "INFO")

    return UploadResult(
        file_id=file_data["id"],
        file_name=original_name,
        display_name=name or (emails[0] if emails else FALLBACK_GREETING_NAME),
        email=emails[0] if emails else None,
    )


def handle_upload(
    source: BinaryIO,
    original_name: Optional[str],
    *,
    store: Optional[CredentialStore] = None,
    upload_dir: Optional[Path] = None,
    max_bytes: Optional[int] = None,
) -> UploadResult:
    with staged_upload(source, upload_dir=upload_dir, max_bytes=max_bytes) as staged:
        return upload_file(staged, original_name or staged.name, store=store)


__all__ = ["UploadResult", "staged_upload", "upload_file", "handle_upload"]
