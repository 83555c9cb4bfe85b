"""Google Drive v3 client: creates files from local paths."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from drive_relay.application.exceptions import RemoteApiError, Unauthorized
from drive_relay.domain.credentials import Token
from drive_relay.infrastructure.google_oauth_client import GoogleOAuthClient
from drive_relay.infrastructure.log_utils import log_message

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def credentials_for(token: Token) -> Credentials:
    """Bearer-only credentials; refreshing stays with the token lifecycle."""
    return Credentials(token=token.access_token)


def build_drive_service(token: Token, *, timeout: Optional[float] = None):
    http = AuthorizedHttp(credentials_for(token), http=httplib2.Http(timeout=timeout))
    return build("drive", "v3", http=http, cache_discovery=False)


class DriveClient:
    """Thin wrapper over the Drive ``files.create`` media upload."""

    def __init__(self, oauth_client: GoogleOAuthClient, *, service: Any = None) -> None:
        self._client = oauth_client
        self._service = service

    def _drive(self):
        if self._service is None:
            token = self._client.credentials
            if token is None or not token.access_token:
                raise Unauthorized("No access token available; authorize via /authenticate first.")
            self._service = build_drive_service(token, timeout=self._client.request_timeout)
        return self._service

    def create_file(
        self,
        path: Path | str,
        name: str,
        *,
        media_type: str = DEFAULT_MEDIA_TYPE,
        fields: str = "id",
    ) -> Dict[str, Any]:
        """Upload ``path`` as a new Drive file called ``name`` and return the requested fields."""
        media = MediaFileUpload(str(path), mimetype=media_type)
        try:
            file_data = (
                self._drive()
                .files()
                .create(body={"name": name}, media_body=media, fields=fields)
                .execute()
            )
        except HttpError as exc:
            status = exc.resp.status
            if status == 401:
                raise Unauthorized(f"Drive rejected the access token: {exc.reason}") from exc
            log_message(f"Drive files.create failed with HTTP {status}: {exc.reason}", "ERROR")
            raise RemoteApiError(f"Drive files.create failed: {exc.reason}", http_status=status) from exc
        except (httplib2.HttpLib2Error, OSError) as exc:
            log_message(f"Drive files.create failed: {exc}", "ERROR")
            raise RemoteApiError(f"Drive files.create failed: {exc}") from exc
        finally:
            media.stream().close()

        if "id" in fields.split(",") and not (file_data or {}).get("id"):
            raise RemoteApiError(f"Drive response is missing the file id: {file_data}")

        log_message(f"Uploaded '{name}' to Drive as {file_data.get('id')}.", "INFO")
        return file_data


__all__ = ["DriveClient", "build_drive_service", "credentials_for", "DEFAULT_MEDIA_TYPE"]
