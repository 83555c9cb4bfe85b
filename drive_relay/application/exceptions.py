"""Exception hierarchy for the relay's credential, authorization and upload paths."""

from __future__ import annotations


class ApplicationError(Exception):
    """Base exception for request-level failures.

    ``status_code`` is the HTTP status the front door answers with and
    ``public_message`` the text sent alongside it; the exception message itself
    may name local paths and stays in the log.
    """

    status_code = 500
    public_message = "The request could not be completed."


class ConfigMissing(ApplicationError):
    """Raised when the client secrets or token file is absent or unparsable."""

    status_code = 500
    public_message = "The server is missing its Google OAuth configuration."


class Unauthorized(ApplicationError):
    """Raised when no valid access token is available for an authenticated call."""

    status_code = 401
    public_message = "Not authorized with Google; visit /authenticate first."


class InvalidGrant(ApplicationError):
    """Raised when the provider rejects an authorization code."""

    status_code = 400
    public_message = "Google rejected the authorization code."


class RefreshFailed(ApplicationError):
    """Raised when the provider rejects a refresh token exchange."""

    status_code = 401
    public_message = "The stored Google token could not be refreshed; visit /authenticate again."


class RemoteApiError(ApplicationError):
    """Raised when a storage, profile or token endpoint call fails."""

    status_code = 502
    public_message = "A Google API call failed."

    def __init__(self, message: str, *, http_status: int | None = None):
        super().__init__(message)
        self.http_status = http_status


class PayloadTooLarge(ApplicationError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413
    public_message = "The uploaded file is too large."


__all__ = [
    "ApplicationError",
    "ConfigMissing",
    "Unauthorized",
    "InvalidGrant",
    "RefreshFailed",
    "RemoteApiError",
    "PayloadTooLarge",
]
