"""Google People API client for the signed-in user's profile."""

from __future__ import annotations

from typing import Any, Dict, Optional

from drive_relay.application.exceptions import RemoteApiError
from drive_relay.infrastructure.google_oauth_client import GoogleOAuthClient

PEOPLE_ME_URL = "https://people.googleapis.com/v1/people/me"
PROFILE_FIELDS = (
    "names,emailAddresses,photos,phoneNumbers,organizations,addresses,birthdays,"
    "genders,imClients,externalIds,skills,biographies,urls,metadata"
)


class PeopleClient:
    def __init__(self, oauth_client: GoogleOAuthClient) -> None:
        self._client = oauth_client

    def get_me(self, person_fields: str = PROFILE_FIELDS) -> Dict[str, Any]:
        response = self._client.request("GET", PEOPLE_ME_URL, params={"personFields": person_fields})
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteApiError("People API returned a non-JSON profile") from exc


def display_name(person: Dict[str, Any]) -> Optional[str]:
    for name in person.get("names") or []:
        if name.get("displayName"):
            return name["displayName"]
    return None


def email_addresses(person: Dict[str, Any]) -> list[str]:
    return [entry["value"] for entry in person.get("emailAddresses") or [] if entry.get("value")]


__all__ = ["PeopleClient", "PROFILE_FIELDS", "display_name", "email_addresses"]
