"""
Normalized user profile built from Dropbox account info.

Dropbox API v1 (``/1/account/info``) and v2
(``/2/users/get_current_account``) return differently shaped JSON; both are
mapped into the same NormalizedProfile.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import ApiVersion

PROVIDER = "dropbox"


@dataclass
class ProfileName:
    family_name: Optional[str] = None
    given_name: Optional[str] = None
    # Dropbox does not expose middle names
    middle_name: str = ""


@dataclass
class ProfileEmail:
    value: Optional[str] = None


@dataclass
class NormalizedProfile:
    """Provider-agnostic identity of the authenticated Dropbox user."""

    id: Optional[str]
    display_name: Optional[str]
    name: ProfileName
    emails: List[ProfileEmail]
    provider: str = PROVIDER

    # Response body and parsed payload, for callers needing other fields
    raw: str = field(default="", repr=False)
    json: Any = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Return the profile in the conventional strategy-profile layout."""
        return {
            "provider": self.provider,
            "id": self.id,
            "displayName": self.display_name,
            "name": {
                "familyName": self.name.family_name,
                "givenName": self.name.given_name,
                "middleName": self.name.middle_name,
            },
            "emails": [{"value": email.value} for email in self.emails],
            "_raw": self.raw,
            "_json": self.json,
        }


def _as_id(value) -> Optional[str]:
    return None if value is None else str(value)


def _object_field(data: dict, key: str) -> dict:
    value = data.get(key)
    if not isinstance(value, dict):
        raise TypeError(
            f"Dropbox account info field {key!r} must be a JSON object, got {type(value).__name__}"
        )
    return value


def _normalize_v1(data: dict) -> NormalizedProfile:
    name_details = _object_field(data, "name_details")
    return NormalizedProfile(
        id=_as_id(data.get("uid")),
        display_name=data.get("display_name"),
        name=ProfileName(
            family_name=name_details.get("surname"),
            given_name=name_details.get("given_name"),
        ),
        emails=[ProfileEmail(value=data.get("email"))],
    )


def _normalize_v2(data: dict) -> NormalizedProfile:
    name = _object_field(data, "name")
    return NormalizedProfile(
        id=_as_id(data.get("account_id")),
        display_name=name.get("display_name"),
        name=ProfileName(
            family_name=name.get("surname"),
            given_name=name.get("given_name"),
        ),
        emails=[ProfileEmail(value=data.get("email"))],
    )


NORMALIZERS: Dict[ApiVersion, Callable[[dict], NormalizedProfile]] = {
    ApiVersion.V1: _normalize_v1,
    ApiVersion.V2: _normalize_v2,
}


def parse_profile(body: str, api_version: ApiVersion) -> NormalizedProfile:
    """
    Parse a Dropbox account-info response into a NormalizedProfile.

    Args:
        body: Raw response body
        api_version: API version the body was fetched from

    Returns:
        NormalizedProfile with ``raw`` and ``json`` attached

    Raises:
        json.JSONDecodeError: the body is not valid JSON
        TypeError: the payload, or its name object, is not a JSON object
    """
    data = json.loads(body)
    if not isinstance(data, dict):
        raise TypeError(
            f"Dropbox account info must be a JSON object, got {type(data).__name__}"
        )

    profile = NORMALIZERS[ApiVersion.parse(api_version)](data)
    profile.raw = body
    profile.json = data
    return profile
