"""Profile normalization tests."""

import json

import pytest

from dropbox_oauth2.config import ApiVersion
from dropbox_oauth2.profile import NormalizedProfile, ProfileEmail, ProfileName, parse_profile
from tests.conftest import V1_PAYLOAD, V2_PAYLOAD


def test_v1_payload_is_normalized(v1_body):
    profile = parse_profile(v1_body, ApiVersion.V1)

    expected = {
        "provider": "dropbox",
        "id": "42",
        "displayName": "A B",
        "name": {"familyName": "B", "givenName": "A", "middleName": ""},
        "emails": [{"value": "a@b.com"}],
    }
    result = profile.to_dict()
    assert {key: result[key] for key in expected} == expected
    assert result["_raw"] == v1_body
    assert result["_json"] == V1_PAYLOAD


def test_v2_payload_is_normalized(v2_body):
    profile = parse_profile(v2_body, ApiVersion.V2)

    assert profile == NormalizedProfile(
        id="acc1",
        display_name="A B",
        name=ProfileName(family_name="B", given_name="A", middle_name=""),
        emails=[ProfileEmail(value="a@b.com")],
        provider="dropbox",
        raw=v2_body,
        json=V2_PAYLOAD,
    )


def test_version_string_is_accepted(v2_body):
    assert parse_profile(v2_body, "2").id == "acc1"


def test_numeric_v1_uid_becomes_string():
    body = json.dumps({**V1_PAYLOAD, "uid": 12345678})

    assert parse_profile(body, ApiVersion.V1).id == "12345678"


def test_missing_leaf_fields_become_none():
    profile = parse_profile(json.dumps({"account_id": "dbid:x", "name": {}}), ApiVersion.V2)

    assert profile.id == "dbid:x"
    assert profile.display_name is None
    assert profile.name == ProfileName(family_name=None, given_name=None, middle_name="")
    assert profile.emails == [ProfileEmail(value=None)]


@pytest.mark.parametrize("api_version, payload", [
    (ApiVersion.V1, {"uid": 1, "email": "a@b.com"}),
    (ApiVersion.V1, {"uid": 1, "name_details": "A B"}),
    (ApiVersion.V1, {"uid": 1, "name_details": None}),
    (ApiVersion.V2, {"account_id": "dbid:x"}),
    (ApiVersion.V2, {"account_id": "dbid:x", "name": "A B"}),
    (ApiVersion.V2, {"account_id": "dbid:x", "name": ["A", "B"]}),
])
def test_missing_or_non_object_name_is_rejected(api_version, payload):
    with pytest.raises(TypeError, match="must be a JSON object"):
        parse_profile(json.dumps(payload), api_version)


def test_v2_payload_read_as_v1_is_rejected(v2_body):
    with pytest.raises(TypeError, match="name_details"):
        parse_profile(v2_body, ApiVersion.V1)


def test_malformed_json_raises_decode_error():
    with pytest.raises(json.JSONDecodeError):
        parse_profile("<html>Service Unavailable</html>", ApiVersion.V1)


@pytest.mark.parametrize("body", ["null", "[]", '"text"', "42"])
def test_non_object_payload_is_rejected(body):
    with pytest.raises(TypeError):
        parse_profile(body, ApiVersion.V2)
