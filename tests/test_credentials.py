"""
GCP credentials codec and diff suppression tests.
"""
import json
import os

import pytest

from cloudacct.errors import CredentialsError
from cloudacct.mapper.credentials import (
    credentials_equivalent,
    dump_credentials,
    parse_credentials,
)
from cloudacct.models.account import GcpCredentials

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")


def _key_text() -> str:
    with open(os.path.join(FIXTURES, "gcp_key.json")) as fh:
        return fh.read()


def _reordered(text: str) -> str:
    data = json.loads(text)
    return json.dumps(dict(reversed(list(data.items()))), indent=4)


class TestParseCredentials:
    def test_fields_mapped_from_key_file(self):
        creds = parse_credentials(_key_text())
        assert creds.type == "service_account"
        assert creds.project_id == "sec-audit-prod"
        assert creds.provider_cert_url == "https://www.googleapis.com/oauth2/v1/certs"
        assert creds.client_cert_url.startswith("https://www.googleapis.com/robot/v1/metadata/x509/")

    def test_missing_keys_are_empty(self):
        creds = parse_credentials('{"type": "service_account"}')
        assert creds == GcpCredentials(type="service_account")

    def test_invalid_json(self):
        with pytest.raises(CredentialsError):
            parse_credentials("{not json")

    def test_non_object(self):
        with pytest.raises(CredentialsError):
            parse_credentials('["service_account"]')

    def test_non_string_field(self):
        with pytest.raises(CredentialsError):
            parse_credentials('{"client_id": 1048}')

    def test_dump_then_parse_keeps_all_fields(self):
        creds = parse_credentials(_key_text())
        assert parse_credentials(dump_credentials(creds)) == creds

    def test_dump_uses_key_file_names(self):
        data = json.loads(dump_credentials(GcpCredentials(provider_cert_url="p", client_cert_url="c")))
        assert data["auth_provider_x509_cert_url"] == "p"
        assert data["client_x509_cert_url"] == "c"
        assert len(data) == 10


class TestCredentialsEquivalent:
    def test_reflexive(self):
        text = _key_text()
        assert credentials_equivalent(text, text)

    def test_key_order_and_whitespace_ignored(self):
        text = _key_text()
        assert credentials_equivalent(text, _reordered(text))

    def test_symmetric(self):
        a = _key_text()
        b = _reordered(a)
        assert credentials_equivalent(a, b) == credentials_equivalent(b, a)

    def test_unknown_keys_ignored(self):
        data = json.loads(_key_text())
        data.pop("universe_domain")
        assert credentials_equivalent(_key_text(), json.dumps(data))

    @pytest.mark.parametrize("key", [
        "type", "project_id", "private_key_id", "private_key", "client_email",
        "client_id", "auth_uri", "token_uri", "auth_provider_x509_cert_url",
        "client_x509_cert_url",
    ])
    def test_any_field_change_detected(self, key):
        data = json.loads(_key_text())
        data[key] = data[key] + "-changed"
        assert not credentials_equivalent(_key_text(), json.dumps(data))

    def test_old_unparseable(self):
        assert not credentials_equivalent("", _key_text())

    def test_new_unparseable(self):
        assert not credentials_equivalent(_key_text(), "{")

    def test_both_unparseable(self):
        assert not credentials_equivalent("nope", "nope")
