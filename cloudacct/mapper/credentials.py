"""
GCP service account credentials: JSON codec and semantic comparison.

The config carries credentials as raw JSON text. Two texts that differ only
in key order or whitespace describe the same key and must not show as a diff.
"""
import json
from dataclasses import astuple, fields
from typing import Optional

from cloudacct.errors import CredentialsError
from cloudacct.models.account import GcpCredentials

# Field name -> key in the downloaded key file
JSON_KEYS = {
    "type":              "type",
    "project_id":        "project_id",
    "private_key_id":    "private_key_id",
    "private_key":       "private_key",
    "client_email":      "client_email",
    "client_id":         "client_id",
    "auth_uri":          "auth_uri",
    "token_uri":         "token_uri",
    "provider_cert_url": "auth_provider_x509_cert_url",
    "client_cert_url":   "client_x509_cert_url",
}


def parse_credentials(text: str) -> GcpCredentials:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise CredentialsError(f"credentials_json is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CredentialsError("credentials_json must be a JSON object")

    values = {}
    for attr, key in JSON_KEYS.items():
        val = data.get(key)
        if val is None:
            val = ""
        if not isinstance(val, str):
            raise CredentialsError(
                f"credentials_json: '{key}' must be a string",
                details={"key": key},
            )
        values[attr] = val
    return GcpCredentials(**values)


def dump_credentials(creds: GcpCredentials) -> str:
    data = {JSON_KEYS[f.name]: getattr(creds, f.name) for f in fields(GcpCredentials)}
    return json.dumps(data, separators=(",", ":"))


def _try_parse(text: str) -> Optional[GcpCredentials]:
    try:
        return parse_credentials(text)
    except CredentialsError:
        return None


def credentials_equivalent(old_text: str, new_text: str) -> bool:
    """True when both texts decode to the same ten credential fields."""
    prev = _try_parse(old_text)
    if prev is None:
        return False
    cur = _try_parse(new_text)
    if cur is None:
        return False
    return astuple(prev) == astuple(cur)
