"""
Composite id tests.
"""
import pytest

from cloudacct.errors import MalformedIdError, ValidationError
from cloudacct.mapper.identity import SEPARATOR, compose_id, parse_id
from cloudacct.models.account import CloudType
from cloudacct.models.resource import AccountIdentity


class TestComposeId:
    def test_format_is_type_colon_id(self):
        assert compose_id(CloudType.AWS, "123456789012") == "aws:123456789012"

    def test_accepts_plain_string_type(self):
        assert compose_id("alibaba", "5843") == "alibaba:5843"

    def test_unknown_type_rejected(self):
        with pytest.raises(MalformedIdError):
            compose_id("oci", "x")

    def test_empty_platform_id_rejected(self):
        with pytest.raises(MalformedIdError) as excinfo:
            compose_id(CloudType.AWS, "")
        assert excinfo.value.details == {"cloud_type": "aws"}

    def test_identity_str_uses_composite_form(self):
        assert str(AccountIdentity(CloudType.GCP, "my-project")) == "gcp:my-project"


class TestParseId:
    @pytest.mark.parametrize("cloud_type", list(CloudType))
    @pytest.mark.parametrize("platform_id", ["123456789012", "a1b2-c3d4", "sec-audit-prod"])
    def test_round_trip(self, cloud_type, platform_id):
        identity = parse_id(compose_id(cloud_type, platform_id))
        assert identity == AccountIdentity(cloud_type, platform_id)

    def test_splits_on_first_separator(self):
        identity = parse_id("azure:tenant:sub")
        assert identity.cloud_type == CloudType.AZURE
        assert identity.platform_id == "tenant:sub"

    def test_missing_separator(self):
        with pytest.raises(MalformedIdError) as excinfo:
            parse_id("aws123456789012")
        assert excinfo.value.code == "malformed_id"

    def test_malformed_is_validation_error(self):
        with pytest.raises(ValidationError):
            parse_id("")

    def test_unknown_cloud_type(self):
        with pytest.raises(MalformedIdError):
            parse_id("oci:ocid1.tenancy")

    def test_empty_platform_id(self):
        with pytest.raises(MalformedIdError):
            parse_id("gcp" + SEPARATOR)
