"""
Parser tests — verify cloud account resources are extracted from each fixture.
"""
import json
import os
import shutil

import pytest

from cloudacct.mapper.credentials import parse_credentials
from cloudacct.mapper.variant import decode
from cloudacct.models.account import CloudType

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")


# --------------------------------------------------------- Terraform
class TestTerraformParser:
    def setup_method(self):
        from cloudacct.parsers import terraform
        self.parser = terraform

    def _by_name(self):
        resources = self.parser.parse_file(os.path.join(FIXTURES, "accounts.tf"))
        return {r.name: r for r in resources}

    def test_resource_count(self):
        resources = self.parser.parse_file(os.path.join(FIXTURES, "accounts.tf"))
        assert len(resources) == 4

    def test_source_format_is_terraform(self):
        for r in self.parser.parse_file(os.path.join(FIXTURES, "accounts.tf")):
            assert r.source_format == "terraform"
            assert r.qualified_name.startswith("prismacloud_cloud_account.")

    def test_each_resource_decodes_to_its_cloud_type(self):
        expected = {
            "aws_prod": CloudType.AWS,
            "azure_corp": CloudType.AZURE,
            "gcp_audit": CloudType.GCP,
            "alibaba_cn": CloudType.ALIBABA,
        }
        for name, r in self._by_name().items():
            cloud_type, _, _ = decode(r.config)
            assert cloud_type == expected[name]

    def test_provider_flags_kept(self):
        resources = self._by_name()
        assert resources["aws_prod"].config["disable_on_destroy"] is True
        assert resources["azure_corp"].config["update_on_create"] is True

    def test_file_call_inlined(self):
        gcp = self._by_name()["gcp_audit"]
        _, _, account = decode(gcp.config)
        with open(os.path.join(FIXTURES, "gcp_key.json")) as fh:
            assert account.credentials == parse_credentials(fh.read())

    def test_block_values(self):
        _, name, account = decode(self._by_name()["alibaba_cn"].config)
        assert name == "alibaba-cn"
        assert account.enabled is False
        assert account.group_ids == ["ag-4"]

    def test_tf_json_syntax(self):
        resources = self.parser.parse_file(os.path.join(FIXTURES, "accounts.tf.json"))
        assert len(resources) == 1
        assert resources[0].source_format == "terraform-json"
        cloud_type, name, _ = decode(resources[0].config)
        assert cloud_type == CloudType.ALIBABA
        assert name == "alibaba-json"

    def test_quoted_labels_and_strings(self):
        # Shape emitted by python-hcl2 8.x: labels and strings keep their quotes
        data = {
            "resource": [{
                '"prismacloud_cloud_account"': {
                    '"aws_prod"': {
                        "disable_on_destroy": True,
                        "aws": [{
                            "account_id": '"123456789012"',
                            "external_id": '"ext"',
                            "group_ids": ['"ag-1"'],
                            "name": '"aws-prod"',
                            "role_arn": '"arn:aws:iam::123456789012:role/r"',
                            "__is_block__": True,
                        }],
                        "__is_block__": True,
                    },
                },
            }],
        }
        resources = self.parser._extract(data, os.path.join(FIXTURES, "main.tf"), "terraform")
        assert [r.name for r in resources] == ["aws_prod"]
        assert resources[0].qualified_name == "prismacloud_cloud_account.aws_prod"
        assert resources[0].config["disable_on_destroy"] is True
        cloud_type, name, account = decode(resources[0].config)
        assert cloud_type == CloudType.AWS
        assert name == "aws-prod"
        assert account.group_ids == ["ag-1"]

    def test_other_resource_types_ignored(self, tmp_path):
        tf = tmp_path / "main.tf"
        tf.write_text('resource "aws_s3_bucket" "b" {\n  bucket = "x"\n}\n')
        assert self.parser.parse_file(str(tf)) == []

    def test_parse_directory(self, tmp_path):
        shutil.copy(os.path.join(FIXTURES, "accounts.tf"), tmp_path / "main.tf")
        shutil.copy(os.path.join(FIXTURES, "gcp_key.json"), tmp_path / "gcp_key.json")
        (tmp_path / "README.md").write_text("# accounts")
        resources = self.parser.parse_directory(str(tmp_path))
        assert len(resources) == 4

    def test_invalid_file_skipped(self, tmp_path):
        bad = tmp_path / "bad.tf"
        bad.write_text("this is not valid hcl {{{")
        assert self.parser.parse_file(str(bad)) == []

    def test_nonexistent_file_returns_empty(self):
        assert self.parser.parse_file("/nonexistent/path/main.tf") == []


# --------------------------------------------------------- Format Detection
class TestFormatDetection:
    def setup_method(self):
        from cloudacct import detect
        self.detect = detect

    def test_tf_extension(self, tmp_path):
        f = tmp_path / "main.tf"
        f.write_text('resource "aws_s3_bucket" "b" {}')
        assert self.detect.detect_format(str(f)) == "terraform"

    def test_tf_json_extension(self):
        assert self.detect.detect_format(os.path.join(FIXTURES, "accounts.tf.json")) == "terraform-json"

    def test_plain_json_with_accounts(self, tmp_path):
        f = tmp_path / "accounts.json"
        f.write_text(json.dumps({"resource": [{"prismacloud_cloud_account": {}}]}))
        assert self.detect.detect_format(str(f)) == "terraform-json"

    def test_credentials_json_is_unknown(self):
        assert self.detect.detect_format(os.path.join(FIXTURES, "gcp_key.json")) == "unknown"

    def test_unknown_returns_unknown(self, tmp_path):
        f = tmp_path / "random.txt"
        f.write_text("hello world")
        assert self.detect.detect_format(str(f)) == "unknown"
