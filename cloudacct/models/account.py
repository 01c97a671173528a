"""
Typed cloud account records — one dataclass per provider kind.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Union


class CloudType(str, Enum):
    AWS     = "aws"
    AZURE   = "azure"
    GCP     = "gcp"
    ALIBABA = "alibaba"


# Scan order used when selecting the populated variant
CLOUD_TYPES = [CloudType.AWS, CloudType.AZURE, CloudType.GCP, CloudType.ALIBABA]


class AccountType(str, Enum):
    ACCOUNT      = "account"
    ORGANIZATION = "organization"


class ProtectionMode(str, Enum):
    MONITOR             = "MONITOR"
    MONITOR_AND_PROTECT = "MONITOR_AND_PROTECT"


@dataclass
class GcpCredentials:
    """Service account key, as found in the JSON key file."""
    type: str = ""
    project_id: str = ""
    private_key_id: str = ""
    private_key: str = ""
    client_email: str = ""
    client_id: str = ""
    auth_uri: str = ""
    token_uri: str = ""
    provider_cert_url: str = ""
    client_cert_url: str = ""


@dataclass
class CloudAccountBase:
    account_id: str = ""
    name: str = ""
    enabled: bool = True
    group_ids: List[str] = field(default_factory=list)

    cloud_type: ClassVar[CloudType]


@dataclass
class _ProtectedAccount(CloudAccountBase):
    account_type: AccountType = AccountType.ACCOUNT
    protection_mode: ProtectionMode = ProtectionMode.MONITOR


@dataclass
class AwsAccount(_ProtectedAccount):
    external_id: str = ""
    role_arn: str = ""

    cloud_type: ClassVar[CloudType] = CloudType.AWS


@dataclass
class AzureAccount(_ProtectedAccount):
    client_id: str = ""
    key: str = ""
    tenant_id: str = ""
    service_principal_id: str = ""
    monitor_flow_logs: bool = False

    cloud_type: ClassVar[CloudType] = CloudType.AZURE


@dataclass
class GcpAccount(_ProtectedAccount):
    compression_enabled: bool = False
    dataflow_enabled_project: str = ""
    flow_log_storage_bucket: str = ""
    credentials: GcpCredentials = field(default_factory=GcpCredentials)

    cloud_type: ClassVar[CloudType] = CloudType.GCP


@dataclass
class AlibabaAccount(CloudAccountBase):
    ram_arn: str = ""

    cloud_type: ClassVar[CloudType] = CloudType.ALIBABA


CloudAccount = Union[AwsAccount, AzureAccount, GcpAccount, AlibabaAccount]

ACCOUNT_CLASSES: Dict[CloudType, type] = {
    CloudType.AWS:     AwsAccount,
    CloudType.AZURE:   AzureAccount,
    CloudType.GCP:     GcpAccount,
    CloudType.ALIBABA: AlibabaAccount,
}

# Config field names holding secrets, per block
SENSITIVE_FIELDS: Dict[CloudType, FrozenSet[str]] = {
    CloudType.AWS:     frozenset({"external_id"}),
    CloudType.AZURE:   frozenset({"key"}),
    CloudType.GCP:     frozenset({"credentials_json"}),
    CloudType.ALIBABA: frozenset(),
}

# Config fields whose change requires a new account
FORCE_NEW_FIELDS: Dict[CloudType, FrozenSet[str]] = {
    CloudType.AWS:     frozenset(),
    CloudType.AZURE:   frozenset({"protection_mode"}),
    CloudType.GCP:     frozenset(),
    CloudType.ALIBABA: frozenset(),
}


def local_id(account: CloudAccount) -> str:
    """Platform id derived from the submitted record itself."""
    return account.account_id


SENSITIVE_PLACEHOLDER = "(sensitive value)"


def mask_fields(cloud_type: CloudType, block: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of an encoded block with non-empty secrets replaced."""
    hidden = SENSITIVE_FIELDS[CloudType(cloud_type)]
    return {k: (SENSITIVE_PLACEHOLDER if k in hidden and v else v) for k, v in block.items()}
