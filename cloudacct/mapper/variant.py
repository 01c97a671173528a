"""
Translate between the untyped config tree and the typed account variants.

The tree holds one slot per cloud type (``aws``, ``azure``, ``gcp``,
``alibaba``). Each slot is a block list with at most one mapping, which is
how both Terraform state and python-hcl2 represent nested blocks.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from rich.console import Console

from cloudacct.config import Settings
from cloudacct.errors import (
    CredentialsError,
    MultipleVariantsSelectedError,
    NoVariantSelectedError,
    ValidationError,
)
from cloudacct.mapper.credentials import dump_credentials, parse_credentials
from cloudacct.models.account import (
    CLOUD_TYPES,
    AccountType,
    AlibabaAccount,
    AwsAccount,
    AzureAccount,
    CloudAccount,
    CloudType,
    GcpAccount,
    GcpCredentials,
    ProtectionMode,
)

console = Console(stderr=True)


# ------------------------------------------------------------------ field readers

def get_block(tree: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    """Return the populated mapping in slot ``key``, or None."""
    val = tree.get(key)
    if isinstance(val, dict):
        return val or None
    if isinstance(val, list):
        blocks = [b for b in val if isinstance(b, dict) and b]
        if len(blocks) > 1:
            raise ValidationError(f"'{key}': at most one block is allowed, got {len(blocks)}")
        return blocks[0] if blocks else None
    return None


def _str(x: Dict[str, Any], key: str, required: bool = False) -> str:
    val = x.get(key)
    if val is None:
        val = ""
    if not isinstance(val, str):
        raise ValidationError(f"'{key}' must be a string, got {type(val).__name__}")
    if required and not val:
        raise ValidationError(f"'{key}' is required", details={"field": key})
    return val


def _bool(x: Dict[str, Any], key: str, default: bool) -> bool:
    val = x.get(key)
    if val is None:
        return default
    if not isinstance(val, bool):
        raise ValidationError(f"'{key}' must be a bool, got {type(val).__name__}")
    return val


def _group_ids(x: Dict[str, Any]) -> List[str]:
    val = x.get("group_ids")
    if not val:
        raise ValidationError("'group_ids' is required and must not be empty", details={"field": "group_ids"})
    if not isinstance(val, list) or not all(isinstance(g, str) for g in val):
        raise ValidationError("'group_ids' must be a list of strings")
    return list(val)


def _enum(x: Dict[str, Any], key: str, enum_cls, default):
    val = x.get(key)
    if val is None or val == "":
        return default
    try:
        return enum_cls(val)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(
            f"'{key}' must be one of {allowed}, got {val!r}",
            details={"field": key},
        ) from None


def _base(x: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "account_id": _str(x, "account_id", required=True),
        "name":       _str(x, "name", required=True),
        "enabled":    _bool(x, "enabled", True),
        "group_ids":  _group_ids(x),
    }


def _protection(x: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "account_type":    _enum(x, "account_type", AccountType, AccountType.ACCOUNT),
        "protection_mode": _enum(x, "protection_mode", ProtectionMode, ProtectionMode.MONITOR),
    }


# ------------------------------------------------------------------ per-kind codecs

def _decode_aws(x: Dict[str, Any], settings: Settings) -> AwsAccount:
    return AwsAccount(
        **_base(x),
        **_protection(x),
        external_id=_str(x, "external_id", required=True),
        role_arn=_str(x, "role_arn", required=True),
    )


def _encode_aws(v: AwsAccount) -> Dict[str, Any]:
    return {
        "account_id":      v.account_id,
        "enabled":         v.enabled,
        "external_id":     v.external_id,
        "group_ids":       list(v.group_ids),
        "name":            v.name,
        "role_arn":        v.role_arn,
        "protection_mode": v.protection_mode.value,
        "account_type":    v.account_type.value,
    }


def _decode_azure(x: Dict[str, Any], settings: Settings) -> AzureAccount:
    return AzureAccount(
        **_base(x),
        **_protection(x),
        client_id=_str(x, "client_id", required=True),
        key=_str(x, "key", required=True),
        tenant_id=_str(x, "tenant_id", required=True),
        service_principal_id=_str(x, "service_principal_id", required=True),
        monitor_flow_logs=_bool(x, "monitor_flow_logs", False),
    )


def _encode_azure(v: AzureAccount) -> Dict[str, Any]:
    return {
        "account_id":           v.account_id,
        "enabled":              v.enabled,
        "group_ids":            list(v.group_ids),
        "name":                 v.name,
        "client_id":            v.client_id,
        "key":                  v.key,
        "monitor_flow_logs":    v.monitor_flow_logs,
        "tenant_id":            v.tenant_id,
        "service_principal_id": v.service_principal_id,
        "protection_mode":      v.protection_mode.value,
        "account_type":         v.account_type.value,
    }


def _decode_gcp(x: Dict[str, Any], settings: Settings) -> GcpAccount:
    raw = _str(x, "credentials_json", required=True)
    try:
        creds = parse_credentials(raw)
    except CredentialsError as exc:
        if settings.strict_credentials:
            raise
        console.print(f"[yellow]Warning:[/yellow] ignoring undecodable GCP credentials: {exc.message}")
        creds = GcpCredentials()

    return GcpAccount(
        **_base(x),
        **_protection(x),
        compression_enabled=_bool(x, "compression_enabled", False),
        dataflow_enabled_project=_str(x, "dataflow_enabled_project"),
        flow_log_storage_bucket=_str(x, "flow_log_storage_bucket"),
        credentials=creds,
    )


def _encode_gcp(v: GcpAccount) -> Dict[str, Any]:
    return {
        "account_id":               v.account_id,
        "enabled":                  v.enabled,
        "group_ids":                list(v.group_ids),
        "name":                     v.name,
        "compression_enabled":      v.compression_enabled,
        "dataflow_enabled_project": v.dataflow_enabled_project,
        "flow_log_storage_bucket":  v.flow_log_storage_bucket,
        "credentials_json":         dump_credentials(v.credentials),
        "protection_mode":          v.protection_mode.value,
        "account_type":             v.account_type.value,
    }


def _decode_alibaba(x: Dict[str, Any], settings: Settings) -> AlibabaAccount:
    return AlibabaAccount(
        **_base(x),
        ram_arn=_str(x, "ram_arn", required=True),
    )


def _encode_alibaba(v: AlibabaAccount) -> Dict[str, Any]:
    return {
        "account_id": v.account_id,
        "group_ids":  list(v.group_ids),
        "name":       v.name,
        "ram_arn":    v.ram_arn,
        "enabled":    v.enabled,
    }


CODECS: Dict[CloudType, Tuple[Callable[[Dict[str, Any], Settings], CloudAccount], Callable[[Any], Dict[str, Any]]]] = {
    CloudType.AWS:     (_decode_aws, _encode_aws),
    CloudType.AZURE:   (_decode_azure, _encode_azure),
    CloudType.GCP:     (_decode_gcp, _encode_gcp),
    CloudType.ALIBABA: (_decode_alibaba, _encode_alibaba),
}


# ------------------------------------------------------------------ public API

def selected_types(tree: Dict[str, Any]) -> List[CloudType]:
    """Cloud types whose slot is populated, in scan order."""
    return [ct for ct in CLOUD_TYPES if get_block(tree, ct.value) is not None]


def decode(tree: Dict[str, Any], settings: Optional[Settings] = None) -> Tuple[CloudType, str, CloudAccount]:
    """
    Build the typed account from a config tree.

    Returns ``(cloud_type, name, account)``.
    """
    settings = settings or Settings()
    selected = selected_types(tree)
    if not selected:
        raise NoVariantSelectedError(
            "no cloud account block configured: expected one of "
            + ", ".join(ct.value for ct in CLOUD_TYPES)
        )
    if len(selected) > 1:
        names = [ct.value for ct in selected]
        if settings.strict_variants:
            raise MultipleVariantsSelectedError(
                f"only one cloud account block may be set, got: {', '.join(names)}",
                details={"selected": names},
            )
        console.print(
            f"[yellow]Warning:[/yellow] multiple cloud account blocks set ({', '.join(names)}); "
            f"using '{names[0]}'"
        )

    cloud_type = selected[0]
    decoder, _ = CODECS[cloud_type]
    account = decoder(get_block(tree, cloud_type.value), settings)
    return cloud_type, account.name, account


def encode(
    cloud_type: CloudType,
    account: CloudAccount,
    tree: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Write ``account`` into the ``cloud_type`` slot and clear the other three.

    Keys of ``tree`` outside the four slots are carried over; ``tree`` itself
    is left untouched.
    """
    cloud_type = CloudType(cloud_type)
    if account.cloud_type != cloud_type:
        raise ValidationError(
            f"cannot store a {account.cloud_type.value} account in the '{cloud_type.value}' slot"
        )
    _, encoder = CODECS[cloud_type]
    out = dict(tree or {})
    for ct in CLOUD_TYPES:
        out[ct.value] = [encoder(account)] if ct == cloud_type else []
    return out
