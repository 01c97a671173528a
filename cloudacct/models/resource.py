from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from cloudacct.errors import ValidationError
from cloudacct.models.account import CloudType

RESOURCE_TYPE = "prismacloud_cloud_account"


@dataclass(frozen=True)
class AccountIdentity:
    cloud_type: CloudType
    platform_id: str

    def __str__(self) -> str:
        from cloudacct.mapper.identity import compose_id
        return compose_id(self.cloud_type, self.platform_id)


def _flag(tree: Dict[str, Any], key: str) -> bool:
    val = tree.get(key)
    if val is None:
        return False
    if not isinstance(val, bool):
        raise ValidationError(
            f"'{key}' must be a bool, got {type(val).__name__}",
            details={"field": key},
        )
    return val


@dataclass
class ProviderConfig:
    disable_on_destroy: bool = False
    update_on_create: bool = False

    @classmethod
    def from_tree(cls, tree: Dict[str, Any]) -> "ProviderConfig":
        return cls(
            disable_on_destroy=_flag(tree, "disable_on_destroy"),
            update_on_create=_flag(tree, "update_on_create"),
        )


@dataclass
class ResourceData:
    """
    Per-resource working set handed to the lifecycle.

    ``config`` is the desired tree from user input, ``state`` the observed
    tree written by Read. Only ``id`` survives between invocations.
    """
    id: str = ""
    config: Dict[str, Any] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)

    @property
    def provider_config(self) -> ProviderConfig:
        return ProviderConfig.from_tree(self.config)


@dataclass
class AccountResource:
    name: str                    # logical name in the template
    config: Dict[str, Any] = field(default_factory=dict)
    source_format: str = ""      # "terraform", "terraform-json"
    source_file: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{RESOURCE_TYPE}.{self.name}"


@dataclass
class DecodeResult:
    resource: AccountResource
    cloud_type: Optional[CloudType] = None
    account: Optional[Any] = None
    provider: Optional[ProviderConfig] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
