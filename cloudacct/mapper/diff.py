"""
Field-level plan between the observed state tree and the desired config tree.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cloudacct.mapper.credentials import credentials_equivalent
from cloudacct.mapper.variant import get_block
from cloudacct.models.account import CLOUD_TYPES, FORCE_NEW_FIELDS, SENSITIVE_FIELDS
from cloudacct.models.resource import ProviderConfig

# Defaults applied when a field is left out of the config
_DEFAULTS = {
    "enabled": True,
    "account_type": "account",
    "protection_mode": "MONITOR",
    "monitor_flow_logs": False,
    "compression_enabled": False,
    "dataflow_enabled_project": "",
    "flow_log_storage_bucket": "",
}


@dataclass
class FieldChange:
    path: str
    old: Any
    new: Any
    sensitive: bool = False
    force_new: bool = False


@dataclass
class Plan:
    changes: List[FieldChange] = field(default_factory=list)

    @property
    def replace(self) -> bool:
        return any(c.force_new for c in self.changes)

    @property
    def empty(self) -> bool:
        return not self.changes


def _effective(block: Optional[Dict[str, Any]], key: str) -> Any:
    if block is None:
        return None
    val = block.get(key)
    if val is None:
        return _DEFAULTS.get(key)
    return val


def _same(key: str, old: Any, new: Any) -> bool:
    if key == "credentials_json" and isinstance(old, str) and isinstance(new, str):
        return old == new or credentials_equivalent(old, new)
    return old == new


def plan(state: Dict[str, Any], config: Dict[str, Any]) -> Plan:
    result = Plan()
    for ct in CLOUD_TYPES:
        old_block = get_block(state, ct.value)
        new_block = get_block(config, ct.value)
        if old_block is None and new_block is None:
            continue
        keys = sorted(set(old_block or {}) | set(new_block or {}))
        for key in keys:
            old = _effective(old_block, key)
            new = _effective(new_block, key)
            if _same(key, old, new):
                continue
            # Adding or removing a whole block is not an in-place change of the field
            force_new = (
                old_block is not None
                and new_block is not None
                and key in FORCE_NEW_FIELDS[ct]
            )
            result.changes.append(FieldChange(
                path=f"{ct.value}.{key}",
                old=old,
                new=new,
                sensitive=key in SENSITIVE_FIELDS[ct],
                force_new=force_new,
            ))

    old_provider = ProviderConfig.from_tree(state)
    new_provider = ProviderConfig.from_tree(config)
    for key in ("disable_on_destroy", "update_on_create"):
        old = getattr(old_provider, key)
        new = getattr(new_provider, key)
        if old != new:
            result.changes.append(FieldChange(path=key, old=old, new=new))
    return result
