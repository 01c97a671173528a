"""
Render decoded cloud accounts back to Terraform HCL, optionally with an
``import`` block for adopting an existing platform account.
"""
import json
import re
from typing import Any, List, Optional

from jinja2 import Environment

from cloudacct.mapper.variant import encode
from cloudacct.models.account import CloudAccount, CloudType, mask_fields
from cloudacct.models.resource import RESOURCE_TYPE, ProviderConfig

_HCL_TEMPLATE = """\
{% for r in resources %}
{% if not loop.first %}

{% endif %}
resource "{{ resource_type }}" "{{ r.name }}" {
{% if r.provider.disable_on_destroy or r.provider.update_on_create %}
  disable_on_destroy = {{ r.provider.disable_on_destroy | hcl }}
  update_on_create   = {{ r.provider.update_on_create | hcl }}

{% endif %}
  {{ r.cloud_type }} {
{% for key, val in r.fields %}
    {{ key.ljust(r.width) }} = {{ val | hcl }}
{% endfor %}
  }
}
{% if r.import_id %}

import {
  to = {{ resource_type }}.{{ r.name }}
  id = {{ r.import_id | hcl }}
}
{% endif %}
{% endfor %}
"""

_NAME_RE = re.compile(r"[^A-Za-z0-9_-]+")


def hcl_value(val: Any) -> str:
    if isinstance(val, bool):
        return "true" if val else "false"
    if val is None:
        return "null"
    if isinstance(val, (int, float)):
        return str(val)
    if isinstance(val, (list, tuple)):
        return "[" + ", ".join(hcl_value(v) for v in val) + "]"
    # JSON string escaping is valid HCL once template sequences are escaped
    return json.dumps(str(val)).replace("${", "$${").replace("%{", "%%{")


def resource_name(name: str) -> str:
    """Turn an account name into a valid Terraform resource name."""
    slug = _NAME_RE.sub("_", name.strip()).strip("_").lower()
    if not slug or not (slug[0].isalpha() or slug[0] == "_"):
        slug = f"account_{slug}" if slug else "account"
    return slug


def _env() -> Environment:
    env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
    env.filters["hcl"] = hcl_value
    return env


class _Item:
    def __init__(self, name, cloud_type, account, provider, import_id, show_sensitive=False):
        block = encode(cloud_type, account)[CloudType(cloud_type).value][0]
        if not show_sensitive:
            block = mask_fields(cloud_type, block)
        self.name = name
        self.cloud_type = CloudType(cloud_type).value
        self.fields = list(block.items())
        self.width = max(len(k) for k in block)
        self.provider = provider
        self.import_id = import_id


def render(accounts: List[tuple], show_sensitive: bool = False) -> str:
    """
    ``accounts`` holds ``(name, cloud_type, account, provider, import_id)``
    tuples; ``provider`` and ``import_id`` may be None. Secrets are replaced
    by a placeholder unless ``show_sensitive`` is set.
    """
    items = [
        _Item(n, ct, acct, prov or ProviderConfig(), imp, show_sensitive)
        for n, ct, acct, prov, imp in accounts
    ]
    return _env().from_string(_HCL_TEMPLATE).render(resource_type=RESOURCE_TYPE, resources=items)


def render_account(
    name: str,
    cloud_type: CloudType,
    account: CloudAccount,
    import_id: Optional[str] = None,
    provider: Optional[ProviderConfig] = None,
    show_sensitive: bool = False,
) -> str:
    return render([(name, cloud_type, account, provider, import_id)], show_sensitive)
