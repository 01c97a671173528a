"""
JSON summary of the cloud accounts found in a set of Terraform files.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, List

from cloudacct import __version__
from cloudacct.mapper.variant import encode
from cloudacct.models.account import CLOUD_TYPES, mask_fields
from cloudacct.models.resource import DecodeResult

def masked_fields(result: DecodeResult) -> Dict[str, Any]:
    """Encoded block of a decoded account with secrets replaced."""
    block = encode(result.cloud_type, result.account)[result.cloud_type.value][0]
    return mask_fields(result.cloud_type, block)


def _count_by_cloud_type(results: List[DecodeResult]) -> dict:
    counts = {ct.value: 0 for ct in CLOUD_TYPES}
    counts["invalid"] = 0
    for r in results:
        if r.ok:
            counts[r.cloud_type.value] += 1
        else:
            counts["invalid"] += 1
    return counts


def build_report(results: List[DecodeResult], source_path: str) -> str:
    report = {
        "meta": {
            "generated": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "source": source_path,
            "tool": "cloudacct",
            "version": __version__,
        },
        "summary": _count_by_cloud_type(results),
        "accounts": [
            {
                "resource": r.resource.qualified_name,
                "source_file": r.resource.source_file,
                "cloud_type": r.cloud_type.value if r.cloud_type else None,
                "fields": masked_fields(r) if r.ok else None,
                "disable_on_destroy": r.provider.disable_on_destroy if r.provider else None,
                "update_on_create": r.provider.update_on_create if r.provider else None,
                "error": r.error,
            }
            for r in results
        ],
    }
    return json.dumps(report, indent=2)
