import json
import os

from cloudacct.models.resource import RESOURCE_TYPE


def detect_format(filepath: str) -> str:
    """
    Return 'terraform', 'terraform-json', or 'unknown'.
    """
    lower = filepath.lower()

    if lower.endswith(".tf"):
        return "terraform"

    if lower.endswith(".tf.json"):
        return "terraform-json"

    # Plain .json only counts when it declares cloud account resources
    _, ext = os.path.splitext(lower)
    if ext == ".json":
        try:
            with open(filepath) as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return "unknown"
        resources = data.get("resource") if isinstance(data, dict) else None
        if isinstance(resources, dict) and RESOURCE_TYPE in resources:
            return "terraform-json"
        if isinstance(resources, list) and any(
            isinstance(r, dict) and RESOURCE_TYPE in r for r in resources
        ):
            return "terraform-json"

    return "unknown"
