import json
import os
import re
from typing import Any, Dict, List

import hcl2
from rich.console import Console

from cloudacct.detect import detect_format
from cloudacct.models.resource import RESOURCE_TYPE, AccountResource

console = Console(stderr=True)

# Matches ${file("path")}, the usual way credentials_json is supplied
_FILE_CALL_RE = re.compile(r'^\$\{file\("([^"]+)"\)\}$')


def _unquote(s: str) -> str:
    """Newer python-hcl2 releases keep the quotes around labels and strings."""
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        return s[1:-1]
    return s


def _clean(val: Any, base_dir: str) -> Any:
    """
    Normalise python-hcl2 output: drop metadata keys, unquote keys and
    strings, and inline ${file("...")} calls.
    """
    if isinstance(val, dict):
        return {
            _unquote(k): _clean(v, base_dir)
            for k, v in val.items()
            if not (k.startswith("__") and k.endswith("__"))
        }
    if isinstance(val, list):
        return [_clean(v, base_dir) for v in val]
    if isinstance(val, str):
        val = _unquote(val)
        m = _FILE_CALL_RE.match(val)
        if m:
            path = m.group(1).replace("${path.module}", base_dir)
            path = os.path.join(base_dir, path)
            try:
                with open(path) as fh:
                    return fh.read()
            except OSError as exc:
                console.print(f"[yellow]Warning:[/yellow] cannot read {path}: {exc}")
        return val
    return val


def _as_blocks(val: Any) -> Any:
    """Terraform JSON syntax allows a single nested block as a bare object."""
    if isinstance(val, dict):
        return [val]
    return val


def _instances(resource_block: Dict[str, Any]) -> List[Any]:
    instances = None
    for rtype, val in resource_block.items():
        if _unquote(rtype) == RESOURCE_TYPE:
            instances = val
            break
    if isinstance(instances, dict):
        return [instances]
    if isinstance(instances, list):
        return instances
    return []


def _extract(data: Dict[str, Any], filepath: str, source_format: str) -> List[AccountResource]:
    resources: List[AccountResource] = []
    base_dir = os.path.dirname(os.path.abspath(filepath))

    blocks = data.get("resource", [])
    if isinstance(blocks, dict):
        blocks = [blocks]

    for resource_block in blocks:
        if not isinstance(resource_block, dict):
            continue
        for instance_map in _instances(resource_block):
            if not isinstance(instance_map, dict):
                continue
            for name, raw_props in instance_map.items():
                # hcl2 wraps the resource body in a list
                if isinstance(raw_props, list) and len(raw_props) == 1:
                    raw_props = raw_props[0]
                if not isinstance(raw_props, dict):
                    continue
                props = _clean(raw_props, base_dir)
                if source_format == "terraform-json":
                    for key in ("aws", "azure", "gcp", "alibaba"):
                        if key in props:
                            props[key] = _as_blocks(props[key])
                resources.append(AccountResource(
                    name=_unquote(name),
                    config=props,
                    source_format=source_format,
                    source_file=filepath,
                ))
    return resources


def parse_file(filepath: str) -> List[AccountResource]:
    fmt = detect_format(filepath)
    try:
        with open(filepath) as fh:
            if fmt == "terraform-json":
                data = json.load(fh)
            else:
                data = hcl2.load(fh)
    except Exception as exc:
        console.print(f"[yellow]Warning:[/yellow] failed to parse {filepath}: {exc}")
        return []

    if not isinstance(data, dict):
        return []
    return _extract(data, filepath, fmt if fmt != "unknown" else "terraform")


def parse_directory(path: str) -> List[AccountResource]:
    resources: List[AccountResource] = []

    if os.path.isfile(path):
        if detect_format(path) != "unknown":
            resources.extend(parse_file(path))
        return resources

    for root, _, files in os.walk(path):
        for fname in sorted(files):
            fpath = os.path.join(root, fname)
            if detect_format(fpath) != "unknown":
                resources.extend(parse_file(fpath))

    return resources
