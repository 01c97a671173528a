"""
Settings loaded from a YAML file (cloudacct.yaml by default).
"""
import os
from dataclasses import dataclass, fields
from typing import Optional

import yaml

from cloudacct.errors import ConfigurationError

DEFAULT_CONFIG_FILE = "cloudacct.yaml"
CONFIG_ENV_VAR = "CLOUDACCT_CONFIG"


@dataclass
class Settings:
    # Reject configs with more than one provider block instead of taking the first
    strict_variants: bool = True
    # Reject undecodable GCP credentials instead of using an empty record
    strict_credentials: bool = True


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from ``path``, ``$CLOUDACCT_CONFIG`` or ./cloudacct.yaml.

    Only an explicitly named file is required to exist.
    """
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    config_file = explicit or DEFAULT_CONFIG_FILE
    if not os.path.exists(config_file):
        if explicit:
            raise ConfigurationError(f"settings file '{config_file}' does not exist")
        return Settings()

    try:
        with open(config_file, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"failed to parse {config_file}: {exc}") from exc

    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_file}: expected a mapping at top level")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(
            f"{config_file}: unknown setting(s): {', '.join(unknown)}",
            details={"unknown": unknown},
        )
    for key, val in raw.items():
        if not isinstance(val, bool):
            raise ConfigurationError(f"{config_file}: '{key}' must be true or false")
    return Settings(**raw)
