"""YAML option loader with env var interpolation."""

import os
import re
import yaml
from pathlib import Path
from typing import Optional

from scryptpass.config import coerce_value
from scryptpass.exceptions import ConfigError
from scryptpass.options import normalize

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

SEARCH_PATHS = [
    Path("./scryptpass.yaml"),
    Path.home() / ".config" / "scryptpass" / "config.yaml",
    Path("/etc/scryptpass/config.yaml"),
]


def load_config(cli_path: "Optional[str]" = None) -> dict:
    """Load hashing options from a YAML file.

    Search order:
    1. CLI-specified path
    2. ./scryptpass.yaml
    3. ~/.config/scryptpass/config.yaml
    4. /etc/scryptpass/config.yaml

    Returns an empty dict when no path was given and no file exists, so
    the documented defaults apply.
    """
    if cli_path:
        config_path = Path(cli_path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {cli_path}")
    else:
        config_path = next((p for p in SEARCH_PATHS if p.exists()), None)
        if config_path is None:
            return {}

    return _parse_config(config_path)


def _parse_config(path: Path) -> dict:
    """Parse YAML config file into an override mapping."""
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(raw).__name__}")

    # Options may live under a top-level "scryptpass" section
    if "scryptpass" in raw:
        raw = raw["scryptpass"] or {}
        if not isinstance(raw, dict):
            raise ConfigError("The scryptpass section must be a mapping")

    overrides = {str(key): _option_value(str(key), value) for key, value in raw.items()}
    # Validate names early so typos surface at load time
    normalize(overrides)
    return overrides


def _option_value(name: str, value):
    """Expand ${VAR} and ${VAR:-default} references, then coerce to the option's type."""
    if not isinstance(value, str):
        return value

    def replacer(match):
        var_name, default = match.group(1), match.group(2)
        env_value = os.environ.get(var_name, default)
        if env_value is None:
            raise ConfigError(f"Option {name}: environment variable not set: {var_name}")
        return env_value

    return coerce_value(name, _ENV_REF.sub(replacer, value))
