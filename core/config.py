"""
Settings for fileman.

Tool defaults are read from an optional YAML file with a top-level
``fileman:`` mapping. A missing or unparsable file means defaults.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigError


DEFAULT_CONFIG_PATH = "config.yaml"

# ctime(3) layout, without the trailing newline
CTIME_FORMAT = "%a %b %d %H:%M:%S %Y"

ORDERING_NAMES = ("size", "mtime")


@dataclass(frozen=True)
class Settings:
    """Tool-wide defaults."""
    audit_log: str = "data/audit_log.jsonl"
    timestamp_format: str = CTIME_FORMAT
    read_chunk_size: int = 1024
    copy_chunk_size: int = 4096
    file_mode: int = 0o644
    dir_mode: int = 0o755
    name_max_bytes: int = 255
    default_ordering: str = "size"

    def validate(self) -> "Settings":
        """
        Check value ranges.

        Returns:
            self, for chaining

        Raises:
            ConfigError: If any value is out of range
        """
        for key in ("read_chunk_size", "copy_chunk_size", "name_max_bytes"):
            value = getattr(self, key)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigError(f"{key} must be a positive integer, got {value!r}")

        for key in ("file_mode", "dir_mode"):
            value = getattr(self, key)
            if not isinstance(value, int) or not 0 <= value <= 0o7777:
                raise ConfigError(f"{key} must be a permission mode, got {value!r}")

        if self.default_ordering not in ORDERING_NAMES:
            raise ConfigError(
                f"default_ordering must be one of {', '.join(ORDERING_NAMES)}, "
                f"got {self.default_ordering!r}"
            )
        return self


def parse_mode(value: Union[int, str]) -> int:
    """
    Parse a permission mode.

    Strings are read as octal ("644", "0o644", "0644"); integers pass through.

    Raises:
        ConfigError: If the text is not an octal number
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text.startswith("0o"):
        text = text[2:]
    try:
        return int(text, 8)
    except ValueError:
        raise ConfigError(f"Invalid permission mode: {value!r}")


def _coerce(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known keys and convert mode strings."""
    known = {f.name for f in fields(Settings)}
    values = {k: v for k, v in raw.items() if k in known}
    for key in ("file_mode", "dir_mode"):
        if key in values:
            values[key] = parse_mode(values[key])
    if "audit_log" in values:
        values["audit_log"] = str(values["audit_log"])
    return values


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to the YAML file (default: config.yaml)
        overrides: Values applied on top of the file

    Returns:
        Validated Settings

    Raises:
        ConfigError: If a value is invalid
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    raw: Dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            data = {}
        if isinstance(data, dict):
            section = data.get("fileman", data)
            if isinstance(section, dict):
                raw = section

    settings = replace(Settings(), **_coerce(raw))
    if overrides:
        settings = replace(settings, **_coerce(overrides))
    return settings.validate()
