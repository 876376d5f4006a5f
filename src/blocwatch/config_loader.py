"""Load WatchConfig from blocwatch.yaml or blocwatch.toml if present.

Merges file config with keyword overrides. Overrides win.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import yaml

from blocwatch.config import WatchConfig

logger = logging.getLogger(__name__)

_KNOWN_KEYS = ("max_records", "max_failures", "diff_value_limit")


def load_config(root: Path, **overrides: object) -> WatchConfig:
    """Load WatchConfig from root, optionally merging a config file.

    Looks for blocwatch.yaml, blocwatch.yml, or blocwatch.toml in root. If
    found, loads and merges with overrides. Overrides take precedence.
    Invalid values raise ``ConfigError`` from ``WatchConfig``.
    """
    file_config = _read_config_file(root)
    merged = {**file_config, **overrides}
    return WatchConfig(**merged)  # type: ignore[arg-type]


def _read_config_file(root: Path) -> dict[str, object]:
    """Read blocwatch config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("blocwatch.yaml", "blocwatch.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "blocwatch.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    return _flatten_section(data)


def _flatten_section(data: dict[str, object]) -> dict[str, object]:
    """Extract blocwatch.* keys and known top-level keys into one dict."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("blocwatch")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result
