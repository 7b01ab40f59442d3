"""Configuration loading for sidecar.

Loads settings from a TOML config file with sensible defaults.
Search order: ~/.config/sidecar/config.toml → defaults only.
Display constants (graph height, refresh rate, ...) are fixed and not
configurable here.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import Any

from sidecar.provider import DEFAULT_PROC_ROOT, DEFAULT_SYSFS_ROOT

DEFAULT_CONFIG: dict[str, Any] = {
    "log_file": "",
    "log_level": "INFO",
    "sources": {
        "proc_root": DEFAULT_PROC_ROOT,
        "sysfs_root": DEFAULT_SYSFS_ROOT,
    },
}

_DEFAULT_PATH = Path.home() / ".config" / "sidecar" / "config.toml"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base. Nested dicts are merged at the first level only."""
    merged = dict(base)
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load configuration, merging user TOML over defaults.

    Only ~/.config/sidecar/config.toml is looked at. An invalid file there
    is reported and ignored.

    Returns:
        Merged configuration dict.
    """
    if _DEFAULT_PATH.is_file():
        try:
            user_config = tomllib.loads(_DEFAULT_PATH.read_text(encoding="utf-8"))
            return _deep_merge(DEFAULT_CONFIG, user_config)
        except tomllib.TOMLDecodeError:
            print(
                f"sidecar: warning: ignoring invalid TOML in {_DEFAULT_PATH}",
                file=sys.stderr,
            )

    return _deep_merge(DEFAULT_CONFIG, {})
