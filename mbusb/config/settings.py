"""Settings storage for run configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


SETTINGS_PATH = Path(
    os.environ.get(
        "MBUSB_SETTINGS_PATH",
        Path.home() / ".config" / "mbusb" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_BOOT_SUBDIR = "boot"
DEFAULT_SYSLINUX_URL = (
    "https://mirrors.edge.kernel.org/pub/linux/utils/boot/syslinux/"
    "syslinux-6.03.tar.gz"
)
DEFAULT_MEMDISK_MEMBER = "syslinux-6.03/bios/memdisk/memdisk"
DEFAULT_MEMDISK_STRIP_COMPONENTS = 3
DEFAULT_FETCH_TIMEOUT_SECONDS = 300

DEFAULT_SETTINGS: dict[str, Any] = {
    "boot_subdir": DEFAULT_BOOT_SUBDIR,
    "syslinux_url": DEFAULT_SYSLINUX_URL,
    "memdisk_member": DEFAULT_MEMDISK_MEMBER,
    "memdisk_strip_components": DEFAULT_MEMDISK_STRIP_COMPONENTS,
    "fetch_timeout_seconds": DEFAULT_FETCH_TIMEOUT_SECONDS,
    "efi_target": "x86_64-efi",
    "bios_target": "i386-pc",
    "debug": False,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings(path: Path | None = None) -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    path = path or SETTINGS_PATH
    if not path.exists():
        return
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def get_bool(key: str, default: bool = False) -> bool:
    return bool(get_setting(key, default))


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get_setting(key, default))
    except (TypeError, ValueError):
        return default


def debug_enabled() -> bool:
    """Debug logging is on when MBUSB_DEBUG is truthy or the setting is set."""
    env_value = os.environ.get("MBUSB_DEBUG", "").strip().lower()
    if env_value in {"1", "true", "yes", "on"}:
        return True
    return get_bool("debug")


load_settings()
