# src/wg_admin/config.py
from __future__ import annotations
import os
from pathlib import Path
from typing import Optional


STORE_ENV = "WG_ADMIN_STORE"
NETWORK_ENV = "WG_ADMIN_NETWORK"

DEFAULT_STORE_PATH = Path("~/.wg-admin.json")
DEFAULT_LISTEN_PORT = 51820
PERSISTENT_KEEPALIVE = 25


def store_path() -> Path:
    override = os.environ.get(STORE_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_STORE_PATH.expanduser()


def default_network() -> Optional[str]:
    return os.environ.get(NETWORK_ENV) or None
