"""Typed access to the NEBO_APP_* environment variables set by the sandbox."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class AppEnv:
    """Settings handed to the app by Nebo when it is launched."""

    dir: str = ""  # NEBO_APP_DIR: installation directory
    sock_path: str = ""  # NEBO_APP_SOCK: Unix socket to listen on
    id: str = ""  # NEBO_APP_ID: app id from the manifest
    name: str = ""  # NEBO_APP_NAME: app name from the manifest
    version: str = ""  # NEBO_APP_VERSION: app version from the manifest
    data_dir: str = ""  # NEBO_APP_DATA: the app's data directory


_VARIABLES = {
    "dir": "NEBO_APP_DIR",
    "sock_path": "NEBO_APP_SOCK",
    "id": "NEBO_APP_ID",
    "name": "NEBO_APP_NAME",
    "version": "NEBO_APP_VERSION",
    "data_dir": "NEBO_APP_DATA",
}


def load_env(environ: Mapping[str, str] | None = None) -> AppEnv:
    """Read the app settings from *environ*, or from the process environment."""
    source = os.environ if environ is None else environ
    return AppEnv(**{field: source.get(var, "") for field, var in _VARIABLES.items()})