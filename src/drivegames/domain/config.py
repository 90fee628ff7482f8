from __future__ import annotations

"""
Explorer Configuration.

Resolves the bootstrap inputs (API key, root folder) and tunables from a
JSON settings file in the user data directory, overlaid by environment
variables. A missing or corrupt settings file falls back to defaults.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from drivegames.domain import constants as const
from drivegames.domain.errors import ConfigurationError
from drivegames.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

ENV_API_KEY = "DRIVEGAMES_API_KEY"
ENV_ROOT_FOLDER = "DRIVEGAMES_ROOT_FOLDER_ID"
ENV_CACHE_TTL = "DRIVEGAMES_CACHE_TTL"


# -----------------------------------------------------------------------------
# Settings Model
# -----------------------------------------------------------------------------
@dataclass
class ExplorerSettings:
    """
    Runtime configuration of one explorer instance.

    Attributes:
        api_key: Drive API key used for every remote call.
        root_folder_id: Container browsed at startup.
        files_endpoint: Base URL of the files resource.
        durable_ttl_seconds: Lifetime of durable cache entries.
        page_size: Listing page size requested from the store.
        request_timeout: Per-request timeout in seconds.
        cache_db_path: SQLite file of the durable tier ("" = user data dir).
        state_path: Navigation snapshot file ("" = user data dir).
        log_level: Minimum logging severity.
    """
    api_key: str = ""
    root_folder_id: str = ""
    files_endpoint: str = const.DRIVE_FILES_ENDPOINT
    durable_ttl_seconds: float = const.DEFAULT_CACHE_TTL_SECONDS
    page_size: int = const.LISTING_PAGE_SIZE
    request_timeout: float = 10.0
    cache_db_path: str = ""
    state_path: str = ""
    log_level: str = "INFO"

    def resolved_cache_db_path(self) -> str:
        return self.cache_db_path or os.path.join(get_user_data_dir(), const.DURABLE_CACHE_FILENAME)

    def resolved_state_path(self) -> str:
        return self.state_path or os.path.join(get_user_data_dir(), const.NAVIGATION_FILENAME)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["api_key"] = "***" if self.api_key else ""
        return data


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------
def get_settings_path() -> str:
    return os.path.join(get_user_data_dir(), const.SETTINGS_FILENAME)


def load_settings(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> ExplorerSettings:
    """
    Build the settings from file and environment.

    Args:
        path: Settings file; defaults to the user data directory.
        environ: Environment mapping; defaults to os.environ.

    Returns:
        ExplorerSettings: Merged settings (file < environment).
    """
    settings = ExplorerSettings()
    settings_path = path or get_settings_path()
    env = os.environ if environ is None else environ

    if os.path.exists(settings_path):
        try:
            with open(settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                _apply_overrides(settings, data)
            else:
                logger.warning("Corrupted settings file. Using defaults.")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load settings: {e}. Using defaults.")
    else:
        logger.debug("Settings file not found. Using defaults.")

    if env.get(ENV_API_KEY):
        settings.api_key = env[ENV_API_KEY].strip()
    if env.get(ENV_ROOT_FOLDER):
        settings.root_folder_id = env[ENV_ROOT_FOLDER].strip()
    if env.get(ENV_CACHE_TTL):
        try:
            settings.durable_ttl_seconds = float(env[ENV_CACHE_TTL])
        except ValueError:
            logger.warning(f"Ignoring non-numeric {ENV_CACHE_TTL}={env[ENV_CACHE_TTL]!r}")

    return settings


def validate_settings(settings: ExplorerSettings) -> ExplorerSettings:
    """
    Reject settings the explorer cannot start with.

    Raises:
        ConfigurationError: If the API key or the root folder is missing,
            or the cache TTL is not positive.
    """
    if not settings.api_key:
        raise ConfigurationError("API key is missing.")
    if not settings.root_folder_id:
        raise ConfigurationError("Root folder id is missing.")
    if settings.durable_ttl_seconds <= 0:
        raise ConfigurationError("Cache TTL must be positive.")
    return settings


def _apply_overrides(settings: ExplorerSettings, data: Dict[str, Any]) -> None:
    """Copy known keys whose type matches the default's type."""
    for f in fields(settings):
        if f.name not in data or data[f.name] is None:
            continue
        value = data[f.name]
        current = getattr(settings, f.name)
        if isinstance(current, float) and isinstance(value, (int, float)) and not isinstance(value, bool):
            setattr(settings, f.name, float(value))
        elif isinstance(value, type(current)) and not isinstance(value, bool):
            setattr(settings, f.name, value)
        else:
            logger.warning(f"Settings: ignoring '{f.name}' with unexpected type {type(value).__name__}.")
