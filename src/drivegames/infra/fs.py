from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the per-user data directory that hosts the durable cache, the
navigation snapshot, the settings file and the diagnostic logs.
"""

import os

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "DriveGames"
UNIX_APP_DIR_NAME = ".drivegames"
HOME_ENV_VAR = "DRIVEGAMES_HOME"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Override: $DRIVEGAMES_HOME
    - Windows: %LOCALAPPDATA%/DriveGames
    - Linux/Mac: ~/.drivegames

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = os.environ.get(HOME_ENV_VAR, "").strip()

    # Windows specific resolution
    if not path and os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def ensure_parent_dir(path: str) -> None:
    """
    Create the parent directory hierarchy for a target file.

    Args:
        path: Absolute path to the target file.
    """
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)
