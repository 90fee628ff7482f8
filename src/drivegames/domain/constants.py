from __future__ import annotations

"""
Domain Constants.

Centralizes the remote store protocol constants, storage namespaces and
cache lifetimes shared by the tree, payload and dispatch subsystems.
"""

from typing import Dict, Tuple

APP_NAME = "DriveGames"
APP_VERSION = "1.2.0"

# -----------------------------------------------------------------------------
# REMOTE STORE PROTOCOL (Google Drive v3)
# -----------------------------------------------------------------------------
DRIVE_FILES_ENDPOINT = "https://www.googleapis.com/drive/v3/files"
FOLDER_MIME = "application/vnd.google-apps.folder"

METADATA_FIELDS = "id,name,mimeType"
LISTING_FIELDS = "nextPageToken,files(id,name,mimeType)"
LISTING_PAGE_SIZE = 1000

# Statuses the store uses to signal quota exhaustion
RATE_LIMIT_STATUSES: Tuple[int, ...] = (403, 429)

# -----------------------------------------------------------------------------
# LEAF CLASSIFICATION
# -----------------------------------------------------------------------------
KIND_BY_SUFFIX: Dict[str, str] = {
    ".json": "structured",
    ".pdf": "presentation",
}

KIND_BY_MIME: Dict[str, str] = {
    "application/json": "structured",
    "application/pdf": "presentation",
}

# -----------------------------------------------------------------------------
# CACHES AND PERSISTED STATE
# -----------------------------------------------------------------------------
DURABLE_CACHE_NAMESPACE = "drivegames.cache.v1"
DURABLE_CACHE_FILENAME = "drive_cache.db"
DEFAULT_CACHE_TTL_SECONDS = 30 * 60

NAVIGATION_NAMESPACE = "drivegames.navigation.v2"
NAVIGATION_FILENAME = "state.json"

SETTINGS_FILENAME = "settings.json"

PAYLOAD_KEY_PREFIX = "game_payload_"

DEFAULT_ROOT_NAME = "Drive folder"
