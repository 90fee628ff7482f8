from __future__ import annotations

from drivegames.domain.constants import APP_VERSION

USER_AGENT = f"DriveGames-Client/{APP_VERSION}"
DEFAULT_TIMEOUT = 10
