from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the remote hierarchical store client.
"""

from drivegames.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT
from drivegames.infra.network.drive_client import DriveClient

__all__ = [
    "DriveClient",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
]
