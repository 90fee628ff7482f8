from __future__ import annotations

"""
Error Taxonomy.

Typed failures raised across the explorer. Remote failures carry the HTTP
status where one exists; every class maps to a single user-facing message
through `user_message`.
"""

from typing import Dict, Optional


class DriveGamesError(Exception):
    """Base class for every failure raised by the explorer."""


class ConfigurationError(DriveGamesError):
    """Required bootstrap input (API key, root folder) is missing or invalid."""


# -----------------------------------------------------------------------------
# REMOTE STORE FAILURES
# -----------------------------------------------------------------------------

class RemoteError(DriveGamesError):
    """
    A call against the remote store failed.

    Attributes:
        status: HTTP status code, when the failure came with a response.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class RateLimited(RemoteError):
    """The store signaled quota exhaustion (403/429). Never retried automatically."""


class NotFound(RemoteError):
    """The requested node does not exist or is not visible."""


class TransientNetwork(RemoteError):
    """Connection failure, timeout or server-side error."""


class Malformed(RemoteError):
    """The response body was not JSON, not an object, or lacked required fields."""


# -----------------------------------------------------------------------------
# LOCAL FAILURES
# -----------------------------------------------------------------------------

class UnresolvedType(DriveGamesError):
    """Neither the declared type nor shape inference produced a known game type."""

    def __init__(self, document_id: str, declared: str = "") -> None:
        detail = f' (declared: "{declared}")' if declared else ""
        super().__init__(f"Document {document_id} has no recognizable game type{detail}.")
        self.document_id = document_id
        self.declared = declared


class StorageFull(DriveGamesError):
    """A cache write failed. Always recovered locally."""


class InternalContractViolation(DriveGamesError):
    """A resolved type reached the dispatcher without a renderer mapping."""


# -----------------------------------------------------------------------------
# USER-FACING MESSAGES
# -----------------------------------------------------------------------------

_MESSAGES: Dict[type, str] = {
    RateLimited: (
        "The cloud drive is refusing requests right now (quota or rate limit reached). "
        "Please wait a moment and reload."
    ),
    NotFound: "The requested item no longer exists or is not shared.",
    TransientNetwork: "The cloud drive could not be reached. Check the connection and try again.",
    Malformed: "The cloud drive returned data that could not be read.",
    UnresolvedType: "This document is not a recognized game.",
    ConfigurationError: "The explorer is not configured (API key or root folder missing).",
    InternalContractViolation: "Internal error: the game could not be started.",
}

GENERIC_MESSAGE = "Something went wrong while loading."


def user_message(exc: BaseException) -> str:
    """
    Translate an exception into the text shown to the user.

    Args:
        exc: The failure to describe.

    Returns:
        str: The message registered for the most specific matching class.
    """
    for cls in type(exc).__mro__:
        if cls in _MESSAGES:
            return _MESSAGES[cls]
    return GENERIC_MESSAGE
