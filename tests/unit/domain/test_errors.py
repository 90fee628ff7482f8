from __future__ import annotations

"""
Unit tests for the Error Taxonomy.

Verifies the class hierarchy and the mapping of failures to user-facing
messages.
"""

from drivegames.domain.errors import (
    GENERIC_MESSAGE,
    DriveGamesError,
    InternalContractViolation,
    Malformed,
    NotFound,
    RateLimited,
    RemoteError,
    StorageFull,
    TransientNetwork,
    UnresolvedType,
    user_message,
)


def test_remote_errors_share_a_base_and_keep_status() -> None:
    err = RateLimited("429 quota", 429)

    assert isinstance(err, RemoteError)
    assert isinstance(err, DriveGamesError)
    assert err.status == 429
    assert TransientNetwork("timeout").status is None


def test_user_message_per_class() -> None:
    assert "quota" in user_message(RateLimited("x", 403))
    assert "no longer exists" in user_message(NotFound("x", 404))
    assert "could not be reached" in user_message(TransientNetwork("x"))
    assert "could not be read" in user_message(Malformed("x"))
    assert "not a recognized game" in user_message(UnresolvedType("d1"))
    assert "Internal error" in user_message(InternalContractViolation("x"))


def test_user_message_falls_back_to_generic() -> None:
    assert user_message(RemoteError("418 teapot", 418)) == GENERIC_MESSAGE
    assert user_message(StorageFull("quota")) == GENERIC_MESSAGE
    assert user_message(ValueError("boom")) == GENERIC_MESSAGE


def test_unresolved_type_message_mentions_declared_value() -> None:
    err = UnresolvedType("doc-7", declared="crossword")

    assert err.document_id == "doc-7"
    assert err.declared == "crossword"
    assert '"crossword"' in str(err)
