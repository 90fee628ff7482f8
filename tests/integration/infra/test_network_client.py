from __future__ import annotations

"""
Integration tests for the Drive Network Client.

Utilizes a mocked requests session to verify pagination, error
classification and document decoding without making real network calls.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from drivegames.core.resolution.resolver import PayloadResolver
from drivegames.core.services.payload_cache import PayloadCache
from drivegames.domain.errors import (
    Malformed,
    NotFound,
    RateLimited,
    RemoteError,
    TransientNetwork,
    UnresolvedType,
    user_message,
)
from drivegames.infra.network import USER_AGENT, DriveClient


def _response(status: int = 200, body: Any = None, reason: str = "OK", invalid_json: bool = False) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.reason = reason
    if invalid_json:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = body
    return resp


def _client(responses: Optional[List[Any]] = None, page_size: int = 2) -> DriveClient:
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = responses or []
    return DriveClient("key-1", endpoint="https://drive.test/files/", page_size=page_size, session=session)

# -----------------------------------------------------------------------------
# HAPPY PATHS
# -----------------------------------------------------------------------------

def test_metadata_request_shape() -> None:
    client = _client([_response(body={"id": "root", "name": "Games", "mimeType": "x"})])

    data = client.get_file_metadata("root")

    assert data["name"] == "Games"
    url = client._session.get.call_args.args[0]
    params: Dict[str, str] = client._session.get.call_args.kwargs["params"]
    assert url == "https://drive.test/files/root"
    assert params["key"] == "key-1"
    assert params["fields"] == "id,name,mimeType"
    assert client._session.headers["User-Agent"] == USER_AGENT


def test_listing_follows_continuation_tokens() -> None:
    client = _client([
        _response(body={"files": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}], "nextPageToken": "t1"}),
        _response(body={"files": [{"id": "c", "name": "C"}]}),
    ])

    files = client.list_children("root")

    assert [f["id"] for f in files] == ["a", "b", "c"]
    calls = client._session.get.call_args_list
    assert "pageToken" not in calls[0].kwargs["params"]
    assert calls[1].kwargs["params"]["pageToken"] == "t1"
    assert calls[0].kwargs["params"]["q"] == "'root' in parents and trashed=false"
    assert calls[0].kwargs["params"]["pageSize"] == "2"


def test_failure_on_later_page_aborts_listing() -> None:
    client = _client([
        _response(body={"files": [{"id": "a", "name": "A"}], "nextPageToken": "t1"}),
        _response(status=500, reason="Server Error", invalid_json=True),
    ])

    with pytest.raises(TransientNetwork):
        client.list_children("root")


def test_download_json_returns_object() -> None:
    client = _client([_response(body={"game_type": "quiz"})])

    assert client.download_json("d1") == {"game_type": "quiz"}
    assert client._session.get.call_args.kwargs["params"]["alt"] == "media"


def test_empty_document_object_is_not_malformed() -> None:
    client = _client([_response(body={})])

    assert client.download_json("d1") == {}


def test_empty_document_resolves_to_unrecognized_game() -> None:
    client = _client([_response(body={})])
    resolver = PayloadResolver(client.download_json, PayloadCache())

    with pytest.raises(UnresolvedType) as exc_info:
        resolver.resolve("d1")

    assert exc_info.value.declared == ""
    assert "not a recognized game" in user_message(exc_info.value)

# -----------------------------------------------------------------------------
# ERROR CLASSIFICATION
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("status, error_cls", [
    (403, RateLimited),
    (429, RateLimited),
    (404, NotFound),
    (500, TransientNetwork),
    (503, TransientNetwork),
])
def test_status_classification(status: int, error_cls: type) -> None:
    body = {"error": {"code": status, "message": "User rate limit exceeded."}}
    client = _client([_response(status=status, body=body, reason="Err")])

    with pytest.raises(error_cls) as exc_info:
        client.get_file_metadata("root")

    assert exc_info.value.status == status
    assert "User rate limit exceeded." in str(exc_info.value)


def test_unclassified_status_is_generic_remote_error() -> None:
    client = _client([_response(status=400, reason="Bad Request", invalid_json=True)])

    with pytest.raises(RemoteError) as exc_info:
        client.get_file_metadata("root")

    assert type(exc_info.value) is RemoteError
    assert "Bad Request" in str(exc_info.value)


@pytest.mark.parametrize("exc", [
    requests.exceptions.Timeout("slow"),
    requests.exceptions.ConnectionError("refused"),
])
def test_transport_errors_are_transient(exc: Exception) -> None:
    client = _client([exc])

    with pytest.raises(TransientNetwork):
        client.list_children("root")


@pytest.mark.parametrize("resp", [
    _response(invalid_json=True),
    _response(body=[1, 2]),
    _response(body="quiz"),
])
def test_bad_document_bodies_are_malformed(resp: MagicMock) -> None:
    client = _client([resp])

    with pytest.raises(Malformed):
        client.download_json("d1")


def test_listing_with_non_list_files_is_malformed() -> None:
    client = _client([_response(body={"files": "nope"})])

    with pytest.raises(Malformed):
        client.list_children("root")
