from __future__ import annotations

"""
Drive v3 Client.

Raw protocol against the remote hierarchical store: node metadata, paginated
child listings and document downloads. Every transport or protocol failure
is translated into the explorer's error taxonomy; nothing is cached here.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from drivegames.domain import constants as const
from drivegames.domain.errors import (
    Malformed,
    NotFound,
    RateLimited,
    RemoteError,
    TransientNetwork,
)
from drivegames.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


class DriveClient:
    """
    Thin requests-based client for the Drive files resource.

    Args:
        api_key: Key appended to every request.
        endpoint: Files resource base URL.
        page_size: Listing page size.
        timeout: Per-request timeout in seconds.
        session: Optional pre-built requests.Session (tests inject fakes).
    """

    def __init__(
            self,
            api_key: str,
            endpoint: str = const.DRIVE_FILES_ENDPOINT,
            page_size: int = const.LISTING_PAGE_SIZE,
            timeout: float = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint.rstrip("/")
        self._page_size = page_size
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def get_file_metadata(self, file_id: str) -> Dict[str, Any]:
        """
        Fetch id, name and MIME type of one node.

        Raises:
            RemoteError: Any classified failure.
        """
        params = {"fields": const.METADATA_FIELDS, "supportsAllDrives": "true"}
        data = self._get_json(self._file_url(file_id), params)
        if not isinstance(data, dict):
            raise Malformed(f"Metadata for {file_id} is not an object.")
        return data

    def list_children(self, parent_id: str) -> List[Dict[str, Any]]:
        """
        List every non-trashed direct child, following continuation tokens.

        A failure on any page aborts the whole call; partial results are
        never returned.

        Args:
            parent_id: Container id.

        Returns:
            List[Dict[str, Any]]: Raw file resources in store order.
        """
        files: List[Dict[str, Any]] = []
        token = ""
        pages = 0

        while True:
            params = {
                "q": f"'{parent_id}' in parents and trashed=false",
                "fields": const.LISTING_FIELDS,
                "pageSize": str(self._page_size),
                "includeItemsFromAllDrives": "true",
                "supportsAllDrives": "true",
            }
            if token:
                params["pageToken"] = token

            data = self._get_json(self._endpoint, params)
            if not isinstance(data, dict):
                raise Malformed(f"Listing page for {parent_id} is not an object.")

            batch = data.get("files") or []
            if not isinstance(batch, list):
                raise Malformed(f"Listing page for {parent_id} has a non-list 'files' field.")
            files.extend(batch)
            pages += 1

            token = data.get("nextPageToken") or ""
            if not token:
                break

        logger.debug(f"Drive: listed {len(files)} children of {parent_id} in {pages} page(s).")
        return files

    def download_json(self, file_id: str) -> Dict[str, Any]:
        """
        Download a document's content and decode it as a JSON object.

        Raises:
            Malformed: If the body is not a JSON object.
            RemoteError: Any other classified failure.
        """
        data = self._get_json(self._file_url(file_id), {"alt": "media"})
        if not isinstance(data, dict):
            raise Malformed(f"Document {file_id} is not a JSON object.")
        return data

    def close(self) -> None:
        self._session.close()

    # -------------------------------------------------------------------------
    # TRANSPORT
    # -------------------------------------------------------------------------

    def _file_url(self, file_id: str) -> str:
        return f"{self._endpoint}/{quote(file_id, safe='')}"

    def _get_json(self, url: str, params: Dict[str, str]) -> Any:
        query = dict(params)
        query["key"] = self._api_key

        try:
            response = self._session.get(url, params=query, timeout=self._timeout)
        except requests.exceptions.Timeout as e:
            raise TransientNetwork(f"Request timed out after {self._timeout}s: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransientNetwork(f"Network error: {e}") from e

        if response.status_code >= 400:
            raise _classify_failure(response)

        try:
            return response.json()
        except ValueError as e:
            raise Malformed(f"Response from {url} is not valid JSON.", response.status_code) from e


# -----------------------------------------------------------------------------
# Private Helpers
# -----------------------------------------------------------------------------

def _classify_failure(response: requests.Response) -> RemoteError:
    """Map a non-2xx response onto the error taxonomy."""
    status = response.status_code
    message = f"{status} {_error_message(response)}"

    if status in const.RATE_LIMIT_STATUSES:
        return RateLimited(message, status)
    if status == 404:
        return NotFound(message, status)
    if status >= 500:
        return TransientNetwork(message, status)
    return RemoteError(message, status)


def _error_message(response: requests.Response) -> str:
    """Prefer the structured `error.message` of the body over the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.reason or ""
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        msg = body["error"].get("message")
        if msg:
            return str(msg)
    return response.reason or ""
