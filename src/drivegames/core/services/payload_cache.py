from __future__ import annotations

"""
Payload Cache.

Session-scoped store of fetched document payloads keyed by document id.
Values are kept as JSON text so every reader receives an independent copy,
the way a browser session store would hand them out.
"""

import json
import logging
import threading
from typing import Any, Dict, Optional

from drivegames.domain.constants import PAYLOAD_KEY_PREFIX

logger = logging.getLogger(__name__)


class PayloadCache:
    def __init__(self, prefix: str = PAYLOAD_KEY_PREFIX) -> None:
        self._prefix = prefix
        self._store: Dict[str, str] = {}
        self._lock = threading.Lock()

    def key_for(self, document_id: str) -> str:
        return self._prefix + document_id

    def get(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Return a fresh copy of the cached payload, or None (corrupt entries are dropped)."""
        key = self.key_for(document_id)
        with self._lock:
            raw = self._store.get(key)
        if raw is None:
            return None

        try:
            parsed = json.loads(raw)
        except ValueError:
            parsed = None
        if not isinstance(parsed, dict):
            logger.warning(f"PayloadCache: dropping unreadable entry {key}")
            self.drop(document_id)
            return None
        return parsed

    def put(self, document_id: str, payload: Dict[str, Any]) -> bool:
        """Overwrite the entry for a document. Unserializable payloads are not cached."""
        try:
            raw = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"PayloadCache: cannot store payload for {document_id}: {e}")
            return False
        with self._lock:
            self._store[self.key_for(document_id)] = raw
        return True

    def drop(self, document_id: str) -> None:
        with self._lock:
            self._store.pop(self.key_for(document_id), None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, document_id: object) -> bool:
        return isinstance(document_id, str) and self.key_for(document_id) in self._store

    def __len__(self) -> int:
        return len(self._store)
