from __future__ import annotations

"""
Renderer Lifecycle.

One fixed mount lifecycle shared by every game, parameterized by a per-type
`GameRenderer` value:

    load payload by document id -> validate header -> title -> apply -> ready

Renderers address their payload only through the document id. They read the
colocated payload cache first and fall back to downloading the document.
Any failure is reported on the view itself instead of propagating.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from drivegames.core.services.payload_cache import PayloadCache
from drivegames.domain.game_types import declared_game_type, resolve_declared_type

logger = logging.getLogger(__name__)

ViewModel = Dict[str, Any]


@dataclass(frozen=True)
class GameRenderer:
    """
    Capability of one rendering module.

    Attributes:
        expected_type: The single canonical game type this renderer accepts.
        renderer_id: Identity the dispatcher maps resolved types to.
        suffix: Appended to the payload title for the view title.
        apply: Builds the renderer's view model from a validated payload.
    """
    expected_type: str
    renderer_id: str
    suffix: str
    apply: Callable[[Dict[str, Any]], ViewModel]


class ViewStatus(str, Enum):
    MOUNTING = "mounting"
    READY = "ready"
    FAILED = "failed"


@dataclass
class SandboxView:
    """
    An isolated view hosting one mounted renderer.

    The view owns its own copy of the payload-derived model; nothing in it
    references the explorer's caches.
    """
    document_id: str
    renderer_id: str
    status: ViewStatus = ViewStatus.MOUNTING
    title: str = ""
    model: ViewModel = field(default_factory=dict)
    error: str = ""

    def fail(self, message: str) -> None:
        logger.error(f"[Renderer {self.renderer_id}] FATAL for {self.document_id}: {message}")
        self.status = ViewStatus.FAILED
        self.error = message
        self.model = {}


class PayloadLoader:
    """
    A renderer's own payload access: session cache first, remote fallback.

    Args:
        payload_cache: Colocated payload cache, if the renderer shares the process.
        fetch_document: Remote download used when the cache has no entry.
    """

    def __init__(
            self,
            payload_cache: Optional[PayloadCache],
            fetch_document: Optional[Callable[[str], Dict[str, Any]]],
    ) -> None:
        self._cache = payload_cache
        self._fetch = fetch_document

    def load(self, document_id: str) -> Dict[str, Any]:
        if self._cache is not None:
            cached = self._cache.get(document_id)
            if cached is not None:
                return cached

        if self._fetch is None:
            raise LookupError("No payload in session and no remote fallback available.")

        data = self._fetch(document_id)
        if self._cache is not None and isinstance(data, dict):
            self._cache.put(document_id, data)
        return data


def mount_game(renderer: GameRenderer, view: SandboxView, loader: PayloadLoader) -> SandboxView:
    """
    Run the mount lifecycle for one view.

    Args:
        renderer: Handler value of the game type.
        view: Freshly mounted, still empty view.
        loader: The renderer's payload access.

    Returns:
        SandboxView: The same view, READY or FAILED.
    """
    try:
        payload = loader.load(view.document_id)
    except Exception as e:
        view.fail(f"Game data could not be loaded: {e}")
        return view

    problem = validate_header(payload, renderer.expected_type)
    if problem:
        view.fail(problem)
        return view

    title = payload.get("title")
    if isinstance(title, str) and title.strip():
        view.title = f"{title.strip()} – {renderer.suffix}"
    else:
        view.title = renderer.suffix

    try:
        view.model = renderer.apply(payload)
    except Exception as e:
        view.fail(f"Game could not be initialized: {e}")
        return view

    view.status = ViewStatus.READY
    logger.debug(f"[Renderer {renderer.renderer_id}] ready for {view.document_id}")
    return view


def validate_header(payload: Any, expected_type: str) -> str:
    """
    Check a payload against the type tag a renderer expects.

    Returns:
        str: Empty when valid, otherwise the message to show.
    """
    if not isinstance(payload, dict) or not payload:
        return "Invalid game data: JSON is empty or not an object."

    declared = declared_game_type(payload)
    if not declared:
        return 'The JSON has no "game_type" field.'

    if resolve_declared_type(payload) != expected_type:
        return f'Unexpected game_type.\nExpected: "{expected_type}"\nFound: "{declared}"'

    schema_version = payload.get("schema_version")
    if schema_version is not None and not isinstance(schema_version, str):
        logger.warning(f"schema_version is present but not a string: {schema_version!r}")

    return ""
