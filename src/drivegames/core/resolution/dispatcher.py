from __future__ import annotations

"""
Dispatcher.

Mounts the renderer mapped to a resolved game type into a view container.
The container holds at most one view; dispatching replaces it. The renderer
receives only the document id and loads the payload through its own loader.
"""

import logging
from concurrent.futures import Executor, Future
from typing import Any, Callable, Dict, Mapping, Optional

from drivegames.core.services.payload_cache import PayloadCache
from drivegames.domain.errors import InternalContractViolation
from drivegames.domain.game_types import GAME_RENDERERS
from drivegames.renderers.base import GameRenderer, PayloadLoader, SandboxView, mount_game

logger = logging.getLogger(__name__)


class ViewContainer:
    """Host slot for the currently mounted view."""

    def __init__(self) -> None:
        self.current: Optional[SandboxView] = None
        self.mount_count = 0

    def clear(self) -> None:
        if self.current is not None:
            logger.debug(f"View: unmounting {self.current.renderer_id} ({self.current.document_id})")
        self.current = None

    def mount(self, view: SandboxView) -> None:
        self.current = view
        self.mount_count += 1


class DispatchHandle:
    """Completion handle for a renderer's own initialization."""

    def __init__(self, view: SandboxView, future: "Future[SandboxView]") -> None:
        self.view = view
        self._future = future

    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> SandboxView:
        return self._future.result(timeout=timeout)

    def add_done_callback(self, fn: Callable[[SandboxView], Any]) -> None:
        self._future.add_done_callback(lambda f: fn(f.result()))


class Dispatcher:
    """
    Args:
        registry: Renderer identity -> handler value.
        payload_cache: Session payload cache shared with colocated renderers.
        fetch_document: Remote fallback handed to renderers.
        executor: Runs renderer initialization; None runs it inline.
    """

    def __init__(
            self,
            registry: Mapping[str, GameRenderer],
            payload_cache: PayloadCache,
            fetch_document: Optional[Callable[[str], Dict[str, Any]]] = None,
            executor: Optional[Executor] = None,
    ) -> None:
        self._registry = dict(registry)
        self._payload_cache = payload_cache
        self._fetch_document = fetch_document
        self._executor = executor

    def renderer_for(self, resolved_type: str) -> GameRenderer:
        """
        Raises:
            InternalContractViolation: The type has no renderer mapping or
                the mapped renderer is not registered.
        """
        renderer_id = GAME_RENDERERS.get(resolved_type)
        renderer = self._registry.get(renderer_id) if renderer_id else None
        if renderer is None:
            msg = f"No renderer for resolved type {resolved_type!r} (renderer id {renderer_id!r})."
            logger.critical(f"Dispatcher: contract violation. {msg}")
            raise InternalContractViolation(msg)
        return renderer

    def dispatch(
            self,
            document_id: str,
            resolved_type: str,
            payload: Dict[str, Any],
            container: ViewContainer,
    ) -> DispatchHandle:
        """
        Replace the container's view with a fresh one running the mapped renderer.

        Returns:
            DispatchHandle: Completes when the renderer finished initializing.
        """
        renderer = self.renderer_for(resolved_type)

        # Colocated renderers read their payload from the session cache
        self._payload_cache.put(document_id, payload)

        container.clear()
        view = SandboxView(document_id=document_id, renderer_id=renderer.renderer_id)
        container.mount(view)
        logger.info(f"Dispatcher: mounted {renderer.renderer_id} for {document_id}")

        loader = PayloadLoader(self._payload_cache, self._fetch_document)
        if self._executor is not None:
            future = self._executor.submit(mount_game, renderer, view, loader)
        else:
            future = Future()
            future.set_result(mount_game(renderer, view, loader))
        return DispatchHandle(view, future)
