from __future__ import annotations

"""
Unit tests for the Dispatcher.

Verifies:
1. The mapped renderer is mounted with the document id only.
2. The container holds a single view at a time.
3. Unmapped types are contract violations.
4. Renderer initialization can run on an executor.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from drivegames.core.resolution.dispatcher import Dispatcher, ViewContainer
from drivegames.core.services.payload_cache import PayloadCache
from drivegames.domain.errors import InternalContractViolation
from drivegames.renderers.base import ViewStatus
from drivegames.renderers.games import default_registry

QUIZ = {
    "game_type": "quick_quiz",
    "title": "Rechtsformen",
    "answerLabels": ["A", "B"],
    "questions": [{"q": "GmbH?", "correct": "A"}],
}


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher(default_registry(), PayloadCache())


def test_dispatch_mounts_mapped_renderer(dispatcher: Dispatcher) -> None:
    container = ViewContainer()

    handle = dispatcher.dispatch("d1", "quick_quiz", dict(QUIZ), container)
    view = handle.wait(timeout=1)

    assert handle.done() is True
    assert container.current is view
    assert view.renderer_id == "quick_quiz"
    assert view.status is ViewStatus.READY
    assert view.title == "Rechtsformen – Quick Quiz"
    assert view.model["time_per_question"] == 12


def test_dispatch_replaces_previous_view(dispatcher: Dispatcher) -> None:
    container = ViewContainer()
    first = dispatcher.dispatch("d1", "quick_quiz", dict(QUIZ), container).view

    second = dispatcher.dispatch("d2", "matching_puzzle", {"game_type": "matching", "sets": [{}]}, container).view

    assert container.current is second
    assert container.current is not first
    assert container.mount_count == 2
    assert second.renderer_id == "matching_puzzle"


def test_renderer_reads_payload_from_session_cache() -> None:
    cache = PayloadCache()
    fetch = MagicMock()
    dispatcher = Dispatcher(default_registry(), cache, fetch_document=fetch)

    view = dispatcher.dispatch("d1", "quick_quiz", dict(QUIZ), ViewContainer()).wait()

    assert view.status is ViewStatus.READY
    assert cache.get("d1")["title"] == "Rechtsformen"
    fetch.assert_not_called()


@pytest.mark.parametrize("resolved_type", ["crossword", "", "Escape-Game"])
def test_unmapped_type_is_contract_violation(dispatcher: Dispatcher, resolved_type: str) -> None:
    container = ViewContainer()

    with pytest.raises(InternalContractViolation):
        dispatcher.dispatch("d1", resolved_type, dict(QUIZ), container)

    assert container.current is None


def test_unregistered_renderer_is_contract_violation() -> None:
    registry = default_registry()
    del registry["wer_bin_ich"]
    dispatcher = Dispatcher(registry, PayloadCache())

    with pytest.raises(InternalContractViolation):
        dispatcher.renderer_for("wer_bin_ich")


def test_dispatch_on_executor_completes_asynchronously() -> None:
    with ThreadPoolExecutor(max_workers=1) as pool:
        dispatcher = Dispatcher(default_registry(), PayloadCache(), executor=pool)
        container = ViewContainer()
        seen = []

        handle = dispatcher.dispatch("d1", "quick_quiz", dict(QUIZ), container)
        handle.add_done_callback(seen.append)
        view = handle.wait(timeout=5)

    assert view.status is ViewStatus.READY
    assert seen == [view]
