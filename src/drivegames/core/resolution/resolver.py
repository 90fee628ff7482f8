from __future__ import annotations

"""
Payload Resolver.

Turns a document id into a typed, renderer-mapped payload:

    CacheCheck -> (cache hit) Validate | (miss) Fetch -> Validate
    Validate   -> Resolved | Inferring
    Inferring  -> Resolved | Failed

A cache hit that fails to resolve is dropped and exactly one fetch is made;
a second failure is terminal. Successful inference is written back into the
payload's declared-type field and the cache entry is refreshed.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from drivegames.core.services.payload_cache import PayloadCache
from drivegames.domain.errors import Malformed, RateLimited, UnresolvedType, user_message
from drivegames.domain.game_types import (
    DECLARED_TYPE_KEYS,
    GAME_RENDERERS,
    declared_game_type,
    infer_game_type,
    lookup_game_type,
    normalize_game_type,
)

logger = logging.getLogger(__name__)

FetchDocument = Callable[[str], Dict[str, Any]]


class ResolutionState(str, Enum):
    CACHE_CHECK = "cache_check"
    FETCH = "fetch"
    VALIDATE = "validate"
    INFERRING = "inferring"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolvedPayload:
    """
    Outcome of a successful resolution.

    Attributes:
        document_id: Document identity handed to the renderer.
        resolved_type: Canonical game type.
        renderer_id: Renderer identity mapped from the type.
        payload: The validated payload (inferred type already written back).
        from_cache: True if no fetch was needed.
        inferred: True if the type came from shape inference.
        trace: States visited, in order.
    """
    document_id: str
    resolved_type: str
    renderer_id: str
    payload: Dict[str, Any] = field(repr=False)
    from_cache: bool = False
    inferred: bool = False
    trace: Tuple[ResolutionState, ...] = ()


class PayloadResolver:
    """
    Args:
        fetch_document: Downloads a document's JSON content by id.
        payload_cache: Session-scoped payload store.
    """

    def __init__(self, fetch_document: FetchDocument, payload_cache: PayloadCache) -> None:
        self._fetch_document = fetch_document
        self._cache = payload_cache

    def resolve(self, document_id: str) -> ResolvedPayload:
        """
        Run one resolution attempt.

        Raises:
            UnresolvedType: Validation and inference failed (after the single
                retry when the first attempt used a cached payload).
            RemoteError: The fetch failed.
        """
        trace: List[ResolutionState] = [ResolutionState.CACHE_CHECK]

        payload = self._cache.get(document_id)
        from_cache = payload is not None
        if payload is None:
            payload = self._fetch(document_id, trace)

        while True:
            outcome = self._validate(document_id, payload, trace)
            if outcome is not None:
                resolved_type, inferred = outcome
                trace.append(ResolutionState.RESOLVED)
                logger.info(
                    f"Resolver: {document_id} -> {resolved_type}"
                    f" ({'inferred' if inferred else 'declared'}, {'cache' if from_cache else 'remote'})"
                )
                return ResolvedPayload(
                    document_id=document_id,
                    resolved_type=resolved_type,
                    renderer_id=GAME_RENDERERS[resolved_type],
                    payload=payload,
                    from_cache=from_cache,
                    inferred=inferred,
                    trace=tuple(trace),
                )

            if not from_cache:
                trace.append(ResolutionState.FAILED)
                declared = declared_game_type(payload)
                logger.error(f"Resolver: {document_id} has no resolvable game type (declared: {declared!r}).")
                raise UnresolvedType(document_id, declared)

            logger.warning(f"Resolver: cached payload for {document_id} no longer resolves. Re-fetching once.")
            self._cache.drop(document_id)
            from_cache = False
            payload = self._fetch(document_id, trace)

    # -------------------------------------------------------------------------
    # States
    # -------------------------------------------------------------------------

    def _fetch(self, document_id: str, trace: List[ResolutionState]) -> Dict[str, Any]:
        trace.append(ResolutionState.FETCH)
        try:
            payload = self._fetch_document(document_id)
        except RateLimited as e:
            logger.warning(f"Resolver: fetching {document_id} rate limited. {user_message(e)}")
            trace.append(ResolutionState.FAILED)
            raise
        except Exception:
            trace.append(ResolutionState.FAILED)
            raise

        if not isinstance(payload, dict):
            trace.append(ResolutionState.FAILED)
            raise Malformed(f"Document {document_id} is not a JSON object.")

        self._cache.put(document_id, payload)
        return payload

    def _validate(
            self,
            document_id: str,
            payload: Dict[str, Any],
            trace: List[ResolutionState],
    ) -> Optional[Tuple[str, bool]]:
        trace.append(ResolutionState.VALIDATE)

        canonical = lookup_game_type(normalize_game_type(declared_game_type(payload)))
        if canonical is not None:
            return canonical, False

        trace.append(ResolutionState.INFERRING)
        inferred = infer_game_type(payload)
        if inferred is None:
            return None

        payload[DECLARED_TYPE_KEYS[0]] = inferred
        self._cache.put(document_id, payload)
        logger.debug(f"Resolver: inferred {inferred} for {document_id}; declared type written back.")
        return inferred, True
