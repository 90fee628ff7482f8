from __future__ import annotations

"""
Game Type Registry.

Closed tables that drive payload classification: the accepted declared-type
field names, the alias table mapping normalized spellings to canonical game
types, the canonical type to renderer identity table, and the ordered
shape-inference rules used when a document carries no usable type tag.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

DECLARED_TYPE_KEYS: Tuple[str, ...] = ("game_type", "gameType")

# Canonical game type -> renderer identity
GAME_RENDERERS: Dict[str, str] = {
    "escape_game": "Escape-Game",
    "matching_puzzle": "matching_puzzle",
    "quick_quiz": "quick_quiz",
    "sortier_spiel": "sortier_spiel",
    "wer_bin_ich": "wer_bin_ich",
    "what_and_why": "what_and_why",
}

# Normalized spelling -> canonical game type. Canonical names map to themselves.
GAME_TYPE_ALIASES: Dict[str, str] = {
    **{canonical: canonical for canonical in GAME_RENDERERS},
    "mini_escape_room": "escape_game",
    "escape_room": "escape_game",
    "escapegame": "escape_game",
    "matching": "matching_puzzle",
    "matchingpuzzle": "matching_puzzle",
    "quiz": "quick_quiz",
    "quickquiz": "quick_quiz",
    "sortierspiel": "sortier_spiel",
    "sort_game": "sortier_spiel",
    "werbinich": "wer_bin_ich",
    "whoami": "wer_bin_ich",
    "what_why": "what_and_why",
    "what_and_why_game": "what_and_why",
}

_SEPARATORS_RX = re.compile(r"[\s\-_]+")


# -----------------------------------------------------------------------------
# DECLARED TYPE
# -----------------------------------------------------------------------------

def normalize_game_type(raw: Any) -> str:
    """
    Fold a declared type into its comparable form.

    Trims, lowercases and collapses runs of whitespace, hyphens and
    underscores into a single underscore. Non-string input yields "".

    Args:
        raw: Value found in the declared-type field.

    Returns:
        str: Normalized type string, possibly empty.
    """
    if not isinstance(raw, str):
        return ""
    folded = _SEPARATORS_RX.sub("_", raw.strip().lower())
    return folded.strip("_")


def declared_game_type(payload: Mapping[str, Any]) -> str:
    """Return the first non-empty declared-type value, or ""."""
    for key in DECLARED_TYPE_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def lookup_game_type(normalized: str) -> Optional[str]:
    """Map a normalized spelling to its canonical game type."""
    if not normalized:
        return None
    return GAME_TYPE_ALIASES.get(normalized)


def resolve_declared_type(payload: Mapping[str, Any]) -> Optional[str]:
    """Canonical type from the payload's declared field, or None if absent/unknown."""
    return lookup_game_type(normalize_game_type(declared_game_type(payload)))


# -----------------------------------------------------------------------------
# SHAPE INFERENCE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class InferenceRule:
    """
    One shape heuristic.

    Matches when every field in `requires` is a non-empty list and no field
    in `forbids` is a non-empty list.
    """
    game_type: str
    requires: Tuple[str, ...]
    forbids: Tuple[str, ...] = ()

    def matches(self, payload: Mapping[str, Any]) -> bool:
        return (
            all(_has_items(payload, f) for f in self.requires)
            and not any(_has_items(payload, f) for f in self.forbids)
        )


# Evaluated top to bottom; the first match wins.
INFERENCE_RULES: Tuple[InferenceRule, ...] = (
    InferenceRule("escape_game", requires=("sections",)),
    InferenceRule("what_and_why", requires=("cases",), forbids=("sections",)),
    InferenceRule("wer_bin_ich", requires=("legalForms", "questions"), forbids=("sections", "cases")),
    InferenceRule("sortier_spiel", requires=("columns", "cards"), forbids=("sections", "cases", "legalForms")),
    InferenceRule("quick_quiz", requires=("answerLabels", "questions"), forbids=("sections", "cases", "legalForms")),
    InferenceRule("matching_puzzle", requires=("sets",), forbids=("sections", "cases", "legalForms")),
)


def infer_game_type(payload: Mapping[str, Any]) -> Optional[str]:
    """
    Infer a canonical game type from the payload's structural fields.

    Args:
        payload: Raw document content.

    Returns:
        Optional[str]: Game type of the first matching rule, or None.
    """
    for rule in INFERENCE_RULES:
        if rule.matches(payload):
            return rule.game_type
    return None


def _has_items(payload: Mapping[str, Any], key: str) -> bool:
    value = payload.get(key)
    return isinstance(value, list) and len(value) > 0
