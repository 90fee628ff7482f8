from __future__ import annotations

"""
Game Renderers.

Per-type handler values plugged into the shared mount lifecycle. Each
`apply` reads the fields its game consumes and returns the view model the
game starts from; scoring and interaction are outside this package.
"""

from typing import Any, Dict, List, Optional

from drivegames.renderers.base import GameRenderer, ViewModel

QUICK_QUIZ_DEFAULT_SECONDS = 12


def _list(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


def _section(data: Dict[str, Any], section_type: str) -> Dict[str, Any]:
    for section in _list(data, "sections"):
        if isinstance(section, dict) and section.get("type") == section_type:
            return section
    return {}


# -----------------------------------------------------------------------------
# APPLY FUNCTIONS
# -----------------------------------------------------------------------------

def apply_escape_game(data: Dict[str, Any]) -> ViewModel:
    """Sort cards, quiz solutions and capital solutions from the typed sections."""
    quiz = _list(_section(data, "quiz"), "questions")
    capital = _list(_section(data, "capital"), "rows")
    return {
        "sort_cards": _list(_section(data, "sort"), "sortCards"),
        "quiz_questions": quiz,
        "quiz_solutions": {q["id"]: q.get("correct") for q in quiz if isinstance(q, dict) and "id" in q},
        "capital_solutions": {
            r["label"]: r.get("correct") for r in capital if isinstance(r, dict) and "label" in r
        },
    }


def apply_matching_puzzle(data: Dict[str, Any]) -> ViewModel:
    sets = _list(data, "sets")
    column_titles = data.get("columnTitles") if isinstance(data.get("columnTitles"), dict) else {}
    column_hints = data.get("columnHints") if isinstance(data.get("columnHints"), dict) else {}
    return {
        "sets": sets,
        "total_sets": len(sets),
        "column_titles": column_titles,
        "column_hints": column_hints,
        "subtitle": _text(data, "subtitle"),
    }


def apply_quick_quiz(data: Dict[str, Any]) -> ViewModel:
    seconds = data.get("timePerQuestionSeconds")
    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
        seconds = QUICK_QUIZ_DEFAULT_SECONDS
    return {
        "answer_labels": _list(data, "answerLabels"),
        "questions": _list(data, "questions"),
        "time_per_question": seconds,
        "intro_text": _text(data, "introText"),
        "subline_text": _text(data, "sublineText"),
    }


def apply_sortier_spiel(data: Dict[str, Any]) -> ViewModel:
    return {
        "columns": _list(data, "columns"),
        "cards": _list(data, "cards"),
        "description": _text(data, "description"),
    }


def apply_wer_bin_ich(data: Dict[str, Any]) -> ViewModel:
    legal_forms = _list(data, "legalForms")
    pool_html = _text(data, "poolListHtml")
    if pool_html is None:
        # Pool list generated from the legal form names
        pool = [f.get("name", "") for f in legal_forms if isinstance(f, dict)]
    else:
        pool = []
    return {
        "legal_forms": legal_forms,
        "questions": _list(data, "questions"),
        "pool_list_html": pool_html,
        "pool": pool,
        "secret_hint_text": _text(data, "secretHintText"),
    }


def apply_what_and_why(data: Dict[str, Any]) -> ViewModel:
    return {
        "cases": _list(data, "cases"),
        "description": _text(data, "description"),
    }


# -----------------------------------------------------------------------------
# REGISTRY
# -----------------------------------------------------------------------------

ESCAPE_GAME = GameRenderer("escape_game", "Escape-Game", "Escape Game", apply_escape_game)
MATCHING_PUZZLE = GameRenderer("matching_puzzle", "matching_puzzle", "Matching-Puzzle", apply_matching_puzzle)
QUICK_QUIZ = GameRenderer("quick_quiz", "quick_quiz", "Quick Quiz", apply_quick_quiz)
SORTIER_SPIEL = GameRenderer("sortier_spiel", "sortier_spiel", "Sortier-Spiel", apply_sortier_spiel)
WER_BIN_ICH = GameRenderer("wer_bin_ich", "wer_bin_ich", "Wer bin ich?", apply_wer_bin_ich)
WHAT_AND_WHY = GameRenderer("what_and_why", "what_and_why", "What & Why", apply_what_and_why)

ALL_RENDERERS = (ESCAPE_GAME, MATCHING_PUZZLE, QUICK_QUIZ, SORTIER_SPIEL, WER_BIN_ICH, WHAT_AND_WHY)


def default_registry() -> Dict[str, GameRenderer]:
    """Renderer identity -> handler value, for every built-in game."""
    return {r.renderer_id: r for r in ALL_RENDERERS}
