"""Load the bundled question bank and build per-week question sets.

The bank is a JSON file keyed by subject:

  {"reading": [{"id": 1, "type": "multiple-choice",
                "question": {"en": ..., "de": ...},
                "options": [...], "correctAnswer": ...,
                "explanation": {"en": ..., "de": ...}}, ...], ...}
"""
from __future__ import annotations

import json
from dataclasses import replace
from functools import lru_cache
from pathlib import Path

from practice_quiz.models import SUBJECTS, Question

BANK_PATH = Path(__file__).resolve().parent / "data" / "questions.json"

# Theme-specific prompt rewrites: theme_id -> subject -> [(locale, old, new)]
THEME_REWRITES: dict[str, dict[str, list[tuple[str, str, str]]]] = {
    "taylor-swift": {
        "reading": [("en", "magnificent", "sparkling"), ("de", "magnificent", "funkelnd")],
    },
}


def parse_question_bank(path: Path) -> dict[str, tuple[Question, ...]]:
    """Parse a bank file. Every subject key must be known; records are validated."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    bank: dict[str, tuple[Question, ...]] = {}
    for subject, records in raw.items():
        if subject not in SUBJECTS:
            raise ValueError(f"Unknown subject in question bank: {subject!r}")
        bank[subject] = tuple(Question.from_dict(r) for r in records)
    return bank


@lru_cache(maxsize=None)
def load_question_bank(path: Path = BANK_PATH) -> dict[str, tuple[Question, ...]]:
    return parse_question_bank(path)


def _personalize(question: Question, rewrites: list[tuple[str, str, str]]) -> Question:
    prompt = dict(question.prompt)
    for locale, old, new in rewrites:
        if locale in prompt:
            prompt[locale] = prompt[locale].replace(old, new)
    return replace(question, prompt=prompt)


def questions_for(
    week: int,
    theme_id: str,
    subject: str,
    path: Path = BANK_PATH,
) -> tuple[Question, ...]:
    """Question set for one (week, theme, subject) session.

    The bundled bank has the same base set every week; *week* is part of
    the contract so a per-week bank can slot in without changing callers.
    """
    if subject not in SUBJECTS:
        raise ValueError(f"Unknown subject: {subject!r}")
    base = load_question_bank(path).get(subject, ())
    rewrites = THEME_REWRITES.get(theme_id, {}).get(subject)
    if not rewrites:
        return base
    return tuple(_personalize(q, rewrites) for q in base)
