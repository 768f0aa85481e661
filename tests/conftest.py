"""Shared test fixtures."""
from __future__ import annotations

from datetime import date

import pytest

from practice_quiz.db import Database
from practice_quiz.ledger import ProgressLedger
from practice_quiz.models import ProgressEntry, Question, SessionSummary


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def mc_question():
    """A valid multiple-choice question."""
    return Question(
        id=1,
        kind="multiple-choice",
        prompt={"en": "Which spelling is correct?", "de": "Welche Schreibweise ist richtig?"},
        correct_answer="Receive",
        options=("Recieve", "Receive", "Receve", "Receave"),
        explanation={"en": "Receive is the exception to the rule."},
    )


@pytest.fixture
def sample_questions(mc_question):
    """Five questions covering every kind."""
    return (
        mc_question,
        Question(2, "input", {"en": "Plural of 'child'?"}, "children"),
        Question(3, "true-false", {"en": "The sun is a star."}, "True"),
        Question(4, "true-false", {"en": "'Less people' is correct?"}, "No", ("Yes", "No")),
        Question(5, "input", {"en": "What is 247 + 189?"}, "436"),
    )


@pytest.fixture
def ledger(tmp_db):
    """An empty ledger on the temporary database."""
    return ProgressLedger.load(tmp_db)


def make_summary(subject: str = "reading", accuracy: float = 80.0, total: int = 5) -> SessionSummary:
    return SessionSummary(
        subject=subject,
        subject_score=accuracy,
        accuracy=accuracy,
        total_questions=total,
        correct_answers=round(total * accuracy / 100),
    )


def make_entry(
    subject: str = "reading",
    score: float = 80.0,
    week: int = 1,
    total: int = 5,
    on_date: date = date(2025, 3, 3),
) -> ProgressEntry:
    return ProgressEntry(
        week=week,
        theme_name="Taylor Swift Era",
        subject_score={subject: score},
        accuracy=score,
        total_questions=total,
        correct_answers=round(total * score / 100),
        date=on_date,
        focus_area=subject.capitalize(),
    )
