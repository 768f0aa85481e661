"""Owns the single active quiz session and records it in the ledger on completion."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING

from practice_quiz.question_bank import questions_for
from practice_quiz.session import QuizSession
from practice_quiz.themes import Theme

if TYPE_CHECKING:
    from practice_quiz.ledger import ProgressLedger
    from practice_quiz.models import ProgressEntry, SessionSummary

_log = logging.getLogger("practice_quiz.session")


class QuizRunner:
    """Creates sessions for (week, theme, subject) and writes each result once.

    Starting a new session tears down the previous one and its countdown.
    """

    def __init__(
        self,
        ledger: ProgressLedger,
        quiz_seconds: int = 300,
        tick_interval: float = 1.0,
        today: Callable[[], date] = date.today,
    ):
        self.ledger = ledger
        self.quiz_seconds = quiz_seconds
        self.tick_interval = tick_interval
        self._today = today
        self.session: QuizSession | None = None
        self.week: int | None = None
        self.theme: Theme | None = None
        self.last_entry: ProgressEntry | None = None

    def start(self, subject: str, week: int, theme: Theme, arm_timer: bool = True) -> QuizSession:
        self.close()
        questions = questions_for(week, theme.id, subject)
        self.week = week
        self.theme = theme
        self.last_entry = None
        self.session = QuizSession(
            subject,
            questions,
            quiz_seconds=self.quiz_seconds,
            on_complete=self._record,
        )
        if arm_timer:
            self.session.arm_timer(self.tick_interval)
        _log.info(
            "Started %s session for week %d (%s), %d questions",
            subject, week, theme.name, len(questions),
        )
        return self.session

    def _record(self, summary: SessionSummary) -> None:
        assert self.week is not None and self.theme is not None
        self.last_entry = self.ledger.append(summary, self.week, self.theme.name, self._today())

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None
