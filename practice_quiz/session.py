"""Quiz session state machine: traversal, answers, countdown and scoring."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from practice_quiz.models import DEFAULT_LOCALE, SUBJECTS, Question, SessionSummary

_log = logging.getLogger("practice_quiz.session")
_timer_log = logging.getLogger("practice_quiz.timer")

ACTIVE = "active"
SUBMITTED = "submitted"

DEFAULT_QUIZ_SECONDS = 300


def normalize(text: str) -> str:
    return text.strip().lower()


def is_correct(question: Question, answer: str | None) -> bool:
    """Unanswered is always wrong; otherwise compare case- and whitespace-insensitively."""
    if answer is None:
        return False
    return normalize(answer) == normalize(question.correct_answer)


def score_answers(questions: Sequence[Question], answers: dict[int, str]) -> tuple[int, float]:
    """Return (correct_count, accuracy). An empty question set scores 0%."""
    correct = sum(1 for i, q in enumerate(questions) if is_correct(q, answers.get(i)))
    if not questions:
        return 0, 0.0
    return correct, correct / len(questions) * 100


class SessionTimer:
    """Cancellable countdown task that calls ``session.tick()`` every *interval* seconds."""

    def __init__(self, session: QuizSession, interval: float = 1.0):
        self.session = session
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done() or task.get_loop().is_closed():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # Auto-submit runs inside the task itself; it exits on its own
        if task is current:
            return
        task.cancel()
        _timer_log.debug("Timer cancelled for %s session", self.session.subject)

    async def _run(self) -> None:
        try:
            while self.session.is_active:
                await asyncio.sleep(self.interval)
                self.session.tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            # on_complete failed (e.g. persistence); the session is already submitted
            _timer_log.exception("Countdown stopped after a failed auto-submit")


class QuizSession:
    """One timed attempt at a fixed, ordered question set for one subject.

    Phases: ``active`` -> ``submitted``. ``select_answer``, ``next``,
    ``previous`` and ``tick`` are no-ops once submitted, so a finalized
    result can never be changed. ``on_complete`` receives the summary
    exactly once per transition to ``submitted``.
    """

    def __init__(
        self,
        subject: str,
        questions: Sequence[Question] = (),
        quiz_seconds: int = DEFAULT_QUIZ_SECONDS,
        on_complete: Callable[[SessionSummary], None] | None = None,
    ):
        if subject not in SUBJECTS:
            raise ValueError(f"Unknown subject: {subject!r}")
        if isinstance(quiz_seconds, bool) or not isinstance(quiz_seconds, int) or quiz_seconds < 1:
            raise ValueError(f"quiz_seconds must be a positive integer, got {quiz_seconds!r}")
        self.subject = subject
        self.quiz_seconds = quiz_seconds
        self._on_complete = on_complete
        self._timer: SessionTimer | None = None
        self._timer_interval: float | None = None
        self.load(questions)

    # ── State ────────────────────────────────────────────────────────────

    def _reset(self) -> None:
        self.position = 0
        self.answers: dict[int, str] = {}
        self.remaining_seconds = self.quiz_seconds
        self.phase = ACTIVE
        self.summary: SessionSummary | None = None

    @property
    def is_active(self) -> bool:
        return self.phase == ACTIVE

    @property
    def is_submitted(self) -> bool:
        return self.phase == SUBMITTED

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.position]

    @property
    def current_answer(self) -> str | None:
        return self.answers.get(self.position)

    @property
    def is_last(self) -> bool:
        return self.position >= len(self.questions) - 1

    # ── Transitions ──────────────────────────────────────────────────────

    def load(self, questions: Sequence[Question]) -> None:
        """Bind a new question sequence and return to the initial active state."""
        self.questions: tuple[Question, ...] = tuple(questions)
        self._reset()
        if not self.questions:
            _log.info("Loaded empty %s question set; it will score 0%%", self.subject)
        self._rearm_timer()

    def select_answer(self, text: str) -> None:
        if not self.is_active or not self.questions:
            return
        self.answers[self.position] = text

    def next(self) -> None:
        if not self.is_active:
            return
        if self.position < len(self.questions) - 1:
            self.position += 1
        else:
            self.submit()

    def previous(self) -> None:
        if not self.is_active:
            return
        if self.position > 0:
            self.position -= 1

    def tick(self) -> None:
        if not self.is_active:
            return
        if self.remaining_seconds > 0:
            self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            _log.info("Time is up for %s session, submitting", self.subject)
            self.submit()

    def submit(self) -> SessionSummary:
        """Finalize and score. Repeated calls return the same summary."""
        if self.summary is not None:
            return self.summary
        self.phase = SUBMITTED
        self._cancel_timer()
        correct, accuracy = score_answers(self.questions, self.answers)
        self.summary = SessionSummary(
            subject=self.subject,
            subject_score=accuracy,
            accuracy=accuracy,
            total_questions=len(self.questions),
            correct_answers=correct,
        )
        _log.info(
            "Submitted %s session: %d/%d correct (%.1f%%)",
            self.subject, correct, len(self.questions), accuracy,
        )
        if self._on_complete is not None:
            self._on_complete(self.summary)
        return self.summary

    def restart(self) -> None:
        """Fresh attempt at the same questions."""
        self._reset()
        self._rearm_timer()

    # ── Countdown ────────────────────────────────────────────────────────

    def arm_timer(self, interval: float = 1.0) -> SessionTimer:
        """Start the countdown task. Must be called from a running event loop."""
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval!r}")
        self._cancel_timer()
        self._timer_interval = interval
        self._timer = SessionTimer(self, interval)
        if self.is_active:
            self._timer.start()
        return self._timer

    @property
    def timer(self) -> SessionTimer | None:
        return self._timer

    def _rearm_timer(self) -> None:
        if self._timer_interval is not None:
            self.arm_timer(self._timer_interval)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def close(self) -> None:
        """Tear down: stop the countdown without submitting."""
        self._cancel_timer()
        self._timer_interval = None

    # ── Views ────────────────────────────────────────────────────────────

    def results(self, locale: str = DEFAULT_LOCALE) -> list[dict]:
        """Per-question review: the learner's answer against the canonical one."""
        review = []
        for i, q in enumerate(self.questions):
            answer = self.answers.get(i)
            review.append({
                "position": i,
                "question": q.prompt_text(locale),
                "your_answer": answer or "",
                "correct_answer": q.correct_answer,
                "correct": is_correct(q, answer),
                "explanation": q.explanation_text(locale),
            })
        return review

    @property
    def time_taken(self) -> int:
        return self.quiz_seconds - self.remaining_seconds
