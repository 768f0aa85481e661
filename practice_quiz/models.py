"""Data classes for questions, session summaries and progress entries."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from practice_quiz.exceptions import QuestionValidationError

SUBJECTS = ("reading", "spelling", "grammar", "math")
LOCALES = ("en", "de")
DEFAULT_LOCALE = "en"

MULTIPLE_CHOICE = "multiple-choice"
FREE_INPUT = "input"
TRUE_FALSE = "true-false"
QUESTION_KINDS = (MULTIPLE_CHOICE, FREE_INPUT, TRUE_FALSE)

# Accepted literal pairs for true-false questions
TRUE_FALSE_PAIRS = (("True", "False"), ("Yes", "No"))


def localized(variants: dict[str, str], locale: str) -> str:
    """Pick the text for *locale*, falling back to English."""
    return variants.get(locale) or variants.get(DEFAULT_LOCALE, "")


def subject_label(subject: str) -> str:
    return subject[:1].upper() + subject[1:]


@dataclass(frozen=True)
class Question:
    id: int
    kind: str  # multiple-choice | input | true-false
    prompt: dict[str, str]
    correct_answer: str
    options: tuple[str, ...] = ()
    explanation: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in QUESTION_KINDS:
            raise QuestionValidationError(f"Question {self.id}: unknown kind {self.kind!r}")
        if not self.prompt.get(DEFAULT_LOCALE):
            raise QuestionValidationError(f"Question {self.id}: missing English prompt")
        # Normalize list input so the record stays hashable and immutable
        object.__setattr__(self, "options", tuple(self.options))

        if self.kind == FREE_INPUT:
            if self.options:
                raise QuestionValidationError(f"Question {self.id}: free input takes no options")
            if not self.correct_answer.strip():
                raise QuestionValidationError(f"Question {self.id}: empty correct answer")
        elif self.kind == TRUE_FALSE:
            if not self.options:
                object.__setattr__(self, "options", TRUE_FALSE_PAIRS[0])
            if self.options not in TRUE_FALSE_PAIRS:
                raise QuestionValidationError(
                    f"Question {self.id}: true-false options must be one of {TRUE_FALSE_PAIRS}"
                )
            if self.correct_answer not in self.options:
                raise QuestionValidationError(
                    f"Question {self.id}: answer {self.correct_answer!r} is not {self.options}"
                )
        else:
            if len(self.options) < 2:
                raise QuestionValidationError(f"Question {self.id}: needs at least two options")
            if self.correct_answer not in self.options:
                raise QuestionValidationError(
                    f"Question {self.id}: answer {self.correct_answer!r} is not among the options"
                )

    def prompt_text(self, locale: str = DEFAULT_LOCALE) -> str:
        return localized(self.prompt, locale)

    def explanation_text(self, locale: str = DEFAULT_LOCALE) -> str:
        return localized(self.explanation, locale)

    @classmethod
    def from_dict(cls, data: dict) -> Question:
        return cls(
            id=data["id"],
            kind=data["type"],
            prompt=dict(data["question"]),
            correct_answer=str(data["correctAnswer"]),
            options=tuple(data.get("options", ())),
            explanation=dict(data.get("explanation", {})),
        )


@dataclass(frozen=True)
class SessionSummary:
    subject: str
    subject_score: float
    accuracy: float
    total_questions: int
    correct_answers: int

    @property
    def scores(self) -> dict[str, float]:
        return {self.subject: self.subject_score}


@dataclass(frozen=True)
class ProgressEntry:
    week: int
    theme_name: str
    subject_score: dict[str, float]
    accuracy: float
    total_questions: int
    correct_answers: int
    date: date
    focus_area: str

    def to_dict(self) -> dict:
        """Persisted / exported shape of an entry."""
        return {
            "week": self.week,
            "theme": self.theme_name,
            "subjectScore": dict(self.subject_score),
            "accuracy": self.accuracy,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "date": self.date.isoformat(),
            "focusArea": self.focus_area,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProgressEntry:
        """Inverse of to_dict(). Raises KeyError/TypeError/ValueError on bad input."""
        scores = data["subjectScore"]
        if not isinstance(scores, dict) or not scores:
            raise ValueError("subjectScore must be a non-empty mapping")
        for subject, score in scores.items():
            if subject not in SUBJECTS:
                raise ValueError(f"unknown subject {subject!r}")
            _check_percentage(score)
        total = _check_int(data["totalQuestions"])
        correct = _check_int(data["correctAnswers"])
        if not 0 <= correct <= total:
            raise ValueError(f"correctAnswers {correct} outside [0, {total}]")
        theme = data["theme"]
        focus = data["focusArea"]
        if not isinstance(theme, str) or not isinstance(focus, str):
            raise TypeError("theme and focusArea must be strings")
        return cls(
            week=_check_int(data["week"]),
            theme_name=theme,
            subject_score={s: float(v) for s, v in scores.items()},
            accuracy=_check_percentage(data["accuracy"]),
            total_questions=total,
            correct_answers=correct,
            date=date.fromisoformat(data["date"]),
            focus_area=focus,
        )


def _check_int(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return value


def _check_percentage(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    if not 0 <= value <= 100:
        raise ValueError(f"percentage {value} outside [0, 100]")
    return float(value)
