"""Append-only progress ledger persisted to a single storage slot."""
from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from datetime import date
from typing import TYPE_CHECKING

from practice_quiz.exceptions import PersistenceError
from practice_quiz.models import SUBJECTS, ProgressEntry, SessionSummary, _check_int, subject_label

if TYPE_CHECKING:
    from practice_quiz.db import Database

_log = logging.getLogger("practice_quiz.ledger")

DEFAULT_SLOT = "learningProgress"


def focus_area(scores: dict[str, float]) -> str:
    """Label of the lowest-scoring subject; ties go to the earlier subject in SUBJECTS."""
    recorded = [s for s in SUBJECTS if s in scores]
    if not recorded:
        raise ValueError("No subject scores to pick a focus area from")
    return subject_label(min(recorded, key=lambda s: scores[s]))


def decode_entries(raw: str) -> list[ProgressEntry]:
    """Parse a serialized snapshot. Raises PersistenceError on anything unexpected."""
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise TypeError(f"expected a list of entries, got {type(data).__name__}")
        return [ProgressEntry.from_dict(item) for item in data]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise PersistenceError(f"Stored progress is corrupt: {e}") from e


def encode_entries(entries: list[ProgressEntry] | tuple[ProgressEntry, ...]) -> str:
    return json.dumps([e.to_dict() for e in entries], ensure_ascii=False)


class ProgressLedger:
    """Ordered history of completed sessions; insertion order is chronological.

    Entries are never changed or removed. Every ``append`` writes the full
    sequence through to the database before returning.
    """

    def __init__(self, db: Database, slot: str = DEFAULT_SLOT, entries=()):
        self.db = db
        self.slot = slot
        self._entries: tuple[ProgressEntry, ...] = tuple(entries)

    @classmethod
    def load(cls, db: Database, slot: str = DEFAULT_SLOT) -> ProgressLedger:
        """Read the persisted snapshot; a missing slot gives an empty ledger."""
        try:
            raw = db.read_slot(slot)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read progress: {e}") from e
        if raw is None:
            _log.info("No stored progress in slot %r, starting empty", slot)
            return cls(db, slot)
        entries = decode_entries(raw)
        _log.info("Loaded %d progress entries from slot %r", len(entries), slot)
        return cls(db, slot, entries)

    def append(
        self,
        summary: SessionSummary,
        week: int,
        theme_name: str,
        on_date: date,
    ) -> ProgressEntry:
        """Record a finished session. A bad *week* raises ValueError before any write."""
        _check_int(week)
        scores = summary.scores
        entry = ProgressEntry(
            week=week,
            theme_name=theme_name,
            subject_score=scores,
            accuracy=summary.accuracy,
            total_questions=summary.total_questions,
            correct_answers=summary.correct_answers,
            date=on_date,
            focus_area=focus_area(scores),
        )
        updated = self._entries + (entry,)
        try:
            self.db.write_slot(self.slot, encode_entries(updated))
        except sqlite3.Error as e:
            _log.error("Failed to persist progress entry: %s", e)
            raise PersistenceError(f"Could not save progress: {e}") from e
        self._entries = updated
        _log.info(
            "Recorded week %d %s session: %.1f%% (%d/%d)",
            week, summary.subject, summary.accuracy,
            summary.correct_answers, summary.total_questions,
        )
        return entry

    def all(self) -> tuple[ProgressEntry, ...]:
        return self._entries

    def for_week(self, week: int) -> list[ProgressEntry]:
        return [e for e in self._entries if e.week == week]

    def latest(self) -> ProgressEntry | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ProgressEntry]:
        return iter(self._entries)


def clear_progress(db: Database, slot: str = DEFAULT_SLOT) -> bool:
    """Drop a stored snapshot, e.g. after load() reported it corrupt."""
    removed = db.delete_slot(slot)
    if removed:
        _log.warning("Cleared stored progress in slot %r", slot)
    return removed
