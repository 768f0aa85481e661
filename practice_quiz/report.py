"""Progress report: aggregate statistics, recommendations and export documents."""
from __future__ import annotations

import html
import json
import logging
from collections.abc import Iterable
from datetime import datetime

from practice_quiz.models import SUBJECTS, ProgressEntry, subject_label

_log = logging.getLogger("practice_quiz.report")

FOCUS_THRESHOLD = 70.0
EXCELLENT_THRESHOLD = 90.0

SUBJECT_EMOJI = {
    "reading": "\U0001F4DA",
    "spelling": "✏️",
    "grammar": "\U0001F4DD",
    "math": "\U0001F522",
}


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def subject_averages(entries: Iterable[ProgressEntry]) -> tuple[dict[str, float], dict[str, int]]:
    """Mean score per subject over the entries that recorded it.

    Entries without a subject are skipped, not counted as zero. Returns
    (averages, counts); a subject nobody practised averages 0.
    """
    totals = {s: 0.0 for s in SUBJECTS}
    counts = {s: 0 for s in SUBJECTS}
    for entry in entries:
        for subject, score in entry.subject_score.items():
            if subject in totals:
                totals[subject] += score
                counts[subject] += 1
    averages = {s: (totals[s] / counts[s] if counts[s] else 0.0) for s in SUBJECTS}
    return averages, counts


def recommendations(averages: dict[str, float], counts: dict[str, int]) -> list[str]:
    recs = []
    for subject in SUBJECTS:
        if not counts.get(subject):
            continue
        average = averages[subject]
        if average < FOCUS_THRESHOLD:
            recs.append(f"Focus more practice on {subject} (current average: {average:.1f}%)")
        elif average > EXCELLENT_THRESHOLD:
            recs.append(f"Excellent progress in {subject}! Consider advanced challenges.")
    return recs


def aggregate(entries: Iterable[ProgressEntry]) -> dict:
    entries = list(entries)
    total_questions = sum(e.total_questions for e in entries)
    total_correct = sum(e.correct_answers for e in entries)
    averages, counts = subject_averages(entries)
    return {
        "total_sessions": len(entries),
        "total_questions": total_questions,
        "total_correct": total_correct,
        "overall_accuracy": _percent(total_correct, total_questions),
        "subject_averages": averages,
        "recommendations": recommendations(averages, counts),
    }


# ── Exports ───────────────────────────────────────────────────────────────


def export_filename(current_week: int, export_date: datetime, extension: str = "json") -> str:
    return f"learning-progress-week-{current_week}-{export_date.date().isoformat()}.{extension}"


def to_structured_document(
    entries: Iterable[ProgressEntry],
    current_week: int,
    export_date: datetime,
) -> dict:
    """Machine-readable report. Same inputs always give the same document."""
    entries = list(entries)
    summary = aggregate(entries)
    _log.debug("Building week %d report over %d sessions", current_week, len(entries))
    return {
        "exportDate": export_date.isoformat(),
        "currentWeek": current_week,
        "totalSessions": summary["total_sessions"],
        "overallProgress": {
            "totalQuestions": summary["total_questions"],
            "totalCorrect": summary["total_correct"],
            "averageAccuracy": summary["overall_accuracy"],
        },
        "subjectAverages": dict(summary["subject_averages"]),
        "weeklyProgress": [e.to_dict() for e in entries],
        "recommendations": summary["recommendations"],
    }


def to_json(document: dict) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


_STYLE = """
    body { font-family: Arial, sans-serif; margin: 40px; line-height: 1.6; }
    .header { text-align: center; border-bottom: 2px solid #333; padding-bottom: 20px; margin-bottom: 30px; }
    .section { margin-bottom: 30px; }
    .stats { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 20px; margin: 20px 0; }
    .stat-card { border: 1px solid #ddd; padding: 15px; border-radius: 8px; text-align: center; }
    .progress-item { padding: 10px; border-bottom: 1px solid #eee; }
    .recommendations { background: #f8f9fa; padding: 20px; border-radius: 8px; }
    h1, h2 { color: #333; }
    .score { font-weight: bold; color: #007bff; }
    @media print { body { margin: 0; } }
"""


def _stat_card(title: str, value: str) -> str:
    return (
        '<div class="stat-card">'
        f"<h3>{html.escape(title)}</h3>"
        f'<div class="score">{html.escape(value)}</div>'
        "</div>"
    )


def _progress_item(entry: dict) -> str:
    return (
        '<div class="progress-item">'
        f"<strong>Week {entry['week']} - {html.escape(entry['theme'])}</strong> | {entry['date']}"
        "<br>"
        f"Accuracy: {entry['accuracy']:.1f}% ({entry['correctAnswers']}/{entry['totalQuestions']})"
        "<br>"
        f"Focus Area: {html.escape(entry['focusArea'])}"
        "</div>"
    )


def to_printable_document(
    entries: Iterable[ProgressEntry],
    current_week: int,
    export_date: datetime,
) -> str:
    """Self-contained HTML report meant to be printed (or saved as PDF) by a browser."""
    report = to_structured_document(entries, current_week, export_date)
    overall = report["overallProgress"]

    overall_cards = "".join([
        _stat_card("Total Sessions", str(report["totalSessions"])),
        _stat_card("Total Questions", str(overall["totalQuestions"])),
        _stat_card("Overall Accuracy", f"{overall['averageAccuracy']:.1f}%"),
    ])
    subject_cards = "".join(
        _stat_card(
            f"{SUBJECT_EMOJI[s]} {subject_label(s)}",
            f"{report['subjectAverages'][s]:.1f}%",
        )
        for s in SUBJECTS
    )
    progress_items = "".join(_progress_item(e) for e in report["weeklyProgress"])

    recs_section = ""
    if report["recommendations"]:
        recs = "".join(f"<p>• {html.escape(r)}</p>" for r in report["recommendations"])
        recs_section = (
            '<div class="section">'
            "<h2>\U0001F4A1 Recommendations</h2>"
            f'<div class="recommendations">{recs}</div>'
            "</div>"
        )

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Learning Progress Report</title>
    <style>{_STYLE}</style>
  </head>
  <body>
    <div class="header">
      <h1>\U0001F4DA Learning Progress Report</h1>
      <p>Week {report['currentWeek']} | Generated on {export_date.date().isoformat()}</p>
    </div>
    <div class="section">
      <h2>\U0001F4CA Overall Progress</h2>
      <div class="stats">{overall_cards}</div>
    </div>
    <div class="section">
      <h2>\U0001F4C8 Subject Performance</h2>
      <div class="stats">{subject_cards}</div>
    </div>
    <div class="section">
      <h2>\U0001F4C5 Weekly Progress</h2>
      {progress_items}
    </div>
    {recs_section}
  </body>
</html>
"""
