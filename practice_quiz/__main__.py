"""CLI entry point for practice-quiz.

Usage:
  python -m practice_quiz serve [--port PORT] [--host HOST]
  python -m practice_quiz stop
  python -m practice_quiz status
  python -m practice_quiz stats
  python -m practice_quiz export [--format json|html] [--week N] [--out FILE]
  python -m practice_quiz reset-progress --yes
"""
from __future__ import annotations

import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "status":
        _status()
    elif command == "stats":
        _stats()
    elif command == "export":
        _export(args[1:])
    elif command == "reset-progress":
        _reset_progress(args[1:])
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, status, stats, export, reset-progress")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _stop() -> bool:
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        return False
    finally:
        PID_FILE.unlink(missing_ok=True)


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _serve(args: list[str]):
    import uvicorn

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'stop' first.")
        sys.exit(1)

    port = int(_parse_flag(args, "--port", "8766"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    PID_FILE.write_text(str(os.getpid()))

    print(f"Starting Practice Quiz on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "practice_quiz.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        PID_FILE.unlink(missing_ok=True)


def _open_ledger():
    from practice_quiz.config import load_settings
    from practice_quiz.db import Database
    from practice_quiz.exceptions import PersistenceError
    from practice_quiz.ledger import ProgressLedger

    settings = load_settings()
    db = Database(settings.db_full_path)
    try:
        ledger = ProgressLedger.load(db, settings.progress_slot)
    except PersistenceError as e:
        db.close()
        print(f"Error: {e}")
        print("Run 'reset-progress --yes' to discard the stored history.")
        sys.exit(1)
    return settings, db, ledger


def _stats():
    from practice_quiz.models import SUBJECTS, subject_label
    from practice_quiz.report import aggregate

    settings, db, ledger = _open_ledger()
    stats = aggregate(ledger.all())

    print("Practice Quiz Stats")
    print("=" * 40)
    print(f"Current week:       {settings.current_week}")
    print(f"Sessions completed: {stats['total_sessions']}")
    print(f"Questions answered: {stats['total_questions']}")
    print(f"Correct answers:    {stats['total_correct']}")
    print(f"Overall accuracy:   {stats['overall_accuracy']:.1f}%")
    for subject in SUBJECTS:
        label = f"{subject_label(subject)}:"
        print(f"  {label:<18}{stats['subject_averages'][subject]:.1f}%")
    latest = ledger.latest()
    if latest is not None:
        print(f"Focus area:         {latest.focus_area}")
    for rec in stats["recommendations"]:
        print(f"  * {rec}")
    updated = db.get_slot_updated_at(settings.progress_slot)
    if updated:
        print(f"Last saved:         {updated}")
    db.close()


def _export(args: list[str]):
    from datetime import datetime, timezone

    from practice_quiz.report import (
        export_filename,
        to_json,
        to_printable_document,
        to_structured_document,
    )

    fmt = _parse_flag(args, "--format", "json")
    if fmt not in ("json", "html"):
        print(f"Unknown format: {fmt} (expected json or html)")
        sys.exit(1)

    week_flag = _parse_flag(args, "--week", "")
    if week_flag and not (week_flag.isdigit() and int(week_flag) >= 1):
        print(f"Invalid week: {week_flag} (expected a positive integer)")
        sys.exit(1)

    settings, db, ledger = _open_ledger()
    week = int(week_flag) if week_flag else settings.current_week
    now = datetime.now(timezone.utc)
    out = Path(_parse_flag(args, "--out", export_filename(week, now, fmt)))

    if fmt == "json":
        content = to_json(to_structured_document(ledger.all(), week, now))
    else:
        content = to_printable_document(ledger.all(), week, now)
    out.write_text(content, encoding="utf-8")
    print(f"Exported {len(ledger)} sessions to {out}")
    db.close()


def _reset_progress(args: list[str]):
    from practice_quiz.config import load_settings
    from practice_quiz.db import Database
    from practice_quiz.ledger import clear_progress

    if "--yes" not in args:
        print("This permanently deletes all recorded progress. Re-run with --yes to confirm.")
        sys.exit(1)

    settings = load_settings()
    db = Database(settings.db_full_path)
    if clear_progress(db, settings.progress_slot):
        print("Progress history cleared.")
    else:
        print("No stored progress to clear.")
    db.close()


if __name__ == "__main__":
    main()
