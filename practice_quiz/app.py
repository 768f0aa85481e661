"""FastAPI application with all routes."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from practice_quiz.config import Settings, load_settings, save_settings
from practice_quiz.db import Database
from practice_quiz.exceptions import PersistenceError
from practice_quiz.ledger import ProgressLedger, clear_progress
from practice_quiz.models import LOCALES, SUBJECTS, Question
from practice_quiz.question_bank import questions_for
from practice_quiz.report import (
    aggregate,
    export_filename,
    to_json,
    to_printable_document,
    to_structured_document,
)
from practice_quiz.runner import QuizRunner
from practice_quiz.session import QuizSession
from practice_quiz.themes import WEEKS_OFFERED, Theme, all_themes, get_theme, theme_for_week

_log = logging.getLogger("practice_quiz.app")

RECENT_ACTIVITY = 5


def _open_ledger(app: FastAPI) -> None:
    """Build the ledger once from durable storage; remember a corrupt load."""
    state = app.state
    state.load_error = None
    try:
        state.ledger = ProgressLedger.load(state.db, state.settings.progress_slot)
    except PersistenceError as e:
        _log.error("%s", e)
        state.ledger = None
        state.load_error = str(e)
    state.runner = (
        QuizRunner(state.ledger, state.settings.quiz_seconds, state.settings.tick_interval)
        if state.ledger is not None
        else None
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = app.state
    owns_db = False
    if getattr(state, "db", None) is None:
        state.settings = load_settings()
        state.db = Database(state.settings.db_full_path)
        owns_db = True
    if not hasattr(state, "ledger"):
        _open_ledger(app)
    try:
        yield
    finally:
        if getattr(state, "runner", None) is not None:
            state.runner.close()
        if owns_db:
            state.db.close()
            state.db = None


def create_app(settings: Settings | None = None, db: Database | None = None) -> FastAPI:
    """Composition root. Passing *db* wires everything up immediately (used by tests)."""
    app = FastAPI(title="Practice Quiz", lifespan=lifespan)
    app.state.db = db
    if db is not None:
        app.state.settings = settings or Settings()
        _open_ledger(app)
    elif settings is not None:
        app.state.settings = settings
    _register_routes(app)
    return app


# ── Dependencies ──────────────────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_ledger(request: Request) -> ProgressLedger:
    ledger = request.app.state.ledger
    if ledger is None:
        raise HTTPException(
            500, f"Progress could not be loaded: {request.app.state.load_error}"
        )
    return ledger


def get_runner(request: Request, ledger: ProgressLedger = Depends(get_ledger)) -> QuizRunner:
    return request.app.state.runner


def get_active_session(runner: QuizRunner = Depends(get_runner)) -> QuizSession:
    if runner.session is None:
        raise HTTPException(404, "No active quiz session")
    return runner.session


async def _json_body(request: Request) -> dict:
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(400, "Request body is not valid JSON")
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    return body


def _resolve_theme(settings: Settings, week: int, theme_id: str | None) -> Theme:
    theme_id = theme_id or settings.theme_id
    if not theme_id:
        return theme_for_week(week)
    theme = get_theme(theme_id)
    if theme is None:
        raise HTTPException(404, f"Unknown theme: {theme_id}")
    return theme


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_subject(subject: str) -> None:
    if subject not in SUBJECTS:
        raise HTTPException(404, f"Unknown subject: {subject}")


def _format_time(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


def _question_view(q: Question, language: str) -> dict:
    return {
        "id": q.id,
        "kind": q.kind,
        "text": q.prompt_text(language),
        "options": list(q.options),
    }


def _session_view(runner: QuizRunner, language: str) -> dict:
    s = runner.session
    q = s.current_question
    view = {
        "subject": s.subject,
        "week": runner.week,
        "theme": runner.theme.to_dict() if runner.theme else None,
        "phase": s.phase,
        "position": s.position,
        "total": len(s.questions),
        "is_last": s.is_last,
        "remaining_seconds": s.remaining_seconds,
        "time_left": _format_time(s.remaining_seconds),
        "answer": s.current_answer or "",
        "question": _question_view(q, language) if q else None,
    }
    if s.summary is not None:
        view["summary"] = {
            "accuracy": s.summary.accuracy,
            "correct_answers": s.summary.correct_answers,
            "total_questions": s.summary.total_questions,
            "time_taken": _format_time(s.time_taken),
        }
        if runner.last_entry is not None:
            view["entry"] = runner.last_entry.to_dict()
        if runner.theme is not None:
            view["motivational"] = runner.theme.motivational.get(language, "")
    return view


def _register_routes(app: FastAPI) -> None:

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    # ── API: Catalog ──────────────────────────────────────────────────────

    @app.get("/api/themes")
    async def api_themes(settings: Settings = Depends(get_settings)):
        current = _resolve_theme(settings, settings.current_week, None)
        return {
            "themes": [t.to_dict() for t in all_themes()],
            "current": current.to_dict(),
        }

    @app.get("/api/weeks")
    async def api_weeks():
        return [
            {"week": w, "theme_id": theme_for_week(w).id, "theme_name": theme_for_week(w).name}
            for w in range(1, WEEKS_OFFERED + 1)
        ]

    @app.get("/api/quiz/{subject}")
    async def api_quiz_preview(
        subject: str,
        week: int | None = None,
        theme: str | None = None,
        settings: Settings = Depends(get_settings),
    ):
        _check_subject(subject)
        week = week or settings.current_week
        resolved = _resolve_theme(settings, week, theme)
        questions = questions_for(week, resolved.id, subject)
        return {
            "subject": subject,
            "week": week,
            "theme_id": resolved.id,
            "questions": [_question_view(q, settings.language) for q in questions],
        }

    # ── API: Session ──────────────────────────────────────────────────────

    @app.post("/api/session/start")
    async def api_session_start(
        request: Request,
        settings: Settings = Depends(get_settings),
        runner: QuizRunner = Depends(get_runner),
    ):
        body = await _json_body(request)
        subject = body.get("subject", "")
        _check_subject(subject)
        week = body.get("week", settings.current_week)
        if not _is_int(week) or week < 1:
            raise HTTPException(400, "week must be a positive integer")
        theme = _resolve_theme(settings, week, body.get("theme"))
        runner.start(subject, week, theme)
        return _session_view(runner, settings.language)

    @app.get("/api/session")
    async def api_session(
        settings: Settings = Depends(get_settings),
        runner: QuizRunner = Depends(get_runner),
        session: QuizSession = Depends(get_active_session),
    ):
        return _session_view(runner, settings.language)

    @app.post("/api/session/answer")
    async def api_session_answer(
        request: Request,
        settings: Settings = Depends(get_settings),
        runner: QuizRunner = Depends(get_runner),
        session: QuizSession = Depends(get_active_session),
    ):
        body = await _json_body(request)
        text = body.get("text")
        if not isinstance(text, str):
            raise HTTPException(400, "text must be a string")
        session.select_answer(text)
        return _session_view(runner, settings.language)

    @app.post("/api/session/{action}")
    async def api_session_action(
        action: str,
        settings: Settings = Depends(get_settings),
        runner: QuizRunner = Depends(get_runner),
        session: QuizSession = Depends(get_active_session),
    ):
        actions = {
            "next": session.next,
            "previous": session.previous,
            "submit": session.submit,
            "restart": session.restart,
            "tick": session.tick,
        }
        if action not in actions:
            raise HTTPException(404, f"Unknown session action: {action}")
        if action == "restart":
            runner.last_entry = None
        actions[action]()
        return _session_view(runner, settings.language)

    @app.get("/api/session/results")
    async def api_session_results(
        settings: Settings = Depends(get_settings),
        session: QuizSession = Depends(get_active_session),
    ):
        if not session.is_submitted:
            raise HTTPException(409, "Quiz has not been submitted yet")
        return {
            "summary": {
                "accuracy": session.summary.accuracy,
                "correct_answers": session.summary.correct_answers,
                "total_questions": session.summary.total_questions,
            },
            "review": session.results(settings.language),
        }

    # ── API: Progress ─────────────────────────────────────────────────────

    @app.get("/api/progress")
    async def api_progress(ledger: ProgressLedger = Depends(get_ledger)):
        return {"entries": [e.to_dict() for e in ledger.all()]}

    @app.post("/api/progress/reset")
    async def api_progress_reset(request: Request):
        state = request.app.state
        if state.ledger is not None:
            raise HTTPException(409, "Progress history is append-only")
        removed = clear_progress(state.db, state.settings.progress_slot)
        _open_ledger(request.app)
        return {"cleared": removed}

    @app.get("/api/dashboard")
    async def api_dashboard(
        settings: Settings = Depends(get_settings),
        ledger: ProgressLedger = Depends(get_ledger),
    ):
        week = settings.current_week
        theme = _resolve_theme(settings, week, None)
        result = {
            "week": week,
            "theme": theme.to_dict(),
            "private_mode": settings.private_mode,
        }
        if settings.private_mode:
            return result
        week_entries = ledger.for_week(week)
        recent = list(ledger.all()[-RECENT_ACTIVITY:])
        recent.reverse()
        result.update({
            "stats": aggregate(ledger.all()),
            "week_entries": [e.to_dict() for e in week_entries],
            "focus_area": week_entries[-1].focus_area if week_entries else None,
            "recent_activity": [e.to_dict() for e in recent],
        })
        return result

    # ── API: Report / export ──────────────────────────────────────────────

    @app.get("/api/report")
    async def api_report(ledger: ProgressLedger = Depends(get_ledger)):
        return aggregate(ledger.all())

    @app.get("/api/export/json")
    async def api_export_json(
        week: int | None = None,
        settings: Settings = Depends(get_settings),
        ledger: ProgressLedger = Depends(get_ledger),
    ):
        week = week or settings.current_week
        now = datetime.now(timezone.utc)
        document = to_structured_document(ledger.all(), week, now)
        return Response(
            content=to_json(document),
            media_type="application/json",
            headers={
                "Content-Disposition": f'attachment; filename="{export_filename(week, now)}"'
            },
        )

    @app.get("/api/export/html", response_class=HTMLResponse)
    async def api_export_html(
        week: int | None = None,
        settings: Settings = Depends(get_settings),
        ledger: ProgressLedger = Depends(get_ledger),
    ):
        week = week or settings.current_week
        return to_printable_document(ledger.all(), week, datetime.now(timezone.utc))

    # ── API: Settings ─────────────────────────────────────────────────────

    @app.get("/api/settings")
    async def api_get_settings(settings: Settings = Depends(get_settings)):
        return settings.to_dict()

    @app.put("/api/settings")
    async def api_update_settings(request: Request, settings: Settings = Depends(get_settings)):
        body = await _json_body(request)
        if "language" in body and body["language"] not in LOCALES:
            raise HTTPException(400, f"language must be one of {', '.join(LOCALES)}")
        if "current_week" in body:
            week = body["current_week"]
            if not _is_int(week) or not 1 <= week <= WEEKS_OFFERED:
                raise HTTPException(400, f"current_week must be between 1 and {WEEKS_OFFERED}")
        if "quiz_seconds" in body:
            seconds = body["quiz_seconds"]
            if not _is_int(seconds) or seconds < 1:
                raise HTTPException(400, "quiz_seconds must be a positive integer")
        if "tick_interval" in body:
            interval = body["tick_interval"]
            if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
                raise HTTPException(400, "tick_interval must be a positive number")
        if body.get("theme_id") and get_theme(body["theme_id"]) is None:
            raise HTTPException(404, f"Unknown theme: {body['theme_id']}")
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        for k, v in body.items():
            if k in known:
                setattr(settings, k, v)
        runner = request.app.state.runner
        if runner is not None:
            runner.quiz_seconds = settings.quiz_seconds
            runner.tick_interval = settings.tick_interval
        save_settings(settings)
        return settings.to_dict()


app = create_app()
