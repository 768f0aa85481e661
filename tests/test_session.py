"""Tests for the quiz session state machine and its countdown."""
from __future__ import annotations

import asyncio

import pytest

from practice_quiz.models import Question
from practice_quiz.session import (
    ACTIVE,
    SUBMITTED,
    QuizSession,
    is_correct,
    normalize,
    score_answers,
)


def _answer_all_correctly(session: QuizSession) -> None:
    for q in session.questions:
        session.select_answer(q.correct_answer)
        if not session.is_last:
            session.next()


class TestScoring:
    def test_normalize(self):
        assert normalize("  Receive ") == "receive"

    def test_is_correct_ignores_case_and_whitespace(self, mc_question):
        assert is_correct(mc_question, "Receive ")
        assert is_correct(mc_question, "receive")
        assert not is_correct(mc_question, "Recieve")

    def test_unanswered_is_wrong(self, mc_question):
        assert not is_correct(mc_question, None)
        assert not is_correct(mc_question, "")

    def test_score_answers(self, sample_questions):
        correct, accuracy = score_answers(sample_questions, {0: "receive", 4: "436", 1: "childs"})
        assert correct == 2
        assert accuracy == 40.0

    def test_score_empty_set(self):
        assert score_answers((), {}) == (0, 0.0)


class TestInitialState:
    def test_fresh_session(self, sample_questions):
        s = QuizSession("spelling", sample_questions)
        assert s.phase == ACTIVE
        assert s.position == 0
        assert s.answers == {}
        assert s.remaining_seconds == 300
        assert s.summary is None
        assert s.current_question is sample_questions[0]

    def test_unknown_subject(self, sample_questions):
        with pytest.raises(ValueError):
            QuizSession("history", sample_questions)

    def test_custom_duration(self, sample_questions):
        s = QuizSession("math", sample_questions, quiz_seconds=60)
        assert s.remaining_seconds == 60

    @pytest.mark.parametrize("seconds", [0, -3, "300", True, 1.5])
    def test_invalid_duration(self, sample_questions, seconds):
        with pytest.raises(ValueError):
            QuizSession("math", sample_questions, quiz_seconds=seconds)

    def test_invalid_timer_interval(self, sample_questions):
        s = QuizSession("math", sample_questions)
        with pytest.raises(ValueError):
            s.arm_timer(interval=0)
        assert s.timer is None


class TestNavigation:
    def test_next_and_previous(self, sample_questions):
        s = QuizSession("grammar", sample_questions)
        s.next()
        s.next()
        assert s.position == 2
        s.previous()
        assert s.position == 1

    def test_previous_at_start_is_noop(self, sample_questions):
        s = QuizSession("grammar", sample_questions)
        s.previous()
        assert s.position == 0

    def test_next_on_last_submits(self, sample_questions):
        s = QuizSession("grammar", sample_questions)
        for _ in range(4):
            s.next()
        assert s.is_last
        assert s.is_active
        s.next()
        assert s.phase == SUBMITTED
        assert s.position == 4

    def test_answers_are_kept_per_position(self, sample_questions):
        s = QuizSession("reading", sample_questions)
        s.select_answer("Receive")
        s.next()
        s.select_answer("children")
        s.previous()
        assert s.current_answer == "Receive"
        s.select_answer("Recieve")
        assert s.answers == {0: "Recieve", 1: "children"}


class TestSubmit:
    def test_single_question_correct(self, mc_question):
        s = QuizSession("spelling", [mc_question])
        s.select_answer("Receive")
        summary = s.submit()
        assert summary.accuracy == 100.0
        assert summary.correct_answers == 1
        assert summary.total_questions == 1
        assert summary.subject == "spelling"
        assert summary.scores == {"spelling": 100.0}

    def test_submit_is_idempotent(self, sample_questions):
        calls = []
        s = QuizSession("math", sample_questions, on_complete=calls.append)
        first = s.submit()
        second = s.submit()
        assert first is second
        assert calls == [first]

    def test_no_changes_after_submit(self, sample_questions):
        s = QuizSession("math", sample_questions)
        s.select_answer("Receive")
        s.submit()
        s.select_answer("Recieve")
        s.next()
        s.previous()
        s.tick()
        assert s.answers == {0: "Receive"}
        assert s.position == 0
        assert s.remaining_seconds == 300
        assert s.summary.correct_answers == 1

    def test_empty_question_set(self):
        calls = []
        s = QuizSession("reading", (), on_complete=calls.append)
        assert s.current_question is None
        s.select_answer("anything")
        assert s.answers == {}
        summary = s.submit()
        assert summary.accuracy == 0.0
        assert summary.total_questions == 0
        assert len(calls) == 1

    def test_all_correct(self, sample_questions):
        s = QuizSession("grammar", sample_questions)
        _answer_all_correctly(s)
        assert s.submit().accuracy == 100.0

    def test_time_taken(self, sample_questions):
        s = QuizSession("grammar", sample_questions, quiz_seconds=10)
        s.tick()
        s.tick()
        s.submit()
        assert s.time_taken == 2


class TestTick:
    def test_tick_counts_down(self, sample_questions):
        s = QuizSession("math", sample_questions)
        s.tick()
        assert s.remaining_seconds == 299

    def test_expiry_auto_submits_partial_answers(self, sample_questions):
        calls = []
        s = QuizSession("math", sample_questions, quiz_seconds=5, on_complete=calls.append)
        s.select_answer("Receive")
        s.next()
        s.select_answer("children")
        for _ in range(5):
            s.tick()
        assert s.remaining_seconds == 0
        assert s.is_submitted
        assert s.summary.accuracy == 40.0
        assert s.summary.correct_answers == 2
        assert len(calls) == 1

    def test_overdrawn_countdown_submits(self, sample_questions):
        s = QuizSession("math", sample_questions, quiz_seconds=5)
        s.remaining_seconds = -2
        s.tick()
        assert s.is_submitted
        assert s.remaining_seconds == -2

    def test_ticks_after_expiry_do_nothing(self, sample_questions):
        calls = []
        s = QuizSession("math", sample_questions, quiz_seconds=1, on_complete=calls.append)
        s.tick()
        s.tick()
        assert s.remaining_seconds == 0
        assert len(calls) == 1


class TestRestartAndLoad:
    def test_restart_resets_state(self, sample_questions):
        s = QuizSession("reading", sample_questions)
        s.select_answer("Receive")
        s.next()
        s.tick()
        s.submit()
        s.restart()
        assert s.phase == ACTIVE
        assert s.position == 0
        assert s.answers == {}
        assert s.remaining_seconds == 300
        assert s.summary is None

    def test_restart_allows_new_result(self, sample_questions):
        calls = []
        s = QuizSession("reading", sample_questions, on_complete=calls.append)
        s.submit()
        s.restart()
        _answer_all_correctly(s)
        s.submit()
        assert [c.accuracy for c in calls] == [0.0, 100.0]

    def test_load_replaces_questions(self, sample_questions, mc_question):
        s = QuizSession("reading", sample_questions)
        s.next()
        s.load([mc_question])
        assert s.questions == (mc_question,)
        assert s.position == 0


class TestResults:
    def test_results_review(self, sample_questions):
        s = QuizSession("spelling", sample_questions)
        s.select_answer(" receive")
        s.submit()
        review = s.results("de")
        assert len(review) == 5
        assert review[0]["correct"] is True
        assert review[0]["question"] == "Welche Schreibweise ist richtig?"
        assert review[0]["correct_answer"] == "Receive"
        assert review[1]["your_answer"] == ""
        assert review[1]["correct"] is False


class TestTimer:
    @pytest.mark.asyncio
    async def test_timer_drives_expiry(self, sample_questions):
        calls = []
        s = QuizSession("math", sample_questions, quiz_seconds=3, on_complete=calls.append)
        timer = s.arm_timer(interval=0.01)
        assert timer.running
        for _ in range(200):
            if s.is_submitted:
                break
            await asyncio.sleep(0.01)
        assert s.is_submitted
        assert s.remaining_seconds == 0
        assert len(calls) == 1
        await asyncio.sleep(0.02)
        assert not timer.running

    @pytest.mark.asyncio
    async def test_submit_cancels_timer(self, sample_questions):
        s = QuizSession("math", sample_questions)
        timer = s.arm_timer(interval=0.01)
        await asyncio.sleep(0.03)
        s.submit()
        await asyncio.sleep(0)
        assert not timer.running
        remaining = s.remaining_seconds
        await asyncio.sleep(0.05)
        assert s.remaining_seconds == remaining

    @pytest.mark.asyncio
    async def test_close_stops_without_submitting(self, sample_questions):
        s = QuizSession("math", sample_questions)
        timer = s.arm_timer(interval=0.01)
        s.close()
        await asyncio.sleep(0.03)
        assert not timer.running
        assert s.is_active
        assert s.summary is None

    @pytest.mark.asyncio
    async def test_restart_rearms_timer(self, sample_questions):
        s = QuizSession("math", sample_questions, quiz_seconds=100)
        s.arm_timer(interval=0.01)
        s.submit()
        s.restart()
        assert s.timer.running
        await asyncio.sleep(0.05)
        assert s.remaining_seconds < 100
        s.close()

    @pytest.mark.asyncio
    async def test_failed_completion_handler_is_logged(self, sample_questions, caplog):
        def fail(summary):
            raise RuntimeError("disk full")

        s = QuizSession("math", sample_questions, quiz_seconds=1, on_complete=fail)
        timer = s.arm_timer(interval=0.01)
        for _ in range(100):
            if not timer.running:
                break
            await asyncio.sleep(0.01)
        assert s.is_submitted
        assert "failed auto-submit" in caplog.text


class TestQuestionKinds:
    def test_true_false_matching(self):
        q = Question(1, "true-false", {"en": "Correct?"}, "No", ("Yes", "No"))
        s = QuizSession("grammar", [q])
        s.select_answer("no")
        assert s.submit().accuracy == 100.0
