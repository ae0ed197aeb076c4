"""
Scenario Tests for the page controllers (catalog + session + router together)
"""

import json

import pytest

from qcm_simulator.errors import InvalidInput, StorageError, ValidationError
from qcm_simulator.models.notice import NoticeKind
from qcm_simulator.models.page_models import (
    ExamListView,
    ExamPageView,
    NotFoundView,
    ReviewView,
    ScorePendingView,
    ScoreView,
)
from qcm_simulator.router import PageId, exam_token
from qcm_simulator.views import exam_list_view, exam_view, import_view, result_view

from conftest import make_raw_question


def _payload(*answer_indices):
    return json.dumps([
        make_raw_question(stem=f"Q{i}", answer_index=a) for i, a in enumerate(answer_indices)
    ])


async def _import(ctx, *answer_indices, name="Quiz1"):
    return await import_view.import_exam(ctx, name, "quiz.json", _payload(*answer_indices))


def _messages(ctx):
    return [(n.kind, n.message) for n in ctx.notifier.drain()]


class TestImportFlow:

    def test_single_question_scenario_scores_100(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 2)
            exam = await ctx.catalog.get_exam(exam_id)
            assert exam.question_count == 1

            await ctx.navigate(exam_token(PageId.EXAM, exam_id))
            await exam_view.select_answer(ctx, exam_id, 0, 2)
            answered = ctx.presenter.view

            await exam_view.finish_exam(ctx, exam_id)
            return answered, ctx.presenter.token, ctx.presenter.view, exam_id

        answered, token, view, exam_id = run_ctx(scenario)
        assert isinstance(answered, ExamPageView)
        assert answered.answer.is_correct is True
        assert answered.correct_option == "c"
        assert answered.can_advance is True
        assert token == f"/score/{exam_id}"
        assert isinstance(view, ScoreView)
        assert view.summary.correct == 1
        assert view.summary.percent == 100

    def test_import_success_lands_on_exam_list(self, run_ctx):
        async def scenario(ctx):
            await _import(ctx, 0, 1, 2)
            return ctx.presenter.token, ctx.presenter.view, _messages(ctx)

        token, view, messages = run_ctx(scenario)
        assert token == "/exams"
        assert isinstance(view, ExamListView)
        assert view.exams[0].question_count == 3
        assert (NoticeKind.SUCCESS, "Exam imported successfully") in messages

    def test_import_invalid_payload_persists_nothing(self, run_ctx):
        async def scenario(ctx):
            bad = json.dumps([make_raw_question(), {"options": ["a"]}])
            with pytest.raises(ValidationError):
                await import_view.import_exam(ctx, "Bad", "bad.json", bad)
            return await ctx.catalog.list_exams(), _messages(ctx)

        exams, messages = run_ctx(scenario)
        assert exams == []
        assert messages == [(NoticeKind.ERROR, "Invalid JSON structure")]

    @pytest.mark.parametrize("name, file_name, text, message", [
        ("  ", "q.json", "[]", "Give your exam a name"),
        ("Quiz", "", "", "Choose a JSON file first"),
    ])
    def test_import_requires_name_and_file(self, run_ctx, name, file_name, text, message):
        async def scenario(ctx):
            with pytest.raises(InvalidInput, match=message):
                await import_view.import_exam(ctx, name, file_name, text)

        run_ctx(scenario)


class TestExamPage:

    def test_unknown_exam_renders_not_found(self, run_ctx):
        async def scenario(ctx):
            views = []
            for page in (PageId.EXAM, PageId.SCORE, PageId.REVIEW, PageId.MARKED):
                views.append(await ctx.navigate(exam_token(page, "unknown-id")))
            return views

        assert all(isinstance(v, NotFoundView) for v in run_ctx(scenario))

    def test_first_render_creates_session(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 1)
            before = ctx.sessions.exists(exam_id)
            view = await ctx.navigate(exam_token(PageId.EXAM, exam_id))
            return before, ctx.sessions.exists(exam_id), view

        before, after, view = run_ctx(scenario)
        assert before is False and after is True
        assert view.index == 0 and view.total == 2
        assert view.can_go_previous is False
        assert view.can_advance is False
        assert view.is_last is False

    def test_answer_is_not_overwritten(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 1, 1)
            await exam_view.select_answer(ctx, exam_id, 0, 3)
            await exam_view.select_answer(ctx, exam_id, 0, 1)
            return ctx.sessions.load(exam_id, 2).answers[0]

        record = run_ctx(scenario)
        assert record.selected_index == 3
        assert record.is_correct is False

    def test_invalid_option_is_rejected_without_mutation(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 1)
            with pytest.raises(InvalidInput):
                await exam_view.select_answer(ctx, exam_id, 0, 6)
            with pytest.raises(InvalidInput):
                await exam_view.select_answer(ctx, exam_id, 5, 0)
            return ctx.sessions.load(exam_id, 1).answers

        assert run_ctx(scenario) == [None]

    def test_mark_then_unmark(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 0)
            ctx.notifier.drain()
            await exam_view.toggle_mark(ctx, exam_id, 0)
            marked_view = ctx.presenter.view
            await exam_view.toggle_mark(ctx, exam_id, 0)
            return marked_view, ctx.sessions.load(exam_id, 2).marked, _messages(ctx)

        marked_view, marked, messages = run_ctx(scenario)
        assert marked_view.is_marked is True
        assert marked == []
        assert messages == [
            (NoticeKind.SUCCESS, "Question marked"),
            (NoticeKind.INFO, "Question unmarked"),
        ]

    def test_move_question_clamps_and_updates_view(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 1, 2)
            await exam_view.move_question(ctx, exam_id, 99)
            return ctx.presenter.view

        view = run_ctx(scenario)
        assert view.index == 2
        assert view.is_last is True
        assert view.question.stem == "Q2"

    def test_progress_survives_reload(self, run_ctx):
        exam_id = run_ctx(lambda ctx: _import(ctx, 0, 1, 2))

        async def answer_two(ctx):
            await exam_view.select_answer(ctx, exam_id, 0, 0)
            await exam_view.move_question(ctx, exam_id, 1)

        run_ctx(answer_two)

        async def reload(ctx):
            return await ctx.navigate(exam_token(PageId.EXAM, exam_id))

        view = run_ctx(reload)
        assert view.index == 1
        assert view.progress_percent == 33
        assert view.session.answers[0].is_correct is True

    def test_failed_session_save_keeps_previous_state(self, run_ctx, monkeypatch):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0)
            await ctx.navigate(exam_token(PageId.EXAM, exam_id))

            def broken_save(exam_id, session):
                raise StorageError("disk unavailable")

            monkeypatch.setattr(ctx.sessions, "save", broken_save)
            with pytest.raises(StorageError):
                await exam_view.select_answer(ctx, exam_id, 0, 0)
            return ctx.sessions.load(exam_id, 1).answers

        assert run_ctx(scenario) == [None]


class TestScoreAndReview:

    def test_score_before_finishing_shows_pending(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0)
            return await ctx.navigate(exam_token(PageId.SCORE, exam_id))

        assert isinstance(run_ctx(scenario), ScorePendingView)

    def test_score_counts_unanswered_separately(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 1, 2, 3)
            await exam_view.select_answer(ctx, exam_id, 0, 0)
            await exam_view.select_answer(ctx, exam_id, 1, 0)
            await exam_view.toggle_mark(ctx, exam_id, 3)
            await exam_view.finish_exam(ctx, exam_id)
            return ctx.presenter.view

        view = run_ctx(scenario)
        assert (view.summary.correct, view.summary.incorrect, view.summary.unanswered) == (1, 1, 2)
        assert view.summary.percent == 25
        assert view.has_marked is True

    def test_finished_session_is_frozen(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 0)
            await exam_view.finish_exam(ctx, exam_id)
            with pytest.raises(InvalidInput):
                await exam_view.select_answer(ctx, exam_id, 0, 0)
            await exam_view.finish_exam(ctx, exam_id)
            return ctx.sessions.load(exam_id, 2)

        session = run_ctx(scenario)
        assert session.completed is True
        assert session.correct_count == 0
        assert session.answered_count == 0

    def test_retake_resets_session(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0)
            await exam_view.select_answer(ctx, exam_id, 0, 0)
            await exam_view.finish_exam(ctx, exam_id)
            ctx.notifier.drain()
            await result_view.retake(ctx, exam_id)
            return ctx.presenter.view, _messages(ctx)

        view, messages = run_ctx(scenario)
        assert isinstance(view, ExamPageView)
        assert view.session.completed is False
        assert view.answer is None
        assert messages == [(NoticeKind.INFO, "Session reset. Good luck!")]

    def test_marked_review_lists_only_marked(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 1, 2)
            await exam_view.toggle_mark(ctx, exam_id, 2)
            await exam_view.select_answer(ctx, exam_id, 2, 5)
            marked = await ctx.navigate(exam_token(PageId.MARKED, exam_id))
            full = await ctx.navigate(exam_token(PageId.REVIEW, exam_id))
            return marked, full

        marked, full = run_ctx(scenario)
        assert isinstance(marked, ReviewView) and marked.page == "marked"
        assert [item.index for item in marked.items] == [2]
        assert marked.items[0].selected_letter == "F"
        assert marked.items[0].correct_letter == "C"
        assert [item.index for item in full.items] == [0, 1, 2]


class TestExamListCommands:

    def test_delete_removes_questions_and_session(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0, 1)
            await exam_view.select_answer(ctx, exam_id, 0, 0)
            await exam_list_view.delete_exam(ctx, exam_id)
            return (
                await ctx.catalog.count_questions(exam_id),
                ctx.sessions.exists(exam_id),
                ctx.presenter.view,
            )

        count, has_session, view = run_ctx(scenario)
        assert count == 0
        assert has_session is False
        assert isinstance(view, ExamListView) and view.exams == []

    def test_delete_completes_when_session_cleanup_fails(self, run_ctx, monkeypatch):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0)

            def broken_reset(exam_id):
                raise StorageError("locked")

            monkeypatch.setattr(ctx.sessions, "reset", broken_reset)
            await exam_list_view.delete_exam(ctx, exam_id)
            return await ctx.catalog.get_exam(exam_id)

        assert run_ctx(scenario) is None

    def test_rename_trims_and_rejects_blank(self, run_ctx):
        async def scenario(ctx):
            exam_id = await _import(ctx, 0)
            await exam_list_view.rename_exam(ctx, exam_id, "  Cardio 2024  ")
            with pytest.raises(InvalidInput):
                await exam_list_view.rename_exam(ctx, exam_id, "   ")
            return await ctx.catalog.get_exam(exam_id)

        assert run_ctx(scenario).name == "Cardio 2024"
