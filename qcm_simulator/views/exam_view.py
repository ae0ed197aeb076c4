"""
views/exam_view.py — 시험 풀기 화면

화면 데이터:
  - 현재 문제 (n / 전체), 진행률, 표시 여부
  - 응답 후에는 정답 보기 텍스트 (정오 표시용)
  - 이전 버튼은 첫 문제에서 비활성, 다음/완료 버튼은 현재 문제 응답 후에만 활성

상태 관리:
  - 세션은 SessionStore 에 시험별로 저장 (첫 진입 시 생성)
  - 사용자 동작은 session_machine 전이 → 저장 → 화면 갱신 순서
  - 카탈로그 읽기(await)는 세션 load~save 사이에 두지 않는다
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Tuple

from qcm_simulator.errors import InvalidInput, NotFoundError
from qcm_simulator.models.page_models import EmptyExamView, ExamPageView, NotFoundView
from qcm_simulator.models.question_model import Exam, Question
from qcm_simulator.router import PageId, exam_token
from qcm_simulator.services import session_machine
from qcm_simulator.services.exam_service import progress_percent

if TYPE_CHECKING:
    from qcm_simulator.context import AppContext


async def render(ctx: AppContext, params: Dict[str, str]):
    """시험 화면 데이터. 없는 시험이면 not-found 화면."""
    exam_id = params.get("id", "")

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    exam = await ctx.catalog.get_exam(exam_id)
    if exam is None:
        return NotFoundView()
    questions = await ctx.catalog.get_questions(exam_id)
    if not questions:
        return EmptyExamView(exam=exam)

    total = len(questions)
    is_new = not ctx.sessions.exists(exam_id)
    session = ctx.sessions.load(exam_id, total)
    if is_new:
        ctx.sessions.save(exam_id, session)

    index = min(session.current_index, total - 1)
    question = questions[index]
    record = session.answers[index]

    return ExamPageView(
        exam=exam,
        session=session,
        question=question,
        index=index,
        total=total,
        progress_percent=progress_percent(session, total),
        answer=record,
        correct_option=question.correct_option if record else None,
        is_marked=session.is_marked(index),
        is_last=index == total - 1,
        can_go_previous=index > 0,
        can_advance=record is not None,
    )


async def _load_exam(ctx: AppContext, exam_id: str) -> Tuple[Exam, List[Question]]:
    exam = await ctx.catalog.get_exam(exam_id)
    if exam is None:
        raise NotFoundError(f"Exam {exam_id} not found")
    questions = await ctx.catalog.get_questions(exam_id)
    if not questions:
        raise InvalidInput("This exam has no questions")
    return exam, questions


async def select_answer(ctx: AppContext, exam_id: str, question_index: int, option_index: int) -> None:
    """보기 선택. 이미 응답한 문제는 바뀌지 않는다."""
    _, questions = await _load_exam(ctx, exam_id)
    if not 0 <= question_index < len(questions):
        raise InvalidInput(f"Question index {question_index} out of range")
    question = questions[question_index]

    session = ctx.sessions.load(exam_id, len(questions))
    updated = session_machine.answer(
        session,
        question_index,
        option_index,
        is_correct=option_index == question.answer_index,
    )
    if updated is not session:
        ctx.sessions.save(exam_id, updated)
    await ctx.navigate(exam_token(PageId.EXAM, exam_id))


async def move_question(ctx: AppContext, exam_id: str, target_index: int) -> None:
    _, questions = await _load_exam(ctx, exam_id)
    session = ctx.sessions.load(exam_id, len(questions))
    updated = session_machine.navigate(session, target_index)
    if updated is not session:
        ctx.sessions.save(exam_id, updated)
    await ctx.navigate(exam_token(PageId.EXAM, exam_id))


async def toggle_mark(ctx: AppContext, exam_id: str, question_index: int) -> None:
    _, questions = await _load_exam(ctx, exam_id)
    session = ctx.sessions.load(exam_id, len(questions))
    updated = session_machine.toggle_mark(session, question_index)
    if updated is not session:
        ctx.sessions.save(exam_id, updated)
        if updated.is_marked(question_index):
            ctx.notifier.success("Question marked")
        else:
            ctx.notifier.info("Question unmarked")
    await ctx.navigate(exam_token(PageId.EXAM, exam_id))


async def finish_exam(ctx: AppContext, exam_id: str) -> None:
    """최종 제출 후 점수 화면으로 이동. 이미 제출된 세션이면 그대로."""
    _, questions = await _load_exam(ctx, exam_id)
    session = ctx.sessions.load(exam_id, len(questions))
    updated = session_machine.finalize(session)
    if updated is not session:
        ctx.sessions.save(exam_id, updated)
    await ctx.navigate(exam_token(PageId.SCORE, exam_id))
