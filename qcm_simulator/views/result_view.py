"""
views/result_view.py — 시험 결과 화면

표시 내용:
  - 최종 점수 (반올림 백분율)
  - 정답 / 오답 / 미응답 수
  - 표시한 문제 복습 가능 여부
  - 다시 시험 보기 (세션 초기화)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from qcm_simulator.errors import NotFoundError
from qcm_simulator.models.page_models import EmptyExamView, NotFoundView, ScorePendingView, ScoreView
from qcm_simulator.router import PageId, exam_token
from qcm_simulator.services.exam_service import calculate_score

if TYPE_CHECKING:
    from qcm_simulator.context import AppContext


async def render(ctx: AppContext, params: Dict[str, str]):
    """결과 화면 데이터. 제출 전이면 '먼저 시험을 끝내세요' 화면."""
    exam_id = params.get("id", "")
    exam = await ctx.catalog.get_exam(exam_id)
    if exam is None:
        return NotFoundView()
    if exam.question_count < 1:
        return EmptyExamView(exam=exam)

    session = ctx.sessions.load(exam_id, exam.question_count)
    if not session.completed:
        return ScorePendingView(exam=exam)

    return ScoreView(
        exam=exam,
        summary=calculate_score(session, exam.question_count),
        has_marked=bool(session.marked),
    )


async def retake(ctx: AppContext, exam_id: str) -> None:
    """현재 문제 세트로 시험을 다시 시작."""
    if await ctx.catalog.get_exam(exam_id) is None:
        raise NotFoundError(f"Exam {exam_id} not found")
    ctx.sessions.reset(exam_id)
    ctx.notifier.info("Session reset. Good luck!")
    await ctx.navigate(exam_token(PageId.EXAM, exam_id))
