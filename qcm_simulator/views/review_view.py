"""
views/review_view.py — 전체 복습 / 표시한 문제 복습 화면
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from qcm_simulator.models.page_models import NotFoundView, ReviewView
from qcm_simulator.services.exam_service import build_review_items

if TYPE_CHECKING:
    from qcm_simulator.context import AppContext


async def render(ctx: AppContext, params: Dict[str, str], marked_only: bool = False):
    exam_id = params.get("id", "")
    exam = await ctx.catalog.get_exam(exam_id)
    if exam is None:
        return NotFoundView()

    questions = await ctx.catalog.get_questions(exam_id)
    session = ctx.sessions.load(exam_id, len(questions))
    return ReviewView(
        page="marked" if marked_only else "review",
        exam=exam,
        marked_only=marked_only,
        items=build_review_items(questions, session, marked_only=marked_only),
    )
