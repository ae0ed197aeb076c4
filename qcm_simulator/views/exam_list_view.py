"""
views/exam_list_view.py — 시험 목록 화면

기능:
  - 시험 목록 (최신순, 문제 수 표시)
  - 이름 변경 / 삭제
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict

from qcm_simulator.errors import InvalidInput, NotFoundError, StorageError
from qcm_simulator.models.page_models import ExamListView
from qcm_simulator.router import DEFAULT_TOKEN

if TYPE_CHECKING:
    from qcm_simulator.context import AppContext

logger = logging.getLogger(__name__)


async def render(ctx: AppContext, params: Dict[str, str]) -> ExamListView:
    """시험 목록 화면 데이터."""
    return ExamListView(exams=await ctx.catalog.list_exams())


async def rename_exam(ctx: AppContext, exam_id: str, name: str) -> None:
    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidInput("Exam name cannot be empty")
    await ctx.catalog.rename_exam(exam_id, trimmed)
    ctx.notifier.success("Exam renamed")
    await ctx.navigate(DEFAULT_TOKEN)


async def delete_exam(ctx: AppContext, exam_id: str) -> None:
    """
    시험 + 문제를 한 트랜잭션으로 삭제한 뒤 세션도 지운다.
    세션 삭제는 최선 노력: 실패해도 카탈로그 삭제는 이미 끝난 상태로 둔다.
    """
    if not await ctx.catalog.delete_exam(exam_id):
        raise NotFoundError(f"Exam {exam_id} not found")
    try:
        ctx.sessions.reset(exam_id)
    except StorageError as e:
        logger.warning(f"시험 {exam_id} 세션 삭제 실패 (무시): {e}")
    ctx.notifier.info("Exam deleted")
    await ctx.navigate(DEFAULT_TOKEN)
