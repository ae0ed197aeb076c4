"""
views/import_view.py — 문제 JSON 가져오기 화면

흐름:
  1. 시험 이름 + JSON 파일 확인
  2. 파싱/정규화 (하나라도 잘못되면 전체 거부)
  3. 시험 + 문제를 한 트랜잭션으로 저장
  4. 목록 화면으로 이동
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from config import MAX_IMPORT_SIZE, OPTION_COUNT
from qcm_simulator.errors import InvalidInput, ValidationError
from qcm_simulator.models.page_models import ImportView
from qcm_simulator.router import DEFAULT_TOKEN
from qcm_simulator.services.question_importer import parse_exam_json

if TYPE_CHECKING:
    from qcm_simulator.context import AppContext


async def render(ctx: AppContext, params: Dict[str, str]) -> ImportView:
    return ImportView(option_count=OPTION_COUNT, max_size=MAX_IMPORT_SIZE)


async def import_exam(ctx: AppContext, name: str, file_name: str, text: str) -> str:
    """
    가져오기 실행. 성공하면 새 시험 ID 반환.

    Raises:
        InvalidInput:    이름 또는 파일이 비어 있음.
        ValidationError: JSON 구조가 잘못됨 (아무것도 저장되지 않음).
    """
    exam_name = (name or "").strip()
    if not exam_name:
        ctx.notifier.error("Give your exam a name")
        raise InvalidInput("Give your exam a name")
    if not file_name or not text:
        ctx.notifier.error("Choose a JSON file first")
        raise InvalidInput("Choose a JSON file first")

    try:
        questions = parse_exam_json(text)
    except ValidationError:
        ctx.notifier.error("Invalid JSON structure")
        raise

    exam_id = await ctx.catalog.create_exam(exam_name, file_name, questions)
    ctx.notifier.success("Exam imported successfully")
    await ctx.navigate(DEFAULT_TOKEN)
    return exam_id
