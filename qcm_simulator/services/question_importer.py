"""
services/question_importer.py

JSON 문제은행 가져오기 (검증 + 정규화).
Public API:
  - normalize_questions(payload) -> List[QuestionDraft] : 파싱된 JSON → 정규화된 문제
  - parse_exam_json(text) -> List[QuestionDraft]        : 원문 텍스트 → 정규화된 문제

설계 원칙:
- 순수 함수: 같은 입력 → 같은 출력, 저장소 접근 없음
- 하나라도 잘못되면 전체 거부 (부분 가져오기 없음)
- 보기는 앞 6개만 사용, 부족하면 자리표시 값으로 채움
- answerIndex 가 없거나 범위를 벗어나면 실패
"""

import json
import logging
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from config import DEFAULT_STEM, OPTION_COUNT, OPTION_PLACEHOLDER
from qcm_simulator.errors import ValidationError
from qcm_simulator.models.question_model import QuestionDraft

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# Public API
# ══════════════════════════════════════════════════════════════════════════════

def normalize_questions(payload: Any) -> List[QuestionDraft]:
    """
    파싱된 JSON 값 → QuestionDraft 리스트.
    빈 배열은 빈 리스트를 반환한다 (거부 여부는 호출자가 판단).

    Raises:
        ValidationError: 배열이 아니거나, 원소가 객체가 아니거나,
                         answerIndex 가 0~5 정수가 아닌 경우.
    """
    if not isinstance(payload, list):
        raise ValidationError("Exam JSON must be an array of questions")

    return [_normalize_one(raw, index) for index, raw in enumerate(payload)]


def parse_exam_json(text: str) -> List[QuestionDraft]:
    """
    업로드된 파일 텍스트 → QuestionDraft 리스트.
    문제가 하나도 없으면 거부한다.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e

    questions = normalize_questions(payload)
    if not questions:
        raise ValidationError("No questions found")
    logger.info(f"문제 {len(questions)}개 정규화 완료")
    return questions


# ══════════════════════════════════════════════════════════════════════════════
# 내부 헬퍼
# ══════════════════════════════════════════════════════════════════════════════

def _normalize_one(raw: Any, index: int) -> QuestionDraft:
    label = f"Question {index + 1}"
    if not isinstance(raw, dict):
        raise ValidationError(f"{label} is invalid")

    answer_index = _coerce_answer_index(raw.get("answerIndex"))
    if answer_index is None:
        raise ValidationError(f"{label} is missing a valid answerIndex")

    try:
        return QuestionDraft(
            category=_text(raw.get("category")),
            drug=_text(raw.get("drug")),
            stem=_text(raw.get("stem")) or DEFAULT_STEM,
            options=_pad_options(raw.get("options")),
            answer_index=answer_index,
        )
    except PydanticValidationError as e:
        raise ValidationError(f"{label} is invalid: {e.errors()[0]['msg']}") from e


def _coerce_answer_index(value: Any) -> int | None:
    """정수(또는 정수값 실수)이고 0~5 범위일 때만 인덱스 반환."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if not 0 <= value < OPTION_COUNT:
        return None
    return value


def _pad_options(value: Any) -> List[str]:
    options = [_text(opt) for opt in value[:OPTION_COUNT]] if isinstance(value, list) else []
    while len(options) < OPTION_COUNT:
        options.append(OPTION_PLACEHOLDER)
    return options


def _text(value: Any) -> str:
    """falsy 값은 빈 문자열, 문자열이 아니면 str() 변환."""
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)
