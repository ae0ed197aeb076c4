from typing import List

from pydantic import Field, field_validator

from config import OPTION_COUNT
from qcm_simulator.models.base import CamelModel


class QuestionDraft(CamelModel):
    """
    가져오기 파이프라인이 정규화한 문제 (아직 시험에 속하지 않음).
    Pydantic v2 적용
    """
    category: str = Field(
        "",
        description="분류 (없으면 빈 문자열)"
    )
    drug: str = Field(
        "",
        description="약물명 등 보조 라벨 (없으면 빈 문자열)"
    )
    stem: str = Field(
        ...,
        min_length=1,
        description="발문"
    )
    options: List[str] = Field(
        ...,
        description="보기 리스트 (정확히 6개)"
    )
    answer_index: int = Field(
        ...,
        ge=0,
        le=OPTION_COUNT - 1,
        description="정답 보기 인덱스 (0-based)"
    )

    @field_validator('options')
    @classmethod
    def validate_options_length(cls, v: List[str]) -> List[str]:
        """
        검증 로직: 보기는 정확히 OPTION_COUNT 개여야 한다.
        """
        if len(v) != OPTION_COUNT:
            raise ValueError(f"보기(options)는 정확히 {OPTION_COUNT}개여야 합니다 (현재 {len(v)}개).")
        return v


class Question(QuestionDraft):
    """
    카탈로그에 저장된 문제. 항상 하나의 시험에 속한다.
    order 는 시험 안에서 유일하며, 세션의 모든 인덱스는 order 정렬 순서 기준.
    """
    id: str = Field(
        ...,
        description="문제 고유 ID"
    )
    exam_id: str = Field(
        ...,
        description="소속 시험 ID"
    )
    order: int = Field(
        ...,
        ge=0,
        description="시험 안에서의 출제 순서"
    )

    @property
    def correct_option(self) -> str:
        return self.options[self.answer_index]


class Exam(CamelModel):
    """
    가져온 문제 세트의 메타데이터.

    question_count 는 캐시 값이며 저장된 문제 수와 항상 같아야 한다.
    """
    id: str
    name: str = Field(..., min_length=1)
    file_name: str = ""
    created_at: int = Field(..., description="생성 시각 (epoch ms)")
    updated_at: int = Field(..., description="최종 수정 시각 (epoch ms)")
    question_count: int = Field(..., ge=0)
