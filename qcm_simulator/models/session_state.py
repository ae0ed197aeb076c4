"""
models/session_state.py

시험 진행 상태를 담는 OMR 카드 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
전이 로직은 services/session_machine.py 에 있고, 이 모델은 값(불변)으로만 다룬다.
"""

import time
from typing import List, Optional

from pydantic import ConfigDict, Field

from config import OPTION_COUNT
from qcm_simulator.models.base import CamelModel


def now_ms() -> int:
    """현재 시각 (epoch ms)."""
    return int(time.time() * 1000)


class AnswerRecord(CamelModel):
    """
    한 문제에 대한 응답 기록. 생성 후 변경 불가.

    Attributes:
        selected_index: 사용자가 고른 보기 인덱스 (0-based).
        is_correct:     응답 시점에 한 번만 계산되는 정답 여부.
        answered_at:    응답 시각 (epoch ms).
    """

    model_config = ConfigDict(frozen=True)

    selected_index: int = Field(..., ge=0, le=OPTION_COUNT - 1)
    is_correct: bool
    answered_at: int


class ExamSession(CamelModel):
    """
    시험 하나에 대한 진행 기록 (examId 로 키잉되어 별도 저장).

    Attributes:
        current_index: 현재 문제 인덱스 (0-based, 문제 수 범위로 클램프).
        answers:       문제 수와 같은 길이. 각 칸은 AnswerRecord 또는 None.
        marked:        표시한 문제 인덱스 (중복 없음).
        completed:     최종 제출 여부. True 이면 reset 외에는 변경 불가.
        completed_at:  제출 시각. completed 일 때만 존재.
        correct_count: 정답 수. completed 일 때만 존재.
        updated_at:    최종 변경 시각 (epoch ms).
    """

    model_config = ConfigDict(frozen=True)

    current_index: int = Field(default=0, ge=0)
    answers: List[Optional[AnswerRecord]] = Field(default_factory=list)
    marked: List[int] = Field(default_factory=list)
    completed: bool = False
    completed_at: Optional[int] = None
    correct_count: Optional[int] = None
    updated_at: int = Field(default_factory=now_ms)

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    def is_marked(self, index: int) -> bool:
        return index in self.marked

    def to_record(self) -> dict:
        """저장용 레코드. completedAt/correctCount 는 제출된 경우에만 포함."""
        record = super().to_record()
        if self.completed_at is None:
            record.pop("completedAt", None)
        if self.correct_count is None:
            record.pop("correctCount", None)
        return record
