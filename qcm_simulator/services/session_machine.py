"""
services/session_machine.py

시험 세션 상태 전이 로직.
순수 Python 함수로 구성 — 저장소 접근, 전역 상태 변경 없음.
모든 전이는 새 ExamSession 값을 반환하고 입력 세션은 건드리지 않는다.

상태: NotStarted (저장된 세션 없음) → InProgress → Completed (reset 전까지 종료 상태)

전이 후 항상 성립해야 하는 조건:
  - len(answers) == question_count
  - marked 원소는 유효 인덱스이며 중복 없음
  - current_index 는 [0, question_count - 1] 범위
  - completed 이면 answers/marked/current_index/correct_count 가 더 이상 바뀌지 않음
"""

from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from config import OPTION_COUNT
from qcm_simulator.errors import InvalidInput
from qcm_simulator.models.session_state import AnswerRecord, ExamSession, now_ms


def new_session(question_count: int, now: Optional[int] = None) -> ExamSession:
    """NotStarted 에서 시작하는 새 세션 (0번 문제, 응답/표시 없음)."""
    return ExamSession(
        current_index=0,
        answers=[None] * max(question_count, 0),
        marked=[],
        completed=False,
        updated_at=now if now is not None else now_ms(),
    )


def repair(record: Any, question_count: int, now: Optional[int] = None) -> ExamSession:
    """
    저장된 레코드를 현재 문제 수에 맞게 결정적으로 복구한다.

    - answers: question_count 길이로 맞춤 (인덱스별로 보존, 초과분 버림, 부족분 None)
    - marked: 범위 밖/정수 아님/중복 제거 (순서 유지)
    - current_index: 범위로 클램프
    - completed: bool 로 강제
    - 제출된 세션은 문제 수가 바뀌었거나 correctCount 가 없으면 정답 수를 다시 계산
    """
    if not isinstance(record, dict):
        return new_session(question_count, now)

    stamp = now if now is not None else now_ms()
    stored_answers = record.get("answers")
    stored_answers = stored_answers if isinstance(stored_answers, list) else []
    answers = [
        _parse_answer(stored_answers[i]) if i < len(stored_answers) else None
        for i in range(max(question_count, 0))
    ]

    marked: List[int] = []
    raw_marked = record.get("marked")
    for idx in raw_marked if isinstance(raw_marked, list) else []:
        if _is_int(idx) and 0 <= idx < question_count and idx not in marked:
            marked.append(idx)

    current = record.get("currentIndex")
    current_index = _clamp(current if _is_int(current) else 0, question_count)

    updated_at = record.get("updatedAt")
    updated_at = updated_at if _is_int(updated_at) else stamp

    completed = bool(record.get("completed"))
    completed_at = None
    correct_count = None
    if completed:
        completed_at = record.get("completedAt")
        completed_at = completed_at if _is_int(completed_at) else updated_at
        correct_count = record.get("correctCount")
        if not _is_int(correct_count) or len(stored_answers) != question_count:
            correct_count = _count_correct(answers)

    return ExamSession(
        current_index=current_index,
        answers=answers,
        marked=marked,
        completed=completed,
        completed_at=completed_at,
        correct_count=correct_count,
        updated_at=updated_at,
    )


def answer(
    session: ExamSession,
    index: int,
    option_index: int,
    is_correct: bool,
    now: Optional[int] = None,
) -> ExamSession:
    """
    index 번 문제에 응답을 기록한다.
    이미 응답한 칸은 바꾸지 않는다 (같은 세션을 그대로 반환). 다시 풀려면 reset.

    Raises:
        InvalidInput: 제출된 세션이거나, index / option_index 가 범위를 벗어난 경우.
    """
    if session.completed:
        raise InvalidInput("Exam already finished; reset it to answer again")
    if not 0 <= index < len(session.answers):
        raise InvalidInput(f"Question index {index} out of range")
    if isinstance(option_index, bool) or not 0 <= option_index < OPTION_COUNT:
        raise InvalidInput(f"Option index {option_index} out of range")
    if session.answers[index] is not None:
        return session

    stamp = now if now is not None else now_ms()
    answers = list(session.answers)
    answers[index] = AnswerRecord(
        selected_index=option_index,
        is_correct=bool(is_correct),
        answered_at=stamp,
    )
    return session.model_copy(update={"answers": answers, "updated_at": stamp})


def navigate(session: ExamSession, target_index: int, now: Optional[int] = None) -> ExamSession:
    """current_index 를 target_index 로 이동 (범위로 클램프). 응답 여부와 무관."""
    if session.completed:
        return session
    current_index = _clamp(target_index, len(session.answers))
    if current_index == session.current_index:
        return session
    return session.model_copy(update={
        "current_index": current_index,
        "updated_at": now if now is not None else now_ms(),
    })


def toggle_mark(session: ExamSession, index: int, now: Optional[int] = None) -> ExamSession:
    """표시 토글. 범위 밖 인덱스나 제출된 세션은 그대로 반환."""
    if session.completed or not 0 <= index < len(session.answers):
        return session
    if index in session.marked:
        marked = [i for i in session.marked if i != index]
    else:
        marked = session.marked + [index]
    return session.model_copy(update={
        "marked": marked,
        "updated_at": now if now is not None else now_ms(),
    })


def finalize(session: ExamSession, now: Optional[int] = None) -> ExamSession:
    """
    InProgress → Completed. 정답 수를 고정하고 제출 시각을 기록한다.
    이미 제출된 세션이면 그대로 반환 (멱등).
    """
    if session.completed:
        return session
    stamp = now if now is not None else now_ms()
    return session.model_copy(update={
        "completed": True,
        "completed_at": stamp,
        "correct_count": _count_correct(session.answers),
        "updated_at": stamp,
    })


# ── 내부 헬퍼 ────────────────────────────────────────────────────────────────

def _parse_answer(raw: Any) -> Optional[AnswerRecord]:
    if not isinstance(raw, dict):
        return None
    try:
        return AnswerRecord.model_validate(raw)
    except PydanticValidationError:
        return None


def _count_correct(answers: List[Optional[AnswerRecord]]) -> int:
    return sum(1 for a in answers if a is not None and a.is_correct)


def _clamp(index: int, question_count: int) -> int:
    return max(0, min(index, question_count - 1))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
