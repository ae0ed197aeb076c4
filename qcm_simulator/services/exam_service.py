"""
services/exam_service.py

채점 및 결과 분석 비즈니스 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
"""

from typing import List

from qcm_simulator.errors import InvalidInput
from qcm_simulator.models.page_models import ReviewItem, ScoreSummary
from qcm_simulator.models.question_model import Question
from qcm_simulator.models.session_state import ExamSession


def round_half_up_percent(part: int, whole: int) -> int:
    """part / whole * 100 을 정수 연산으로 반올림 (0.5 는 올림)."""
    return (part * 200 + whole) // (whole * 2)


def calculate_score(session: ExamSession, question_count: int) -> ScoreSummary:
    """
    제출된 세션의 점수 요약을 계산한다.

    미응답 문제는 정답/오답 어느 쪽에도 포함하지 않고 unanswered 로 센다.

    Args:
        session:        finalize 된 ExamSession.
        question_count: 시험의 문제 수 (1 이상).

    Returns:
        ScoreSummary (percent 는 반올림한 0~100 정수).

    Raises:
        InvalidInput: 문제 수가 0 이하이거나 세션이 제출되지 않은 경우.
    """
    if question_count < 1:
        raise InvalidInput("An exam needs at least one question to be scored")
    if not session.completed:
        raise InvalidInput("Exam is not finished yet")

    answered = session.answered_count
    correct = session.correct_count or 0
    return ScoreSummary(
        total=question_count,
        answered=answered,
        correct=correct,
        incorrect=answered - correct,
        unanswered=question_count - answered,
        percent=round_half_up_percent(correct, question_count),
    )


def progress_percent(session: ExamSession, question_count: int) -> int:
    """응답한 문제 비율 (진행률 막대용)."""
    if question_count < 1:
        return 0
    return round_half_up_percent(session.answered_count, question_count)


def option_letter(index: int) -> str:
    return chr(ord("A") + index)


def build_review_items(
    questions: List[Question],
    session: ExamSession,
    marked_only: bool = False,
) -> List[ReviewItem]:
    """
    복습 화면용 문제 목록. 인덱스는 order 정렬 기준 위치.
    marked_only 이면 표시한 문제만 (원래 순서 유지).
    """
    items: List[ReviewItem] = []
    for index, question in enumerate(questions):
        if marked_only and not session.is_marked(index):
            continue
        record = session.answers[index] if index < len(session.answers) else None
        items.append(ReviewItem(
            index=index,
            question=question,
            answer=record,
            selected_letter=option_letter(record.selected_index) if record else None,
            correct_letter=option_letter(question.answer_index),
        ))
    return items
