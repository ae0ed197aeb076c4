"""
models/page_models.py

페이지 컨트롤러가 렌더링 계층에 넘기는 화면 데이터.
각 모델의 page 필드로 렌더러가 어떤 화면을 그릴지 결정한다.
"""

from typing import List, Literal, Optional

from qcm_simulator.models.base import CamelModel
from qcm_simulator.models.question_model import Exam, Question
from qcm_simulator.models.session_state import AnswerRecord, ExamSession


class ScoreSummary(CamelModel):
    total: int
    answered: int
    correct: int
    incorrect: int
    unanswered: int
    percent: int


class ReviewItem(CamelModel):
    index: int
    question: Question
    answer: Optional[AnswerRecord] = None
    selected_letter: Optional[str] = None
    correct_letter: str


class ExamListView(CamelModel):
    page: Literal["exams"] = "exams"
    exams: List[Exam]


class ImportView(CamelModel):
    page: Literal["import"] = "import"
    option_count: int
    max_size: int


class NotFoundView(CamelModel):
    page: Literal["not-found"] = "not-found"
    message: str = "Exam not found"


class EmptyExamView(CamelModel):
    page: Literal["empty-exam"] = "empty-exam"
    exam: Exam
    message: str = "This exam has no questions yet."


class ExamPageView(CamelModel):
    page: Literal["exam"] = "exam"
    exam: Exam
    session: ExamSession
    question: Question
    index: int
    total: int
    progress_percent: int
    answer: Optional[AnswerRecord] = None
    correct_option: Optional[str] = None
    is_marked: bool
    is_last: bool
    can_go_previous: bool
    can_advance: bool


class ScorePendingView(CamelModel):
    page: Literal["score-pending"] = "score-pending"
    exam: Exam
    message: str = "Finish the exam to view your score."


class ScoreView(CamelModel):
    page: Literal["score"] = "score"
    exam: Exam
    summary: ScoreSummary
    has_marked: bool


class ReviewView(CamelModel):
    page: Literal["review", "marked"] = "review"
    exam: Exam
    marked_only: bool = False
    items: List[ReviewItem]
