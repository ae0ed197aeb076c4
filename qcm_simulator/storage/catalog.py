"""
storage/catalog.py — 시험/문제 카탈로그 (SQLAlchemy asyncio + aiosqlite)

- createExam / deleteExam 는 하나의 트랜잭션: 전부 반영되거나 전혀 반영되지 않는다
- get_questions 는 항상 order 오름차순 (세션 인덱스의 기준)
- SQLAlchemy 오류는 StorageError 로 감싸서 올린다
"""

import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import delete, event, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from qcm_simulator.errors import NotFoundError, StorageError, ValidationError
from qcm_simulator.models.question_model import Exam, Question, QuestionDraft
from qcm_simulator.models.session_state import now_ms
from qcm_simulator.storage.tables import Base, ExamRow, QuestionRow

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _exam_from_row(row: ExamRow) -> Exam:
    return Exam(
        id=row.id,
        name=row.name,
        file_name=row.file_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
        question_count=row.question_count,
    )


def _question_from_row(row: QuestionRow) -> Question:
    return Question(
        id=row.id,
        exam_id=row.exam_id,
        order=row.order,
        category=row.category,
        drug=row.drug,
        stem=row.stem,
        options=list(row.options),
        answer_index=row.answer_index,
    )


def _question_row(exam_id: str, order: int, draft: QuestionDraft) -> QuestionRow:
    return QuestionRow(
        id=_new_id(),
        exam_id=exam_id,
        order=order,
        category=draft.category,
        drug=draft.drug,
        stem=draft.stem,
        options=list(draft.options),
        answer_index=draft.answer_index,
    )


class Catalog:
    """비동기 카탈로그 저장소. 엔진/세션팩토리 외에 상태를 갖지 않는다."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self._engine = create_async_engine(database_url, echo=echo, future=True)
        self._sessions = async_sessionmaker(
            self._engine, expire_on_commit=False, autoflush=False
        )
        if "sqlite" in database_url:
            event.listen(self._engine.sync_engine, "connect", _set_sqlite_pragmas)

    async def init_schema(self) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(f"카탈로그 스키마 생성 실패: {e}") from e

    async def dispose(self) -> None:
        await self._engine.dispose()

    # ── 쓰기 (트랜잭션) ──────────────────────────────────────────────────────

    async def create_exam(
        self,
        name: str,
        file_name: str,
        questions: Sequence[QuestionDraft],
    ) -> str:
        """시험 1건 + 문제 전체를 한 트랜잭션으로 저장하고 시험 ID를 반환."""
        if not questions:
            raise ValidationError("No questions found")

        exam_id = _new_id()
        created_at = now_ms()
        try:
            async with self._sessions() as db:
                async with db.begin():
                    db.add(ExamRow(
                        id=exam_id,
                        name=name,
                        file_name=file_name,
                        created_at=created_at,
                        updated_at=created_at,
                        question_count=len(questions),
                    ))
                    await db.flush()
                    db.add_all([
                        _question_row(exam_id, order, draft)
                        for order, draft in enumerate(questions)
                    ])
        except SQLAlchemyError as e:
            raise StorageError(f"시험 저장 실패: {e}") from e

        logger.info(f"시험 생성: {exam_id} ({name}, 문제 {len(questions)}개)")
        return exam_id

    async def rename_exam(self, exam_id: str, name: str) -> Exam:
        try:
            async with self._sessions() as db:
                async with db.begin():
                    row = await db.get(ExamRow, exam_id)
                    if row is None:
                        raise NotFoundError(f"Exam {exam_id} not found")
                    row.name = name
                    row.updated_at = now_ms()
                return _exam_from_row(row)
        except SQLAlchemyError as e:
            raise StorageError(f"시험 이름 변경 실패: {e}") from e

    async def delete_exam(self, exam_id: str) -> bool:
        """시험과 소속 문제를 한 트랜잭션으로 삭제. 시험이 있었으면 True."""
        try:
            async with self._sessions() as db:
                async with db.begin():
                    await db.execute(delete(QuestionRow).where(QuestionRow.exam_id == exam_id))
                    result = await db.execute(delete(ExamRow).where(ExamRow.id == exam_id))
                    existed = result.rowcount > 0
        except SQLAlchemyError as e:
            raise StorageError(f"시험 삭제 실패: {e}") from e

        if existed:
            logger.info(f"시험 삭제: {exam_id}")
        return existed

    # ── 읽기 ─────────────────────────────────────────────────────────────────

    async def get_exam(self, exam_id: str) -> Optional[Exam]:
        try:
            async with self._sessions() as db:
                row = await db.get(ExamRow, exam_id)
                return _exam_from_row(row) if row is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"시험 조회 실패: {e}") from e

    async def list_exams(self) -> List[Exam]:
        """생성 시각 내림차순."""
        try:
            async with self._sessions() as db:
                rows = await db.scalars(
                    select(ExamRow).order_by(ExamRow.created_at.desc(), ExamRow.id)
                )
                return [_exam_from_row(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"시험 목록 조회 실패: {e}") from e

    async def get_questions(self, exam_id: str) -> List[Question]:
        """order 오름차순으로 정렬된 문제 리스트."""
        try:
            async with self._sessions() as db:
                rows = await db.scalars(
                    select(QuestionRow)
                    .where(QuestionRow.exam_id == exam_id)
                    .order_by(QuestionRow.order)
                )
                return [_question_from_row(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"문제 조회 실패: {e}") from e

    async def count_questions(self, exam_id: str) -> int:
        try:
            async with self._sessions() as db:
                count = await db.scalar(
                    select(func.count()).select_from(QuestionRow).where(QuestionRow.exam_id == exam_id)
                )
                return int(count or 0)
        except SQLAlchemyError as e:
            raise StorageError(f"문제 수 조회 실패: {e}") from e


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()
