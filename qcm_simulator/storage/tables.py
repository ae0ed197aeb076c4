from sqlalchemy import JSON, BigInteger, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 style declarative base."""


class ExamRow(Base):
    __tablename__ = "exams"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    file_name = Column(String, nullable=False, default="")
    # epoch ms
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
    # Cached; must equal the number of QuestionRow with this exam_id
    question_count = Column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_exams_created", "created_at"),
    )


class QuestionRow(Base):
    __tablename__ = "questions"

    id = Column(String(32), primary_key=True)
    exam_id = Column(String(32), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    order = Column(Integer, nullable=False)
    category = Column(String, nullable=False, default="")
    drug = Column(String, nullable=False, default="")
    stem = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    answer_index = Column(Integer, nullable=False)

    __table_args__ = (
        # order is unique within an exam and defines presentation sequence
        Index("ux_questions_exam_order", "exam_id", "order", unique=True),
    )
