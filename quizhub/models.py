from typing import Optional
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def now_utc():
    return datetime.now(timezone.utc)


# relational generation (email keyed)

class QuizRecord(SQLModel, table=True):
    __tablename__ = "quiz_questions"

    quiz_name: str = Field(primary_key=True)
    duration: int = Field(default=0)
    category: str = Field(index=True)
    questions: str = Field(default="[]")  # JSON list of questions


class StudentRecord(SQLModel, table=True):
    __tablename__ = "students"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)  # stored lowercased
    name: str
    student_class: str
    phone_number: str
    sub_exp_date: Optional[str] = None
    updated_by: Optional[str] = None
    amount: Optional[float] = None
    payment_time: Optional[str] = None
    role: Optional[str] = None
    created_at: datetime = Field(default_factory=now_utc)


class AttemptRecord(SQLModel, table=True):
    __tablename__ = "student_quiz_attempts"
    __table_args__ = (UniqueConstraint("email", "quiz_name", name="uq_attempt_email_quiz"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True)
    quiz_name: str = Field(index=True)
    category: str
    correct_count: int = 0
    wrong_count: int = 0
    skipped_count: int = 0
    total_count: int = 0
    percentage: float = 0.0
    attempt_number: int = 1
    attempted_at: datetime = Field(default_factory=now_utc)
    results: Optional[str] = None  # JSON list of per-question results


# document generations: one table holding every collection

class DocumentRecord(SQLModel, table=True):
    __tablename__ = "documents"

    collection: str = Field(primary_key=True)
    partition_key: str = Field(primary_key=True)
    sort_key: str = Field(default="", primary_key=True)
    body: str  # JSON object
    updated_at: datetime = Field(default_factory=now_utc)
