import json
from typing import List, Optional

from sqlmodel import select, func

from quizhub.db import get_session
from quizhub.models import AttemptRecord, QuizRecord, StudentRecord
from quizhub.schemas import Attempt, Question, QuestionResult, Quiz, Student
from quizhub.store import Store


def _quiz_from_record(record: QuizRecord) -> Quiz:
    questions = [Question.model_validate(q) for q in json.loads(record.questions or "[]")]
    return Quiz(quiz_name=record.quiz_name, duration=record.duration,
                category=record.category, questions=questions)


def _student_from_record(record: StudentRecord) -> Student:
    return Student(
        student_id=record.email,
        email=record.email,
        name=record.name,
        student_class=record.student_class,
        phone_number=record.phone_number,
        sub_exp_date=record.sub_exp_date,
        updated_by=record.updated_by,
        amount=record.amount,
        payment_time=record.payment_time,
        role=record.role,
    )


def _attempt_from_record(record: AttemptRecord) -> Attempt:
    results = [QuestionResult.model_validate(r) for r in json.loads(record.results or "[]")]
    return Attempt(
        student_id=record.email,
        quiz_name=record.quiz_name,
        category=record.category,
        correct_count=record.correct_count,
        wrong_count=record.wrong_count,
        skipped_count=record.skipped_count,
        total_count=record.total_count,
        percentage=record.percentage,
        attempt_number=record.attempt_number,
        attempted_at=record.attempted_at,
        results=results,
    )


class RelationalStore(Store):
    """Email keyed tables: quiz_questions, students, student_quiz_attempts."""
    key_field = "email"
    # older clients name the student in the query string of get-by-email
    email_query_override = True

    def __init__(self, engine):
        self.engine = engine

    def get_quiz(self, quiz_name: str) -> Optional[Quiz]:
        with get_session(self.engine) as session:
            record = session.get(QuizRecord, quiz_name)
            return _quiz_from_record(record) if record else None

    def put_quiz(self, quiz: Quiz):
        questions = json.dumps([q.model_dump(by_alias=True) for q in quiz.questions])
        with get_session(self.engine) as session:
            record = session.get(QuizRecord, quiz.quiz_name)
            if record is None:
                record = QuizRecord(quiz_name=quiz.quiz_name)
            record.duration = quiz.duration
            record.category = quiz.category
            record.questions = questions
            session.add(record)
            session.commit()

    def delete_quiz(self, quiz_name: str) -> bool:
        with get_session(self.engine) as session:
            record = session.get(QuizRecord, quiz_name)
            if not record:
                return False
            session.delete(record)
            session.commit()
            return True

    def list_quiz_names(self, category: str) -> List[str]:
        with get_session(self.engine) as session:
            q = select(QuizRecord.quiz_name).where(QuizRecord.category == category).order_by(QuizRecord.quiz_name)
            return list(session.exec(q))

    def count_quizzes(self, category: str) -> int:
        with get_session(self.engine) as session:
            q = select(func.count()).select_from(QuizRecord).where(QuizRecord.category == category)
            return session.exec(q).one()

    def _student_record(self, session, key: str) -> Optional[StudentRecord]:
        q = select(StudentRecord).where(StudentRecord.email == self.normalize_key(key))
        return session.exec(q).first()

    def get_student(self, key: str) -> Optional[Student]:
        with get_session(self.engine) as session:
            record = self._student_record(session, key)
            return _student_from_record(record) if record else None

    def put_student(self, student: Student):
        with get_session(self.engine) as session:
            record = self._student_record(session, student.student_id)
            if record is None:
                record = StudentRecord(email=self.normalize_key(student.student_id),
                                       name=student.name, student_class=student.student_class,
                                       phone_number=student.phone_number)
            record.name = student.name
            record.student_class = student.student_class
            record.phone_number = student.phone_number
            record.sub_exp_date = student.sub_exp_date
            record.updated_by = student.updated_by
            record.amount = student.amount
            record.payment_time = student.payment_time
            record.role = student.role
            session.add(record)
            session.commit()

    def list_student_keys(self) -> List[str]:
        with get_session(self.engine) as session:
            return list(session.exec(select(StudentRecord.email).order_by(StudentRecord.email)))

    def find_student_key(self, email: str | None = None, phone: str | None = None) -> Optional[str]:
        with get_session(self.engine) as session:
            q = select(StudentRecord.email)
            if email:
                q = q.where(StudentRecord.email == email.strip().lower())
            elif phone:
                q = q.where(StudentRecord.phone_number == phone)
            else:
                return None
            return session.exec(q).first()

    def _attempt_record(self, session, key: str, quiz_name: str) -> Optional[AttemptRecord]:
        q = select(AttemptRecord).where(
            AttemptRecord.email == self.normalize_key(key),
            AttemptRecord.quiz_name == quiz_name,
        )
        return session.exec(q).first()

    def get_attempt(self, key: str, quiz_name: str) -> Optional[Attempt]:
        with get_session(self.engine) as session:
            record = self._attempt_record(session, key, quiz_name)
            return _attempt_from_record(record) if record else None

    def put_attempt(self, attempt: Attempt):
        results = json.dumps([r.model_dump(by_alias=True) for r in attempt.results])
        with get_session(self.engine) as session:
            record = self._attempt_record(session, attempt.student_id, attempt.quiz_name)
            if record is None:
                record = AttemptRecord(email=self.normalize_key(attempt.student_id),
                                       quiz_name=attempt.quiz_name, category=attempt.category)
            record.category = attempt.category
            record.correct_count = attempt.correct_count
            record.wrong_count = attempt.wrong_count
            record.skipped_count = attempt.skipped_count
            record.total_count = attempt.total_count
            record.percentage = attempt.percentage
            record.attempt_number = attempt.attempt_number
            if attempt.attempted_at is not None:
                record.attempted_at = attempt.attempted_at
            record.results = results
            session.add(record)
            session.commit()

    def list_attempts(self, key: str) -> List[Attempt]:
        with get_session(self.engine) as session:
            q = select(AttemptRecord).where(AttemptRecord.email == self.normalize_key(key))
            return [_attempt_from_record(r) for r in session.exec(q)]

    def _delete_attempts(self, condition) -> int:
        with get_session(self.engine) as session:
            records = list(session.exec(select(AttemptRecord).where(condition)))
            for record in records:
                session.delete(record)
            session.commit()
            return len(records)

    def delete_attempts_for_student(self, key: str) -> int:
        return self._delete_attempts(AttemptRecord.email == self.normalize_key(key))

    def delete_attempts_for_quiz(self, quiz_name: str) -> int:
        return self._delete_attempts(AttemptRecord.quiz_name == quiz_name)
