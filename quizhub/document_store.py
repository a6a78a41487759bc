import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from quizhub.documents import DocumentClient
from quizhub.schemas import Attempt, Question, QuestionResult, Quiz, Student
from quizhub.store import Store, optional_float, optional_str

logger = logging.getLogger(__name__)


def _parse_time(value) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _int(value, default=0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class DocumentStore(Store):
    """
    Students and attempts as documents, partitioned by ``key_field``.

    Older documents were written by several tools and are not uniform:
    numbers may be stored as strings and optional fields may hold any type.
    Optional fields that cannot be read are dropped rather than reported.
    """

    def __init__(self, client: DocumentClient, key_field: str = "uid",
                 quizzes: str = "quiz_questions",
                 students: str = "students_v3",
                 attempts: str = "student_quiz_attempts_v3"):
        self.key_field = key_field
        self.quizzes = client.table(quizzes, "quiz_name")
        self.students = client.table(students, key_field)
        self.attempts = client.table(attempts, key_field, "quiz_name")

    # quizzes

    def get_quiz(self, quiz_name: str) -> Optional[Quiz]:
        item = self.quizzes.get_item({"quiz_name": quiz_name})
        if item is None:
            return None
        questions = [Question.model_validate(q) for q in item.get("questions") or []]
        return Quiz(quiz_name=item["quiz_name"], duration=_int(item.get("duration")),
                    category=item.get("category", ""), questions=questions)

    def put_quiz(self, quiz: Quiz):
        self.quizzes.put_item({
            "quiz_name": quiz.quiz_name,
            "duration": quiz.duration,
            "category": quiz.category,
            "questions": [q.model_dump(by_alias=True) for q in quiz.questions],
        })

    def delete_quiz(self, quiz_name: str) -> bool:
        return self.quizzes.delete_item({"quiz_name": quiz_name})

    def list_quiz_names(self, category: str) -> List[str]:
        return sorted(item["quiz_name"] for item in self.quizzes.scan(category=category))

    # students

    def _student_from_item(self, item: Dict[str, Any]) -> Student:
        return Student(
            student_id=item[self.key_field],
            email=optional_str(item.get("email")),
            name=optional_str(item.get("name")) or "",
            student_class=optional_str(item.get("student_class")) or "",
            phone_number=optional_str(item.get("phone_number")) or "",
            sub_exp_date=optional_str(item.get("sub_exp_date")),
            updated_by=optional_str(item.get("updated_by")),
            amount=optional_float(item.get("amount")),
            payment_time=optional_str(item.get("payment_time")),
            role=optional_str(item.get("role")),
        )

    def get_student(self, key: str) -> Optional[Student]:
        key = self.normalize_key(key)
        item = self.students.get_item({self.key_field: key})
        return self._student_from_item(item) if item else None

    def put_student(self, student: Student):
        item = {
            self.key_field: self.normalize_key(student.student_id),
            "name": student.name,
            "student_class": student.student_class,
            "phone_number": student.phone_number,
        }
        optional = {
            # stored lowercased so email lookups match whatever case the token used
            "email": student.email.strip().lower() if student.email else None,
            "sub_exp_date": student.sub_exp_date,
            "updated_by": student.updated_by,
            "amount": student.amount,
            "payment_time": student.payment_time,
            "role": student.role,
        }
        item.update({k: v for k, v in optional.items() if v is not None and k != self.key_field})
        self.students.put_item(item)

    def list_student_keys(self) -> List[str]:
        return sorted(item[self.key_field] for item in self.students.scan())

    def find_student_key(self, email: str | None = None, phone: str | None = None) -> Optional[str]:
        if email:
            if self.key_field == "email":
                key = self.normalize_key(email)
                return key if self.students.get_item({"email": key}) else None
            matches = self.students.scan(email=email.strip().lower())
        elif phone:
            matches = self.students.scan(phone_number=phone)
        else:
            return None
        return matches[0][self.key_field] if matches else None

    # attempts

    def _attempt_from_item(self, item: Dict[str, Any]) -> Attempt:
        try:
            results = [QuestionResult.model_validate(r) for r in item.get("results") or []]
        except ValidationError:
            logger.warning("Unreadable results on attempt %s/%s", item.get(self.key_field), item.get("quiz_name"))
            results = []
        return Attempt(
            student_id=item[self.key_field],
            quiz_name=item["quiz_name"],
            category=item.get("category") or "",
            correct_count=_int(item.get("correct_count")),
            wrong_count=_int(item.get("wrong_count")),
            skipped_count=_int(item.get("skipped_count")),
            total_count=_int(item.get("total_count")),
            percentage=optional_float(item.get("percentage")) or 0.0,
            attempt_number=_int(item.get("attempt_number"), 1),
            attempted_at=_parse_time(item.get("attempted_at")),
            results=results,
        )

    def get_attempt(self, key: str, quiz_name: str) -> Optional[Attempt]:
        item = self.attempts.get_item({self.key_field: self.normalize_key(key), "quiz_name": quiz_name})
        return self._attempt_from_item(item) if item else None

    def put_attempt(self, attempt: Attempt):
        self.attempts.put_item({
            self.key_field: self.normalize_key(attempt.student_id),
            "quiz_name": attempt.quiz_name,
            "category": attempt.category,
            "correct_count": attempt.correct_count,
            "wrong_count": attempt.wrong_count,
            "skipped_count": attempt.skipped_count,
            "total_count": attempt.total_count,
            "percentage": attempt.percentage,
            "attempt_number": attempt.attempt_number,
            "attempted_at": attempt.attempted_at,
            "results": [r.model_dump(by_alias=True) for r in attempt.results],
        })

    def list_attempts(self, key: str) -> List[Attempt]:
        return [self._attempt_from_item(item) for item in self.attempts.query(self.normalize_key(key))]

    def delete_attempts_for_student(self, key: str) -> int:
        items = self.attempts.query(self.normalize_key(key))
        for item in items:
            self.attempts.delete_item(item)
        return len(items)

    def delete_attempts_for_quiz(self, quiz_name: str) -> int:
        items = self.attempts.scan(quiz_name=quiz_name)
        for item in items:
            self.attempts.delete_item(item)
        return len(items)
