"""
The storage contract the handlers are written against.

Each store generation keys students (and their attempts) by one claim of
the caller: ``email`` for the relational and first document generation,
``uid`` for the latest. ``key_field`` names it; every ``key`` argument below
is a value of that field.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from quizhub.schemas import Attempt, Quiz, Student


class Store(ABC):
    key_field = "email"
    # whether get-by-email may name the student in the query string
    email_query_override = False

    def normalize_key(self, key: str) -> str:
        if self.key_field == "email":
            return key.strip().lower()
        return key

    # quizzes
    @abstractmethod
    def get_quiz(self, quiz_name: str) -> Optional[Quiz]:
        raise NotImplementedError

    @abstractmethod
    def put_quiz(self, quiz: Quiz):
        raise NotImplementedError

    @abstractmethod
    def delete_quiz(self, quiz_name: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_quiz_names(self, category: str) -> List[str]:
        raise NotImplementedError

    def count_quizzes(self, category: str) -> int:
        return len(self.list_quiz_names(category))

    # students
    @abstractmethod
    def get_student(self, key: str) -> Optional[Student]:
        raise NotImplementedError

    @abstractmethod
    def put_student(self, student: Student):
        raise NotImplementedError

    @abstractmethod
    def list_student_keys(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def find_student_key(self, email: str | None = None, phone: str | None = None) -> Optional[str]:
        raise NotImplementedError

    # attempts
    @abstractmethod
    def get_attempt(self, key: str, quiz_name: str) -> Optional[Attempt]:
        raise NotImplementedError

    @abstractmethod
    def put_attempt(self, attempt: Attempt):
        raise NotImplementedError

    @abstractmethod
    def list_attempts(self, key: str) -> List[Attempt]:
        raise NotImplementedError

    @abstractmethod
    def delete_attempts_for_student(self, key: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def delete_attempts_for_quiz(self, quiz_name: str) -> int:
        raise NotImplementedError


def optional_str(value) -> Optional[str]:
    if isinstance(value, str) and value != "":
        return value
    return None


def optional_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
