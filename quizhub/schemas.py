"""
Value types passed between the handlers, the scorer and the stores.

They serialize with the camelCase names the web clients expect
(``model_dump(by_alias=True)``) and accept either spelling on input.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question: str = ""
    correct_answer: str = Field("", alias="correctAnswer")
    all_answers: List[str] = Field(default_factory=list, alias="allAnswers")
    explanation: str = ""


class Quiz(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quiz_name: str = Field(..., alias="quizName")
    duration: int = 0
    category: str = ""
    questions: List[Question] = Field(default_factory=list)


class Answer(BaseModel):
    """One entry of a submission: the question ordinal and the chosen options."""
    qno: int
    options: List[str] = Field(default_factory=list)


class Submission(BaseModel):
    answers: List[Answer] = Field(default_factory=list)

    @field_validator("answers", mode="before")
    @classmethod
    def _accept_mapping(cls, value):
        # {"1": ["a"], "2": ["c", "b"]} is accepted as well as the list form
        if isinstance(value, dict):
            return [{"qno": qno, "options": options} for qno, options in value.items()]
        return value

    def by_ordinal(self):
        # a later entry for the same ordinal wins
        return {answer.qno: answer.options for answer in self.answers}


class QuestionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qno: int
    question: str = ""
    status: str
    student_answer: List[str] = Field(default_factory=list, alias="studentAnswer")
    correct_answer: List[str] = Field(default_factory=list, alias="correctAnswer")
    explanation: str = ""


class Score(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    correct_count: int = Field(0, alias="correctCount")
    wrong_count: int = Field(0, alias="wrongCount")
    skipped_count: int = Field(0, alias="skippedCount")
    total_count: int = Field(0, alias="totalCount")
    percentage: float = 0.0
    results: List[QuestionResult] = Field(default_factory=list)


class Attempt(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(..., alias="studentId")
    quiz_name: str = Field(..., alias="quizName")
    category: str = ""
    correct_count: int = Field(0, alias="correctCount")
    wrong_count: int = Field(0, alias="wrongCount")
    skipped_count: int = Field(0, alias="skippedCount")
    total_count: int = Field(0, alias="totalCount")
    percentage: float = 0.0
    attempt_number: int = Field(1, alias="attemptNumber")
    attempted_at: Optional[datetime] = Field(None, alias="attemptedAt")
    results: List[QuestionResult] = Field(default_factory=list)


class Student(BaseModel):
    student_id: str
    name: str = ""
    student_class: str = ""
    phone_number: str = ""
    email: Optional[str] = None
    sub_exp_date: Optional[str] = None
    updated_by: Optional[str] = None
    amount: Optional[float] = None
    payment_time: Optional[str] = None
    role: Optional[str] = None
