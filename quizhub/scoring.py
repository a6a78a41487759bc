"""
Quiz scoring.

A submission maps 1-based question ordinals to the option tokens the student
picked. Every question of the quiz gets a result, answered or not. Tokens are
letters ``A``-``D`` naming an entry of the question's option list; anything
else is treated as literal answer text.
"""
from typing import Dict, List

from quizhub.schemas import Question, QuestionResult, Quiz, Score

CORRECT = "correct"
WRONG = "wrong"
SKIPPED = "skipped"

_LETTERS = "ABCD"


def round_half_up(value: float) -> float:
    """One decimal place, halves rounded up: 66.65 -> 66.7, 66.649 -> 66.6."""
    return int(value * 10 + 0.5) / 10


def _normalize(token: str) -> str:
    return token.strip().lower()


def correct_tokens(question: Question) -> List[str]:
    return [_normalize(t) for t in question.correct_answer.split(",")]


def is_correct(question: Question, options: List[str]) -> bool:
    expected = correct_tokens(question)
    submitted = [_normalize(o) for o in options]
    if len(submitted) != len(expected):
        return False
    return all(token in expected for token in submitted)


def option_text(question: Question, token: str) -> List[str]:
    """Resolve one answer token to display text.

    Returns an empty list when a letter points past the end of the option
    list, so the caller can simply extend.
    """
    letter = token.strip().upper()
    if len(letter) == 1 and letter in _LETTERS:
        index = _LETTERS.index(letter)
        if index < len(question.all_answers):
            return [question.all_answers[index]]
        return []
    return [token]


def score_question(qno: int, question: Question, options: List[str] | None) -> QuestionResult:
    if not options:
        status = SKIPPED
        student_answer = []
    else:
        status = CORRECT if is_correct(question, options) else WRONG
        student_answer = [text for o in options for text in option_text(question, o)]

    correct_answer = []
    for letter in question.correct_answer.split(","):
        correct_answer.extend(option_text(question, letter.strip()))

    return QuestionResult(
        qno=qno,
        question=question.question,
        status=status,
        student_answer=student_answer,
        correct_answer=correct_answer,
        explanation=question.explanation,
    )


def score_submission(quiz: Quiz, answers: Dict[int, List[str]]) -> Score:
    results = [
        score_question(qno, question, answers.get(qno))
        for qno, question in enumerate(quiz.questions, start=1)
    ]
    counts = {CORRECT: 0, WRONG: 0, SKIPPED: 0}
    for result in results:
        counts[result.status] += 1

    total = len(results)
    percentage = 100.0 * counts[CORRECT] / total if total else 0.0
    return Score(
        correct_count=counts[CORRECT],
        wrong_count=counts[WRONG],
        skipped_count=counts[SKIPPED],
        total_count=total,
        percentage=round_half_up(percentage),
        results=results,
    )
