import logging
from datetime import datetime, timezone
from typing import Dict, List

from quizhub.errors import NotFound
from quizhub.schemas import Attempt, Quiz
from quizhub.scoring import score_submission
from quizhub.store import Store

logger = logging.getLogger(__name__)


def save_quiz(store: Store, quiz: Quiz) -> Quiz:
    """Insert the quiz, or replace the one with the same name wholesale."""
    store.put_quiz(quiz)
    logger.info("Saved quiz %s (%s, %d questions)", quiz.quiz_name, quiz.category, len(quiz.questions))
    return quiz


def get_quiz(store: Store, quiz_name: str) -> Quiz:
    quiz = store.get_quiz(quiz_name)
    if quiz is None:
        raise NotFound("Quiz not found")
    return quiz


def delete_quiz(store: Store, quiz_name: str) -> int:
    """Delete a quiz and every attempt made on it. Returns the attempts removed."""
    if not store.delete_quiz(quiz_name):
        raise NotFound("Quiz not found")
    removed = store.delete_attempts_for_quiz(quiz_name)
    logger.info("Deleted quiz %s and %d attempts", quiz_name, removed)
    return removed


def submit_attempt(store: Store, student_key: str, quiz_name: str,
                   answers: Dict[int, List[str]], now: datetime | None = None) -> Attempt:
    """Score a submission and record it as the student's attempt on the quiz.

    The previous attempt, if any, is overwritten and its number carried
    forward plus one. The read and the write are separate store calls, so
    two overlapping submissions by the same student can both read the same
    number; the later write wins.
    """
    quiz = get_quiz(store, quiz_name)
    score = score_submission(quiz, answers)

    previous = store.get_attempt(student_key, quiz_name)
    attempt_number = previous.attempt_number + 1 if previous else 1

    attempt = Attempt(
        student_id=student_key,
        quiz_name=quiz_name,
        category=quiz.category,
        correct_count=score.correct_count,
        wrong_count=score.wrong_count,
        skipped_count=score.skipped_count,
        total_count=score.total_count,
        percentage=score.percentage,
        attempt_number=attempt_number,
        attempted_at=now or datetime.now(timezone.utc),
        results=score.results,
    )
    store.put_attempt(attempt)
    logger.info("Attempt %d on %s by %s: %s%%", attempt_number, quiz_name, student_key, score.percentage)
    return attempt


def latest_attempt(store: Store, student_key: str, quiz_name: str) -> Attempt:
    attempt = store.get_attempt(student_key, quiz_name)
    if attempt is None:
        raise NotFound("No attempt found for this quiz")
    return attempt


def unattempted_quizzes(store: Store, student_key: str, category: str,
                        include_attempted: bool = False) -> List[str]:
    names = store.list_quiz_names(category)
    if include_attempted:
        return names
    attempted = {a.quiz_name for a in store.list_attempts(student_key)}
    return [name for name in names if name not in attempted]
