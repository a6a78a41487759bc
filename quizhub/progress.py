from collections import defaultdict
from typing import Callable, Dict, Iterable, List

from quizhub.schemas import Attempt
from quizhub.scoring import round_half_up


def summarize_attempts(
    subjects: List[str],
    attempts: Iterable[Attempt],
    quiz_count: Callable[[str], int],
) -> Dict[str, object]:
    """Fold a student's attempts into per-subject progress.

    ``subjects`` is the student's enrolled category list, in display order;
    attempts in any other category are ignored. ``quiz_count`` returns how
    many quizzes the catalog holds for a category. The unattempted figure is
    the plain difference and may go negative when the catalog has shrunk
    since the attempts were made.
    """
    enrolled = set(subjects)
    attempted = defaultdict(set)
    percentage_sum = defaultdict(float)
    percentage_count = defaultdict(int)
    individual = defaultdict(list)

    for attempt in attempts:
        category = attempt.category
        if category not in enrolled:
            continue
        attempted[category].add(attempt.quiz_name)
        percentage_sum[category] += attempt.percentage
        percentage_count[category] += 1

        score = round_half_up(attempt.percentage)
        individual[category].append({
            'quizName': attempt.quiz_name,
            'category': category,
            'correctCount': attempt.correct_count,
            'wrongCount': attempt.wrong_count,
            'skippedCount': attempt.skipped_count,
            'totalCount': attempt.total_count,
            'percentage': score,
            'totalAttempts': attempt.attempt_number,
            'latestScore': score,
            'attemptedAt': attempt.attempted_at.isoformat() if attempt.attempted_at else None,
        })

    summary = []
    for category in subjects:
        count = percentage_count[category]
        average = round_half_up(percentage_sum[category] / count) if count else 0.0
        done = len(attempted[category])
        summary.append({
            'category': category,
            'percentage': average,
            'attempted': done,
            'unattempted': quiz_count(category) - done,
        })

    return {'categorySummary': summary, 'individualTests': dict(individual)}
