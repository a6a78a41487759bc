import argparse
import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from quizhub.catalog import subjects_for_class  # noqa: E402
from quizhub.config import Settings  # noqa: E402
from quizhub.quiz import save_quiz, submit_attempt  # noqa: E402
from quizhub.router import create_app  # noqa: E402
from quizhub.schemas import Question, Quiz, Student  # noqa: E402

SEED_QUIZ_PREFIX = "[SEED]"


def _questions(count):
    questions = []
    for i in range(count):
        letter = random.choice("ABCD")
        questions.append(Question(
            question=f"Seed question {i + 1}",
            correct_answer=letter,
            all_answers=[f"Option {c}" for c in "ABCD"],
            explanation=f"The answer is {letter}.",
        ))
    return questions


def main():
    parser = argparse.ArgumentParser(description="Seed demo quizzes and a student.")
    parser.add_argument("--generation", default="v3", choices=["v1", "v2", "v3"])
    parser.add_argument("--student", required=True, help="Student key (email or uid, per generation).")
    parser.add_argument("--student-class", default="CLS10")
    parser.add_argument("--quizzes", type=int, default=2, help="Quizzes per subject.")
    parser.add_argument("--questions", type=int, default=5)
    parser.add_argument("--role", default="student", choices=["student", "admin", "super"])
    args = parser.parse_args()

    random.seed(42)
    store = create_app(Settings.from_env()).stores[args.generation]

    subjects = subjects_for_class(args.student_class)
    if not subjects:
        raise SystemExit(f"No subjects for class: {args.student_class}")

    if store.get_student(args.student) is None:
        store.put_student(Student(student_id=args.student, name="Seed Student",
                                  student_class=args.student_class, phone_number="+910000000000",
                                  role=args.role))

    for subject in subjects:
        for n in range(args.quizzes):
            quiz = Quiz(quiz_name=f"{SEED_QUIZ_PREFIX} {subject} {n + 1}", category=subject,
                        duration=10, questions=_questions(args.questions))
            save_quiz(store, quiz)
            if n == 0:
                answers = {i + 1: [random.choice("ABCD")] for i in range(args.questions)}
                submit_attempt(store, args.student, quiz.quiz_name, answers)

    print(f"Seeded {len(subjects) * args.quizzes} quizzes for {args.student} ({args.generation})")


if __name__ == '__main__':
    main()
