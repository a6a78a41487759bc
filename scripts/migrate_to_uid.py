"""
Copy email keyed students and attempts into the uid keyed generation.

Every email is mapped to a uid through a CSV export of the identity
provider (columns ``email,uid``). Students with no uid are skipped and
reported; existing uid records are overwritten.
"""
import argparse
import csv
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from quizhub.config import Settings  # noqa: E402
from quizhub.logging_config import setup_logging  # noqa: E402
from quizhub.router import create_app  # noqa: E402

logger = logging.getLogger("migrate_to_uid")


def load_uid_map(path):
    with open(path, newline="", encoding="utf-8") as fh:
        return {row["email"].strip().lower(): row["uid"].strip() for row in csv.DictReader(fh) if row.get("uid")}


def migrate(source, target, uid_map):
    migrated, skipped = 0, 0
    for email in source.list_student_keys():
        uid = uid_map.get(email.lower())
        if not uid:
            logger.warning("Skipping %s - no uid found", email)
            skipped += 1
            continue
        student = source.get_student(email)
        student.email = student.email or email
        student.student_id = uid
        target.put_student(student)
        for attempt in source.list_attempts(email):
            attempt.student_id = uid
            target.put_attempt(attempt)
        migrated += 1
    return migrated, skipped


def main():
    parser = argparse.ArgumentParser(description="Migrate students to uid keys.")
    parser.add_argument("--uid-map", required=True, help="CSV file with email,uid columns.")
    parser.add_argument("--source", default="v2", choices=["v1", "v2"])
    args = parser.parse_args()

    setup_logging()
    stores = create_app(Settings.from_env()).stores
    migrated, skipped = migrate(stores[args.source], stores["v3"], load_uid_map(args.uid_map))
    logger.info("Migration done: %d migrated, %d skipped", migrated, skipped)


if __name__ == '__main__':
    main()
