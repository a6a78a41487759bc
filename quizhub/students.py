import logging
from datetime import date, datetime, timezone
from typing import Dict, Optional

from quizhub.auth import Capability, Role, require
from quizhub.catalog import is_valid_upgrade, subjects_for_class, upgradable_classes
from quizhub.errors import BadRequest, Conflict, NotFound
from quizhub.progress import summarize_attempts
from quizhub.schemas import Student
from quizhub.store import Store

logger = logging.getLogger(__name__)

PAID = "PAID"
UNPAID = "UNPAID"


def get_student(store: Store, key: str) -> Student:
    student = store.get_student(key)
    if student is None:
        raise NotFound("Student not found")
    return student


def caller_role(store: Store, key: str) -> Role:
    student = store.get_student(key)
    return Role.parse(student.role if student else None)


def register_student(store: Store, key: str, name: str, phone_number: str,
                     student_class: str, email: Optional[str] = None) -> Student:
    if not name or not phone_number or not student_class:
        raise BadRequest("Missing required fields")
    if store.get_student(key) is not None:
        raise Conflict("Student already registered")
    student = Student(student_id=store.normalize_key(key), name=name, phone_number=phone_number,
                      student_class=student_class, email=email or None)
    store.put_student(student)
    logger.info("Registered student %s in %s", student.student_id, student_class)
    return student


def payment_status(student: Student, today: date | None = None) -> str:
    if not student.sub_exp_date:
        return UNPAID
    today = today or datetime.now(timezone.utc).date()
    # ISO dates and timestamps compare correctly on their date prefix
    return PAID if student.sub_exp_date[:10] >= today.isoformat() else UNPAID


def student_profile(student: Student, key_field: str, email: str = "", phone: str = "",
                    today: date | None = None) -> Dict:
    """Profile payload; optional fields with no readable value are left out."""
    profile = {
        key_field: student.student_id,
        "email": student.email or email or (student.student_id if key_field == "email" else ""),
        "name": student.name,
        "student_class": student.student_class,
        "phone_number": student.phone_number or phone,
    }
    optional = {
        "sub_exp_date": student.sub_exp_date,
        "updated_by": student.updated_by,
        "amount": student.amount,
        "payment_time": student.payment_time,
        "role": student.role,
    }
    profile.update({k: v for k, v in optional.items() if v is not None})
    profile["payment_status"] = payment_status(student, today)
    profile["subjects"] = subjects_for_class(student.student_class)
    profile["upgradable_classes"] = upgradable_classes(student.student_class)
    return profile


def update_student(store: Store, actor_role: Role, target_key: str, changes: Dict,
                   now: datetime | None = None) -> Student:
    """Apply an admin edit. A positive ``amount`` records a payment and
    extends the subscription by a year; only super users may do that."""
    require(actor_role, Capability.MANAGE_STUDENTS)

    amount = changes.get("amount")
    if amount is not None:
        try:
            amount = float(amount)
        except (TypeError, ValueError):
            raise BadRequest("Invalid amount")
    if amount and amount > 0:
        require(actor_role, Capability.MANAGE_SUBSCRIPTIONS)

    student = get_student(store, target_key)
    if changes.get("name"):
        student.name = changes["name"]
    if changes.get("phoneNumber"):
        student.phone_number = changes["phoneNumber"]
    if changes.get("studentClass"):
        student.student_class = changes["studentClass"]
    if changes.get("role"):
        # only a super user hands out roles
        require(actor_role, Capability.MANAGE_SUBSCRIPTIONS)
        student.role = Role.parse(changes["role"]).value

    if amount and amount > 0:
        now = now or datetime.now(timezone.utc)
        student.amount = amount
        student.payment_time = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
        student.sub_exp_date = _add_year(now).strftime("%Y-%m-%dT%H:%M:%SZ")
        if changes.get("updatedBy"):
            student.updated_by = changes["updatedBy"]

    store.put_student(student)
    logger.info("Updated student %s", student.student_id)
    return student


def _add_year(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        # Feb 29 rolls over to Mar 1
        return moment.replace(year=moment.year + 1, month=3, day=1)


def upgrade_class(store: Store, key: str, new_class: str) -> Dict:
    """Move a student up the class ladder. Progress starts over: every
    attempt the student has is deleted, after the new class is saved."""
    if not new_class:
        raise BadRequest("Missing 'newClass' parameter")
    student = get_student(store, key)
    old_class = student.student_class
    if not is_valid_upgrade(old_class, new_class):
        raise BadRequest("Invalid class upgrade path")

    student.student_class = new_class
    store.put_student(student)
    removed = store.delete_attempts_for_student(key)
    logger.info("Upgraded %s from %s to %s, cleared %d attempts", key, old_class, new_class, removed)
    return {"oldClass": old_class, "newClass": new_class}


def student_progress(store: Store, key: str) -> Dict:
    student = get_student(store, key)
    subjects = subjects_for_class(student.student_class)
    if not subjects:
        raise NotFound("No subjects found for student class")
    return summarize_attempts(subjects, store.list_attempts(key), store.count_quizzes)
