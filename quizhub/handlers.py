"""
Request handlers.

Each handler takes a :class:`Request` and the store of the generation the
route belongs to, and returns a proxy response. Failures are raised as
:class:`~quizhub.errors.ApiError` and turned into responses by the router.
"""
import json
import logging
from typing import Dict, Optional

from pydantic import ValidationError

from quizhub import content_loader, quiz as quizzes, students
from quizhub.auth import Capability, Claims, require
from quizhub.errors import BadRequest, InternalError
from quizhub.responses import json_response, success_response
from quizhub.schemas import Submission
from quizhub.store import Store

logger = logging.getLogger(__name__)


class Request:
    def __init__(self, event: Dict):
        self.event = event
        self.method = (event.get("httpMethod") or "GET").upper()
        self.path = event.get("path") or ""
        self.query = event.get("queryStringParameters") or {}
        self.headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
        self.body = event.get("body")
        self.is_base64 = bool(event.get("isBase64Encoded"))
        self.context = (event.get("requestContext") or {}).get("authorizer")
        self._claims = None

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def param(self, name: str, required: bool = True) -> str:
        value = (self.query.get(name) or "").strip()
        if required and not value:
            raise BadRequest(f"Missing '{name}' parameter")
        return value

    def json(self) -> Dict:
        try:
            data = json.loads(self.body or "")
        except ValueError:
            raise BadRequest("Invalid JSON format")
        if not isinstance(data, dict):
            raise BadRequest("Invalid JSON format")
        return data

    @property
    def claims(self) -> Claims:
        if self._claims is None:
            self._claims = Claims.from_context(self.context)
        return self._claims


def _caller(request: Request, store: Store) -> str:
    return request.claims.identity(store.key_field)


def _require(request: Request, store: Store, capability: Capability):
    role = students.caller_role(store, _caller(request, store))
    require(role, capability)
    return role


def _target(request: Request, store: Store) -> str:
    """The student an admin route acts on."""
    if store.key_field == "uid":
        if not request.claims.target:
            raise BadRequest("Missing target student identifier")
        return request.claims.target
    email = request.query.get("email")
    phone = request.query.get("phoneNumber")
    if not email and request.body:
        email = request.json().get("email")
    key = store.find_student_key(email=email, phone=phone) if (email or phone) else None
    if not key:
        if not email and not phone:
            raise BadRequest("Missing target student identifier")
        return email or phone
    return key


# quizzes

def upload_questions(request: Request, store: Store):
    _require(request, store, Capability.MANAGE_QUIZZES)
    category = request.query.get("category")
    duration = request.query.get("duration")
    quiz_name = request.query.get("quizName")
    if not category or not duration or not quiz_name:
        raise BadRequest("Missing required query parameters")
    try:
        duration = int(duration)
    except ValueError:
        raise BadRequest("Invalid duration format")

    data = content_loader.upload_bytes(request.body, request.is_base64, request.header("content-type"))
    try:
        quiz = content_loader.load_quiz(data, quiz_name, category, duration)
    except content_loader.ContentError as e:
        raise InternalError(f"Failed to process Excel file: {e}")

    quizzes.save_quiz(store, quiz)
    return json_response(201, {
        "message": "Quiz uploaded successfully",
        "quizName": quiz.quiz_name,
        "category": quiz.category,
        "duration": quiz.duration,
        "questionCount": len(quiz.questions),
    })


def get_quiz_by_name(request: Request, store: Store):
    _caller(request, store)
    quiz = quizzes.get_quiz(store, request.param("quizName"))
    return json_response(200, quiz.model_dump(by_alias=True))


def delete_quiz(request: Request, store: Store):
    _require(request, store, Capability.MANAGE_QUIZZES)
    quiz_name = request.param("quizName")
    quizzes.delete_quiz(store, quiz_name)
    return json_response(200, {"message": "Quiz deleted successfully", "quizName": quiz_name})


def submit_quiz(request: Request, store: Store):
    key = _caller(request, store)
    quiz_name = request.param("quizName")
    try:
        submission = Submission.model_validate(request.json())
    except ValidationError:
        raise BadRequest("Invalid JSON format")

    attempt = quizzes.submit_attempt(store, key, quiz_name, submission.by_ordinal())
    return json_response(200, attempt.model_dump(
        by_alias=True,
        include={"correct_count", "wrong_count", "skipped_count", "total_count",
                 "percentage", "attempt_number", "results"},
    ))


def quiz_result(request: Request, store: Store):
    key = _caller(request, store)
    attempt = quizzes.latest_attempt(store, key, request.param("quizName"))
    payload = attempt.model_dump(by_alias=True, exclude={"student_id"})
    payload[store.key_field] = attempt.student_id
    return json_response(200, payload)


def unattempted_quizzes(request: Request, store: Store):
    key = _caller(request, store)
    category = request.param("category")
    # the uid generation lets students retake quizzes, so it lists them all
    names = quizzes.unattempted_quizzes(store, key, category, include_attempted=store.key_field == "uid")
    return json_response(200, {"unattempted_quizzes": names})


# students

def register_student(request: Request, store: Store):
    key = _caller(request, store)
    data = request.json()
    students.register_student(
        store, key,
        name=data.get("name"),
        phone_number=data.get("phoneNumber"),
        student_class=data.get("studentClass"),
        email=request.claims.email or None,
    )
    return success_response("Student registered successfully")


def get_student(request: Request, store: Store):
    key = _caller(request, store)
    if store.email_query_override and request.query.get("email"):
        key = request.query["email"]
    student = students.get_student(store, key)
    profile = students.student_profile(student, store.key_field,
                                       email=request.claims.email, phone=request.claims.phone)
    return json_response(200, profile)


def update_student(request: Request, store: Store):
    role = _require(request, store, Capability.MANAGE_STUDENTS)
    changes = request.json()
    target = _target(request, store)
    students.update_student(store, role, target, changes)
    return success_response("Student updated successfully")


def lookup_student(request: Request, store: Store):
    _require(request, store, Capability.MANAGE_STUDENTS)
    student = students.get_student(store, _target(request, store))
    profile = students.student_profile(student, store.key_field, email=request.query.get("email") or "")
    return json_response(200, profile)


def student_progress(request: Request, store: Store):
    key = _caller(request, store)
    payload = {store.key_field: key}
    payload.update(students.student_progress(store, key))
    return json_response(200, payload)


def upgrade_class(request: Request, store: Store):
    key = _caller(request, store)
    data = request.json()
    change = students.upgrade_class(store, key, (data.get("newClass") or "").strip())
    payload = {"message": "Class upgraded successfully", store.key_field: key}
    payload.update(change)
    return json_response(200, payload)
