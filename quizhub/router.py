import logging
from typing import Callable, Dict

from quizhub import handlers
from quizhub.db import engine_from_settings, init_db
from quizhub.document_store import DocumentStore
from quizhub.documents import DocumentClient
from quizhub.errors import ApiError
from quizhub.relational_store import RelationalStore
from quizhub.responses import error_response, preflight_response
from quizhub.store import Store

logger = logging.getLogger(__name__)

ROUTES: Dict[str, Callable] = {
    "/upload/questions": handlers.upload_questions,
    "/quiz/get-by-name": handlers.get_quiz_by_name,
    "/quiz/delete": handlers.delete_quiz,
    "/quiz/submit": handlers.submit_quiz,
    "/quiz/result": handlers.quiz_result,
    "/quiz/unattempted-quizzes": handlers.unattempted_quizzes,
    "/students/register": handlers.register_student,
    "/students/get": handlers.get_student,
    "/students/get-by-email": handlers.get_student,
    "/students/update": handlers.update_student,
    "/students/lookup": handlers.lookup_student,
    "/students/progress": handlers.student_progress,
    "/students/upgrade-class": handlers.upgrade_class,
}

DEFAULT_GENERATION = "v1"


class Router:
    """Dispatches proxy events to handlers.

    ``stores`` maps a generation name to its store; a path prefixed with
    ``/v2`` or ``/v3`` is served by that generation, an unprefixed path by
    ``v1``.
    """

    def __init__(self, stores: Dict[str, Store]):
        self.stores = stores

    def resolve(self, path: str):
        generation = DEFAULT_GENERATION
        parts = path.split("/", 2)
        if len(parts) == 3 and parts[1] in self.stores and parts[1] != DEFAULT_GENERATION:
            generation = parts[1]
            path = "/" + parts[2]
        return ROUTES.get(path.rstrip("/") or "/"), self.stores.get(generation)

    def handle(self, event: Dict) -> Dict:
        request = handlers.Request(event)
        logger.info("Received request: Path = %s, Method = %s", request.path, request.method)

        if request.method == "OPTIONS":
            return preflight_response()

        handler, store = self.resolve(request.path)
        if handler is None or store is None:
            logger.warning("Invalid API path: %s", request.path)
            return error_response(404, "Invalid API endpoint", receivedPath=request.path)

        try:
            return handler(request, store)
        except ApiError as e:
            if e.status >= 500:
                logger.error("%s failed: %s", request.path, e.message)
            return error_response(e.status, e.message)
        except Exception:
            logger.exception("Unhandled error on %s", request.path)
            return error_response(500, "Internal Server Error")


def build_stores(engine) -> Dict[str, Store]:
    client = DocumentClient(engine)
    return {
        "v1": RelationalStore(engine),
        "v2": DocumentStore(client, key_field="email",
                            students="students", attempts="student_quiz_attempts"),
        "v3": DocumentStore(client, key_field="uid",
                            students="students_v3", attempts="student_quiz_attempts_v3"),
    }


def create_app(settings) -> Router:
    engine = engine_from_settings(settings)
    init_db(engine)
    return Router(build_stores(engine))
