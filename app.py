"""
Lambda entry points.

``lambda_handler`` serves every API route; ``authorizer_handler`` is the
token authorizer placed in front of it. Both share one engine, created when
the module is first imported by the runtime.
"""
from quizhub.auth import authorize
from quizhub.config import Settings
from quizhub.firebase import FirebaseVerifier
from quizhub.logging_config import setup_logging
from quizhub.router import create_app

settings = Settings.from_env()
setup_logging(settings.log_level)

router = create_app(settings)
verifier = FirebaseVerifier(settings.firebase_project_id) if settings.firebase_project_id else None


def _resolve_uid(identifier: str):
    store = router.stores["v3"]
    if "@" in identifier:
        return store.find_student_key(email=identifier)
    return store.find_student_key(phone=identifier)


def lambda_handler(event, context):
    return router.handle(event)


def authorizer_handler(event, context):
    if verifier is None:
        raise RuntimeError("FIREBASE_PROJECT_ID is not set")
    # API Gateway turns this exact message into a 401
    try:
        return authorize(event, verifier, _resolve_uid)
    except Exception as e:
        raise Exception("Unauthorized") from e
