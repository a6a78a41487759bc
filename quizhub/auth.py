"""
Caller identity and permissions.

Bearer tokens are checked once, by :func:`authorize`, in front of the
handlers. It stores the verified claims in the request's authorizer context,
and handlers read them back through :meth:`Claims.from_context` without
verifying the token again.
"""
import logging
from enum import Enum
from typing import Callable, Dict, Optional

from pydantic import BaseModel

from quizhub.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"
    SUPER = "super"

    @classmethod
    def parse(cls, value) -> "Role":
        # legacy records hold no role, or one we no longer know
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.STUDENT


class Capability(str, Enum):
    MANAGE_QUIZZES = "manage_quizzes"
    MANAGE_STUDENTS = "manage_students"
    MANAGE_SUBSCRIPTIONS = "manage_subscriptions"


_GRANTS = {
    Role.STUDENT: frozenset(),
    Role.ADMIN: frozenset({Capability.MANAGE_QUIZZES, Capability.MANAGE_STUDENTS}),
    Role.SUPER: frozenset(Capability),
}

_DENIED = {
    Capability.MANAGE_QUIZZES: "only 'admin' or 'super' role allowed",
    Capability.MANAGE_STUDENTS: "only 'admin' or 'super' role allowed",
    Capability.MANAGE_SUBSCRIPTIONS: "Only 'super' role can update subscription amounts",
}


def can(role: Role, capability: Capability) -> bool:
    return capability in _GRANTS[role]


def require(role: Role, capability: Capability):
    if not can(role, capability):
        raise Forbidden(_DENIED[capability])


class Claims(BaseModel):
    subject: str
    email: str = ""
    phone: str = ""
    target: Optional[str] = None

    @classmethod
    def from_context(cls, context: Optional[Dict]) -> "Claims":
        if not context:
            raise Unauthorized()
        email = context.get("email") or ""
        subject = context.get("uid") or context.get("principalId") or email
        if not isinstance(subject, str) or not subject:
            raise Unauthorized()
        return cls(
            subject=subject,
            email=email if isinstance(email, str) else "",
            phone=context.get("phoneNumber") or "",
            target=context.get("targetUID") or None,
        )

    def identity(self, key_field: str) -> str:
        """The caller's key in a store partitioned by ``key_field``."""
        if key_field == "uid":
            return self.subject
        if not self.email:
            raise Unauthorized()
        return self.email.strip().lower()


# routes whose handlers act on another student named in the query string
TARGET_ROUTES = ("/students/update", "/students/lookup")


def _bearer(token: Optional[str]) -> str:
    if not token:
        raise Unauthorized()
    token = token.strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    if not token:
        raise Unauthorized()
    return token


def policy(principal_id: str, method_arn: str, context: Dict[str, str]) -> Dict:
    return {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{
                "Action": "execute-api:Invoke",
                "Effect": "Allow",
                "Resource": method_arn,
            }],
        },
        "context": context,
    }


def authorize(
    event: Dict,
    verify_token: Callable[[str], Dict],
    resolve_uid: Optional[Callable[[str], Optional[str]]] = None,
) -> Dict:
    """Token authorizer entry point.

    ``verify_token`` checks the credential and returns its decoded claims
    (``uid``, ``email``, ``phone_number``), raising on any failure.
    ``resolve_uid`` maps an email or phone number to a uid and is only used
    on the routes in ``TARGET_ROUTES``.
    """
    token = _bearer(event.get("authorizationToken"))
    try:
        decoded = verify_token(token)
    except Exception as e:
        logger.info("Token verification failed: %s", e)
        raise Unauthorized() from e

    uid = decoded.get("uid") if decoded else None
    if not uid:
        raise Unauthorized()

    context = {
        "uid": uid,
        "email": decoded.get("email") or "",
        "phoneNumber": decoded.get("phone_number") or "",
    }

    method_arn = event.get("methodArn", "")
    if resolve_uid is not None and any(route in method_arn for route in TARGET_ROUTES):
        params = event.get("queryStringParameters") or {}
        identifier = params.get("email") or params.get("phoneNumber")
        if identifier:
            target = resolve_uid(identifier)
            if target:
                context["targetUID"] = target

    logger.info("Authorized %s", uid)
    return policy(uid, method_arn, context)
