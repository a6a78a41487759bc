"""Firebase ID token verification for the authorizer."""
import google.auth.transport.requests
from google.oauth2 import id_token

VERIFY_TIMEOUT = 10  # seconds, per certificate fetch


class _BoundedRequest(google.auth.transport.requests.Request):
    def __call__(self, url, method="GET", body=None, headers=None, timeout=VERIFY_TIMEOUT, **kwargs):
        return super().__call__(url, method=method, body=body, headers=headers, timeout=timeout, **kwargs)


class FirebaseVerifier:
    def __init__(self, project_id: str):
        if not project_id:
            raise ValueError("FIREBASE_PROJECT_ID is not set")
        self.project_id = project_id
        self._request = _BoundedRequest()

    def __call__(self, token: str) -> dict:
        claims = id_token.verify_firebase_token(token, self._request, audience=self.project_id)
        if not claims:
            raise ValueError("empty token claims")
        # firebase puts the uid in "sub"; older SDKs also set "user_id"
        claims.setdefault("uid", claims.get("user_id") or claims.get("sub"))
        return claims
