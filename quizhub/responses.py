import json
from datetime import datetime

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "OPTIONS, POST, PUT, GET",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def cors_headers():
    headers = dict(CORS_HEADERS)
    headers["Content-Type"] = "application/json"
    return headers


def _default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_response(status_code: int, payload) -> dict:
    return {
        "statusCode": status_code,
        "headers": cors_headers(),
        "body": json.dumps(payload, default=_default),
    }


def success_response(message: str, status_code: int = 200) -> dict:
    return json_response(status_code, {"message": message})


def error_response(status_code: int, message: str, **extra) -> dict:
    payload = {"error": message}
    payload.update(extra)
    return json_response(status_code, payload)


def preflight_response() -> dict:
    return success_response("CORS preflight response")
