import json
from datetime import datetime, timezone

from quizhub.config import Settings
from quizhub.responses import error_response, json_response, success_response


def test_json_response_serializes_datetimes():
    response = json_response(200, {"at": datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)})
    assert json.loads(response["body"]) == {"at": "2025-01-02T03:04:05+00:00"}
    assert response["headers"]["Access-Control-Allow-Methods"] == "OPTIONS, POST, PUT, GET"


def test_error_and_success_shapes():
    assert json.loads(error_response(404, "nope", receivedPath="/x")["body"]) == {"error": "nope", "receivedPath": "/x"}
    assert success_response("ok", 201)["statusCode"] == 201


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp.db")
    monkeypatch.setenv("QUIZHUB_LOG_LEVEL", "debug")
    monkeypatch.setenv("QUIZHUB_ECHO_SQL", "true")
    monkeypatch.delenv("FIREBASE_PROJECT_ID", raising=False)
    settings = Settings.from_env()
    assert settings.database_url == "sqlite:///tmp.db"
    assert settings.log_level == "DEBUG"
    assert settings.echo_sql is True
    assert settings.firebase_project_id == ""
