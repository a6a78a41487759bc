"""
Run the API on a local port.

Wraps each HTTP request into a proxy event and sends it through the router.
There is no token authorizer here: the caller's claims come from the
``X-Debug-Uid``, ``X-Debug-Email`` and ``X-Debug-Phone`` headers.
"""
import argparse
import base64
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from werkzeug.serving import run_simple  # noqa: E402
from werkzeug.wrappers import Request, Response  # noqa: E402

from quizhub.config import Settings  # noqa: E402
from quizhub.logging_config import setup_logging  # noqa: E402
from quizhub.router import create_app  # noqa: E402


def to_event(request: Request) -> dict:
    body = request.get_data()
    text_body = request.mimetype.startswith(("application/json", "text/"))
    authorizer = {}
    if request.headers.get("X-Debug-Uid"):
        authorizer["uid"] = request.headers["X-Debug-Uid"]
    if request.headers.get("X-Debug-Email"):
        authorizer["email"] = request.headers["X-Debug-Email"]
    if request.headers.get("X-Debug-Phone"):
        authorizer["phoneNumber"] = request.headers["X-Debug-Phone"]
    if request.args.get("targetUID"):
        authorizer["targetUID"] = request.args["targetUID"]
    return {
        "httpMethod": request.method,
        "path": request.path,
        "queryStringParameters": request.args.to_dict() or None,
        "headers": dict(request.headers),
        "body": body.decode("utf-8") if text_body else base64.b64encode(body).decode("ascii"),
        "isBase64Encoded": not text_body,
        "requestContext": {"authorizer": authorizer or None},
    }


def make_wsgi_app(router):
    @Request.application
    def application(request):
        result = router.handle(to_event(request))
        return Response(result["body"], status=result["statusCode"], headers=result["headers"])
    return application


def main():
    parser = argparse.ArgumentParser(description="Serve the quiz API locally.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    run_simple(args.host, args.port, make_wsgi_app(create_app(settings)), use_reloader=False)


if __name__ == '__main__':
    main()
