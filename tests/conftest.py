import base64
import io
import json

import pandas as pd
import pytest

from quizhub.db import init_db, make_engine
from quizhub.router import Router, build_stores
from quizhub.schemas import Question, Quiz, Student


@pytest.fixture
def engine():
    # fresh in-memory database per test
    eng = make_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def stores(engine):
    return build_stores(engine)


@pytest.fixture
def router(stores):
    return Router(stores)


@pytest.fixture(params=["v1", "v2", "v3"])
def store(request, stores):
    return stores[request.param]


def make_quiz(name="ALG101", category="CLS10-MATHS", answers=("A", "B,C")):
    questions = [
        Question(
            question=f"Q{i + 1}",
            correct_answer=answer,
            all_answers=["alpha", "beta", "gamma", "delta"],
            explanation=f"because {i + 1}",
        )
        for i, answer in enumerate(answers)
    ]
    return Quiz(quiz_name=name, category=category, duration=20, questions=questions)


def make_student(key, student_class="CLS10", role=None):
    return Student(student_id=key, name="Ravi", student_class=student_class,
                   phone_number="+919999999999", role=role)


def xlsx_bytes(rows):
    buf = io.BytesIO()
    pd.DataFrame(rows[1:], columns=rows[0]).to_excel(buf, index=False, engine="openpyxl")
    return buf.getvalue()


def event(path, method="POST", query=None, body=None, claims=None, headers=None, base64_body=False):
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    if isinstance(body, bytes):
        body = base64.b64encode(body).decode("ascii")
        base64_body = True
    return {
        "httpMethod": method,
        "path": path,
        "queryStringParameters": query,
        "headers": headers or {"Content-Type": "application/json"},
        "body": body,
        "isBase64Encoded": base64_body,
        "requestContext": {"authorizer": claims},
    }


def body_of(response):
    return json.loads(response["body"])
