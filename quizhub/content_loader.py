"""
Spreadsheet upload -> Quiz.

The first sheet holds one question per row under a header row. Current
sheets carry ``AllAnswers`` (every option, in letter order); the oldest
sheets carried ``IncorrectAnswers`` and the correct answer as text, which is
folded into the current shape with the correct answer as option A.
"""
import base64
import binascii
import io
import logging
from typing import List

import pandas as pd
from werkzeug.formparser import MultiPartParser
from werkzeug.http import parse_options_header

from quizhub.errors import BadRequest
from quizhub.schemas import Question, Quiz

logger = logging.getLogger(__name__)

SEPARATOR = "~~"
REQUIRED_COLUMNS = ["Question", "CorrectAnswer", "AllAnswers", "Explanation"]
LEGACY_ANSWERS_COLUMN = "IncorrectAnswers"


class ContentError(ValueError):
    pass


def split_answers(value: str) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(SEPARATOR)]


def read_rows(data: bytes) -> List[List[str]]:
    try:
        frame = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=str, engine="openpyxl")
    except Exception as e:
        raise ContentError(f"unreadable spreadsheet: {e}") from e
    return frame.fillna("").values.tolist()


def parse_questions(rows: List[List[str]]) -> List[Question]:
    if len(rows) < 2:
        raise ContentError("insufficient data in the file")

    header = {str(name).strip(): i for i, name in enumerate(rows[0]) if str(name).strip()}
    legacy = "AllAnswers" not in header and LEGACY_ANSWERS_COLUMN in header
    required = [c if not (legacy and c == "AllAnswers") else LEGACY_ANSWERS_COLUMN for c in REQUIRED_COLUMNS]
    for column in required:
        if column not in header:
            raise ContentError(f"missing required column: {column}")

    def cell(row, column):
        index = header[column]
        return str(row[index]) if index < len(row) else ""

    questions = []
    for row in rows[1:]:
        if not any(str(v).strip() for v in row):
            continue
        if legacy:
            correct = cell(row, "CorrectAnswer").strip()
            answers = [correct] + split_answers(cell(row, LEGACY_ANSWERS_COLUMN))
            correct_answer = "A"
        else:
            answers = split_answers(cell(row, "AllAnswers"))
            correct_answer = cell(row, "CorrectAnswer")
        questions.append(Question(
            question=cell(row, "Question"),
            correct_answer=correct_answer,
            all_answers=answers,
            explanation=cell(row, "Explanation"),
        ))
    return questions


def load_quiz(data: bytes, quiz_name: str, category: str, duration: int) -> Quiz:
    questions = parse_questions(read_rows(data))
    logger.info("Parsed %d questions for quiz %s", len(questions), quiz_name)
    return Quiz(quiz_name=quiz_name, category=category, duration=duration, questions=questions)


def upload_bytes(body: str | None, is_base64: bool, content_type: str | None) -> bytes:
    """Pull the spreadsheet out of a request body.

    Multipart bodies must carry the file in a part named ``file``; any other
    body is taken as the raw spreadsheet.
    """
    if not body:
        raise BadRequest("File content is empty or missing")
    if is_base64:
        try:
            raw = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            raise BadRequest("Failed to decode base64 body")
    else:
        raw = body.encode("utf-8")

    mimetype, options = parse_options_header(content_type or "")
    if mimetype.startswith("multipart/"):
        boundary = options.get("boundary")
        if not boundary:
            raise BadRequest("Expected multipart/form-data content-type")
        try:
            _, files = MultiPartParser().parse(io.BytesIO(raw), boundary.encode("latin-1"), len(raw))
        except ValueError:
            raise BadRequest("Failed to parse multipart file")
        upload = files.get("file")
        raw = upload.read() if upload is not None else b""

    if not raw:
        raise BadRequest("File content is empty or missing")
    return raw
