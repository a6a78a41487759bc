import pytest

from quizhub.responses import CORS_HEADERS

from conftest import body_of, event, make_quiz, make_student, xlsx_bytes

CLAIMS = {"uid": "u-ravi", "email": "ravi@example.com", "phoneNumber": "+919999999999"}
ADMIN = {"uid": "u-admin", "email": "admin@example.com", "phoneNumber": "+911111111111"}
SUPER = {"uid": "u-super", "email": "super@example.com", "phoneNumber": "+912222222222"}

GENERATIONS = [("", "v1"), ("/v2", "v2"), ("/v3", "v3")]


def _key(store, claims):
    return claims["uid"] if store.key_field == "uid" else claims["email"]


def _seed(stores, generation, claims=CLAIMS, role=None, student_class="CLS10"):
    store = stores[generation]
    store.put_student(make_student(_key(store, claims), student_class=student_class, role=role))
    return store


def test_options_preflight(router):
    response = router.handle(event("/v3/quiz/submit", method="OPTIONS"))
    assert response["statusCode"] == 200
    for name, value in CORS_HEADERS.items():
        assert response["headers"][name] == value
    assert response["headers"]["Content-Type"] == "application/json"


@pytest.mark.parametrize("path", ["/nope", "/v4/quiz/submit", "/v3/students"])
def test_unknown_path(router, path):
    response = router.handle(event(path, claims=CLAIMS))
    assert response["statusCode"] == 404
    assert body_of(response) == {"error": "Invalid API endpoint", "receivedPath": path}


def test_missing_claims_is_unauthorized(router):
    response = router.handle(event("/quiz/get-by-name", method="GET", query={"quizName": "ALG101"}))
    assert response["statusCode"] == 401
    assert body_of(response) == {"error": "Unauthorized"}


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_submit_and_fetch_result(router, stores, prefix, generation):
    store = stores[generation]
    store.put_quiz(make_quiz())

    answers = {"answers": {"1": ["a"], "2": ["c", "b"]}}
    response = router.handle(event(f"{prefix}/quiz/submit", query={"quizName": "ALG101"},
                                   body=answers, claims=CLAIMS))
    assert response["statusCode"] == 200
    body = body_of(response)
    assert body["percentage"] == 100.0
    assert body["correctCount"] == 2
    assert body["totalCount"] == 2
    assert body["attemptNumber"] == 1
    assert [r["status"] for r in body["results"]] == ["correct", "correct"]
    assert body["results"][1]["studentAnswer"] == ["gamma", "beta"]
    assert body["results"][1]["correctAnswer"] == ["beta", "gamma"]

    response = router.handle(event(f"{prefix}/quiz/result", method="GET",
                                   query={"quizName": "ALG101"}, claims=CLAIMS))
    assert response["statusCode"] == 200
    result = body_of(response)
    assert result[store.key_field] == _key(store, CLAIMS)
    assert result["quizName"] == "ALG101"
    assert result["category"] == "CLS10-MATHS"


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_resubmission_increments_attempt_number(router, stores, prefix, generation):
    store = stores[generation]
    store.put_quiz(make_quiz())
    submit = event(f"{prefix}/quiz/submit", query={"quizName": "ALG101"},
                   body={"answers": [{"qno": 1, "options": ["B"]}]}, claims=CLAIMS)

    first = body_of(router.handle(submit))
    second = body_of(router.handle(submit))
    assert second["attemptNumber"] == first["attemptNumber"] + 1 == 2
    assert second["percentage"] == first["percentage"] == 0.0
    assert (second["wrongCount"], second["skippedCount"]) == (1, 1)
    assert store.get_attempt(_key(store, CLAIMS), "ALG101").attempt_number == 2


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_unknown_quiz_writes_no_attempt(router, stores, prefix, generation):
    store = stores[generation]
    response = router.handle(event(f"{prefix}/quiz/submit", query={"quizName": "MISSING"},
                                   body={"answers": {"1": ["a"]}}, claims=CLAIMS))
    assert response["statusCode"] == 404
    assert body_of(response) == {"error": "Quiz not found"}
    assert store.list_attempts(_key(store, CLAIMS)) == []


def test_submit_rejects_bad_payload(router, stores):
    stores["v1"].put_quiz(make_quiz())
    response = router.handle(event("/quiz/submit", query={"quizName": "ALG101"},
                                   body="{not json", claims=CLAIMS))
    assert response["statusCode"] == 400
    response = router.handle(event("/quiz/submit", query={"quizName": "ALG101"},
                                   body={"answers": [{"options": ["a"]}]}, claims=CLAIMS))
    assert response["statusCode"] == 400
    assert body_of(response) == {"error": "Invalid JSON format"}


def test_result_without_attempt(router):
    response = router.handle(event("/v3/quiz/result", method="GET",
                                   query={"quizName": "ALG101"}, claims=CLAIMS))
    assert response["statusCode"] == 404
    assert body_of(response) == {"error": "No attempt found for this quiz"}


def test_get_quiz_by_name(router, stores):
    stores["v3"].put_quiz(make_quiz())
    response = router.handle(event("/v3/quiz/get-by-name", method="GET",
                                   query={"quizName": "ALG101"}, claims=CLAIMS))
    body = body_of(response)
    assert body["quizName"] == "ALG101"
    assert body["questions"][1]["correctAnswer"] == "B,C"

    response = router.handle(event("/v3/quiz/get-by-name", method="GET", claims=CLAIMS))
    assert response["statusCode"] == 400
    assert body_of(response) == {"error": "Missing 'quizName' parameter"}


def test_unattempted_quizzes(router, stores):
    for generation in ("v1", "v3"):
        store = stores[generation]
        store.put_quiz(make_quiz())
        store.put_quiz(make_quiz(name="ALG102"))
        store.put_quiz(make_quiz(name="PHY1", category="CLS10-SCIENCE"))

    for prefix in ("", "/v3"):
        router.handle(event(f"{prefix}/quiz/submit", query={"quizName": "ALG101"},
                            body={"answers": {}}, claims=CLAIMS))

    query = {"category": "CLS10-MATHS"}
    v1 = body_of(router.handle(event("/quiz/unattempted-quizzes", method="GET", query=query, claims=CLAIMS)))
    v3 = body_of(router.handle(event("/v3/quiz/unattempted-quizzes", method="GET", query=query, claims=CLAIMS)))
    assert v1 == {"unattempted_quizzes": ["ALG102"]}
    assert v3 == {"unattempted_quizzes": ["ALG101", "ALG102"]}


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_progress(router, stores, prefix, generation):
    store = _seed(stores, generation)
    store.put_quiz(make_quiz())
    store.put_quiz(make_quiz(name="ALG102"))
    store.put_quiz(make_quiz(name="PHY1", category="CLS10-SCIENCE"))
    store.put_quiz(make_quiz(name="PHY2", category="CLS10-SCIENCE"))

    router.handle(event(f"{prefix}/quiz/submit", query={"quizName": "ALG101"},
                        body={"answers": {"1": ["a"], "2": ["b"]}}, claims=CLAIMS))

    response = router.handle(event(f"{prefix}/students/progress", method="GET", claims=CLAIMS))
    assert response["statusCode"] == 200
    body = body_of(response)
    assert body[store.key_field] == _key(store, CLAIMS)
    summary = {s["category"]: s for s in body["categorySummary"]}
    assert summary["CLS10-MATHS"] == {"category": "CLS10-MATHS", "percentage": 50.0,
                                      "attempted": 1, "unattempted": 1}
    assert summary["CLS10-SCIENCE"] == {"category": "CLS10-SCIENCE", "percentage": 0.0,
                                        "attempted": 0, "unattempted": 2}
    assert [t["quizName"] for t in body["individualTests"]["CLS10-MATHS"]] == ["ALG101"]


def test_progress_for_class_without_subjects(router, stores):
    _seed(stores, "v3", student_class="CLS5")
    response = router.handle(event("/v3/students/progress", method="GET", claims=CLAIMS))
    assert response["statusCode"] == 404
    assert body_of(response) == {"error": "No subjects found for student class"}


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_register_and_get_student(router, stores, prefix, generation):
    payload = {"name": "Ravi", "phoneNumber": "+919999999999", "studentClass": "CLS10"}
    response = router.handle(event(f"{prefix}/students/register", body=payload, claims=CLAIMS))
    assert response["statusCode"] == 200
    assert body_of(response) == {"message": "Student registered successfully"}

    response = router.handle(event(f"{prefix}/students/register", body=payload, claims=CLAIMS))
    assert response["statusCode"] == 409

    response = router.handle(event(f"{prefix}/students/get", method="GET", claims=CLAIMS))
    profile = body_of(response)
    store = stores[generation]
    assert profile[store.key_field] == _key(store, CLAIMS)
    assert profile["email"] == "ravi@example.com"
    assert profile["payment_status"] == "UNPAID"
    assert "CLS10-MATHS" in profile["subjects"]
    assert profile["upgradable_classes"] == ["CLS11-MPC", "CLS11-BIPC"]
    assert "amount" not in profile


def test_register_requires_fields(router):
    response = router.handle(event("/v3/students/register", body={"name": "Ravi"}, claims=CLAIMS))
    assert response["statusCode"] == 400
    assert body_of(response) == {"error": "Missing required fields"}


def test_get_unknown_student(router):
    response = router.handle(event("/v3/students/get", method="GET", claims=CLAIMS))
    assert response["statusCode"] == 404
    assert body_of(response) == {"error": "Student not found"}


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_students_cannot_manage_quizzes(router, stores, prefix, generation):
    _seed(stores, generation)
    stores[generation].put_quiz(make_quiz())
    response = router.handle(event(f"{prefix}/quiz/delete", method="GET",
                                   query={"quizName": "ALG101"}, claims=CLAIMS))
    assert response["statusCode"] == 403
    assert body_of(response) == {"error": "only 'admin' or 'super' role allowed"}
    assert stores[generation].get_quiz("ALG101") is not None


def test_upload_questions(router, stores):
    _seed(stores, "v3", claims=ADMIN, role="admin")
    data = xlsx_bytes([
        ["Question", "CorrectAnswer", "AllAnswers", "Explanation"],
        ["2 + 2?", "B", "3~~4~~5~~6", "sum"],
        ["3 x 3?", "C", "3~~6~~9~~12", "product"],
    ])
    query = {"quizName": "ARITH1", "category": "CLS6-MATHS", "duration": "15"}
    response = router.handle(event("/v3/upload/questions", query=query, body=data, claims=ADMIN,
                                   headers={"Content-Type": "application/octet-stream"}))
    assert response["statusCode"] == 201
    assert body_of(response) == {
        "message": "Quiz uploaded successfully",
        "quizName": "ARITH1",
        "category": "CLS6-MATHS",
        "duration": 15,
        "questionCount": 2,
    }
    assert stores["v3"].get_quiz("ARITH1").questions[1].all_answers == ["3", "6", "9", "12"]


def test_upload_rejects_bad_input(router, stores):
    _seed(stores, "v3", claims=ADMIN, role="admin")
    response = router.handle(event("/v3/upload/questions", query={"quizName": "X", "category": "CLS6-MATHS",
                                                                    "duration": "ten"},
                                   body=b"data", claims=ADMIN))
    assert body_of(response) == {"error": "Invalid duration format"}

    response = router.handle(event("/v3/upload/questions", query={"quizName": "X"}, body=b"data", claims=ADMIN))
    assert body_of(response) == {"error": "Missing required query parameters"}

    response = router.handle(event("/v3/upload/questions", query={"quizName": "X", "category": "CLS6-MATHS",
                                                                    "duration": "10"},
                                   body=b"not a workbook", claims=ADMIN,
                                   headers={"Content-Type": "application/octet-stream"}))
    assert response["statusCode"] == 500
    assert body_of(response)["error"].startswith("Failed to process Excel file: ")


def test_admin_deletes_quiz_and_its_attempts(router, stores):
    store = _seed(stores, "v1", claims=ADMIN, role="admin")
    store.put_quiz(make_quiz())
    router.handle(event("/quiz/submit", query={"quizName": "ALG101"}, body={"answers": {}}, claims=CLAIMS))

    response = router.handle(event("/quiz/delete", method="GET", query={"quizName": "ALG101"}, claims=ADMIN))
    assert response["statusCode"] == 200
    assert store.get_quiz("ALG101") is None
    assert store.list_attempts(CLAIMS["email"]) == []

    response = router.handle(event("/quiz/delete", method="GET", query={"quizName": "ALG101"}, claims=ADMIN))
    assert response["statusCode"] == 404


def test_update_student_amount_needs_super(router, stores):
    store = _seed(stores, "v3")
    _seed(stores, "v3", claims=ADMIN, role="admin")
    _seed(stores, "v3", claims=SUPER, role="super")
    target = dict(ADMIN, targetUID=CLAIMS["uid"])

    response = router.handle(event("/v3/students/update", method="PUT", body={"amount": 999}, claims=target))
    assert response["statusCode"] == 403
    assert body_of(response) == {"error": "Only 'super' role can update subscription amounts"}

    response = router.handle(event("/v3/students/update", method="PUT", body={"name": "Ravi K"}, claims=target))
    assert response["statusCode"] == 200
    assert store.get_student(CLAIMS["uid"]).name == "Ravi K"

    target = dict(SUPER, targetUID=CLAIMS["uid"])
    response = router.handle(event("/v3/students/update", method="PUT",
                                   body={"amount": 999, "updatedBy": "super@example.com"}, claims=target))
    assert response["statusCode"] == 200
    student = store.get_student(CLAIMS["uid"])
    assert student.amount == 999.0
    assert student.updated_by == "super@example.com"
    assert student.payment_time.endswith("Z")
    assert student.sub_exp_date[:4] == str(int(student.payment_time[:4]) + 1)

    profile = body_of(router.handle(event("/v3/students/get", method="GET", claims=CLAIMS)))
    assert profile["payment_status"] == "PAID"


def test_update_by_email_on_relational_store(router, stores):
    store = _seed(stores, "v1")
    _seed(stores, "v1", claims=ADMIN, role="admin")
    response = router.handle(event("/students/update", method="PUT", query={"email": "RAVI@example.com"},
                                   body={"studentClass": "CLS9"}, claims=ADMIN))
    assert response["statusCode"] == 200
    assert store.get_student("ravi@example.com").student_class == "CLS9"


def test_students_cannot_update(router, stores):
    _seed(stores, "v3")
    response = router.handle(event("/v3/students/update", method="PUT", body={"name": "x"},
                                   claims=dict(CLAIMS, targetUID="u-ravi")))
    assert response["statusCode"] == 403


def test_admin_lookup(router, stores):
    _seed(stores, "v3")
    _seed(stores, "v3", claims=ADMIN, role="admin")
    response = router.handle(event("/v3/students/lookup", method="GET",
                                   claims=dict(ADMIN, targetUID=CLAIMS["uid"])))
    assert response["statusCode"] == 200
    assert body_of(response)["uid"] == "u-ravi"

    response = router.handle(event("/v3/students/lookup", method="GET", claims=ADMIN))
    assert response["statusCode"] == 400


@pytest.mark.parametrize("prefix,generation", GENERATIONS)
def test_upgrade_class_clears_attempts(router, stores, prefix, generation):
    store = _seed(stores, generation)
    store.put_quiz(make_quiz())
    router.handle(event(f"{prefix}/quiz/submit", query={"quizName": "ALG101"},
                        body={"answers": {"1": ["a"]}}, claims=CLAIMS))

    response = router.handle(event(f"{prefix}/students/upgrade-class", body={"newClass": "CLS11-MPC"},
                                   claims=CLAIMS))
    assert response["statusCode"] == 200
    body = body_of(response)
    assert (body["oldClass"], body["newClass"]) == ("CLS10", "CLS11-MPC")
    key = _key(store, CLAIMS)
    assert store.list_attempts(key) == []
    assert store.get_student(key).student_class == "CLS11-MPC"

    response = router.handle(event(f"{prefix}/students/upgrade-class", body={"newClass": "CLS12-BIPC"},
                                   claims=CLAIMS))
    assert response["statusCode"] == 400
    assert body_of(response) == {"error": "Invalid class upgrade path"}


def test_unexpected_errors_become_500(router, stores, monkeypatch):
    def boom(quiz_name):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(stores["v3"], "get_quiz", boom)
    response = router.handle(event("/v3/quiz/get-by-name", method="GET",
                                   query={"quizName": "ALG101"}, claims=CLAIMS))
    assert response["statusCode"] == 500
    assert body_of(response) == {"error": "Internal Server Error"}


def test_document_get_ignores_email_in_query(router, stores):
    store = _seed(stores, "v2")
    store.put_student(make_student("other@example.com", student_class="CLS9"))

    for path in ("/v2/students/get", "/v2/students/get-by-email"):
        response = router.handle(event(path, method="GET", query={"email": "other@example.com"}, claims=CLAIMS))
        assert response["statusCode"] == 200
        profile = body_of(response)
        assert profile["email"] == "ravi@example.com"
        assert profile["student_class"] == "CLS10"


def test_relational_get_by_email_accepts_query(router, stores):
    store = _seed(stores, "v1")
    store.put_student(make_student("other@example.com", student_class="CLS9"))
    response = router.handle(event("/students/get-by-email", method="GET",
                                   query={"email": "other@example.com"}, claims=CLAIMS))
    assert body_of(response)["email"] == "other@example.com"


def test_mixed_case_email_claim_is_resolvable(router, stores):
    claims = dict(CLAIMS, email="Ravi@Example.com")
    payload = {"name": "Ravi", "phoneNumber": "+919999999999", "studentClass": "CLS10"}
    response = router.handle(event("/v3/students/register", body=payload, claims=claims))
    assert response["statusCode"] == 200

    store = stores["v3"]
    assert store.find_student_key(email="Ravi@Example.com") == "u-ravi"
    assert store.find_student_key(email="ravi@example.com") == "u-ravi"
    assert store.get_student("u-ravi").email == "ravi@example.com"
