import sqlite3

from fastapi import FastAPI
from fastapi.testclient import TestClient

from api import cms_routes, routes
from storage.sqlite import get_conn


app = FastAPI()
app.include_router(routes.router)
app.include_router(cms_routes.router)
client = TestClient(app)

BASE = "/api/marathon/tab-1"


def _rows(table: str):
    with get_conn(row_factory=sqlite3.Row) as conn:
        return conn.execute(f"SELECT * FROM {table} ORDER BY id").fetchall()


def test_unknown_company_is_404(cms):
    resp = client.post(f"{BASE}/start", json={"company_id": "999"})
    assert resp.status_code == 404
    view = client.get(BASE).json()
    assert view["phase"] == "not_started"
    assert view["session"] is None


def test_absent_session_guards(cms):
    assert client.post(f"{BASE}/submit", json={"score": 50, "feedback": "x"}).status_code == 404
    assert client.post(f"{BASE}/next").status_code == 404
    assert client.get(f"{BASE}/report.pdf").status_code == 404
    warned = client.post(f"{BASE}/warning", json={})
    assert warned.status_code == 200
    assert warned.json()["session"] is None
    assert client.post(f"{BASE}/feedback/viewed").json()["session"] is None


def test_full_marathon(cms, fake_feedback):
    start = client.post(f"{BASE}/start", json={"company_id": "1"})
    assert start.status_code == 200
    view = start.json()
    assert view["session"] == {
        "companyId": "1",
        "currentRoundIndex": 0,
        "isRoundSubmitted": False,
        "isFeedbackViewed": False,
        "warnings": 0,
        "isTerminated": False,
        "scores": {},
        "roundFeedback": None,
    }
    assert view["phase"] == "round_active"
    assert view["current_round"]["type"] == "resume"
    assert view["workflow_length"] == 4

    # resume: reported externally
    submitted = client.post(f"{BASE}/submit", json={"score": 80, "feedback": "Good"}).json()
    assert submitted["phase"] == "feedback_pending"
    assert submitted["session"]["scores"] == {"0": 80}
    viewed = client.post(f"{BASE}/feedback/viewed").json()
    assert viewed["phase"] == "feedback_viewed"
    advanced = client.post(f"{BASE}/next").json()
    assert advanced["session"]["currentRoundIndex"] == 1
    assert advanced["session"]["roundFeedback"] is None

    # aptitude: served and graded here
    assert client.post(f"{BASE}/rounds/coding/submit", json={
        "ai_score": 90, "feedback": "x", "passed_tests": 1, "total_tests": 1,
    }).status_code == 409
    questions = client.post(f"{BASE}/rounds/aptitude/questions").json()
    assert questions["duration_seconds"] == 1800
    assert [q["id"] for q in questions["questions"]] == ["d2"]
    assert all("answer" not in q for q in questions["questions"])
    graded = client.post(
        f"{BASE}/rounds/aptitude/submit",
        json={"question_ids": ["d2"], "answers": {"d2": "243"}, "elapsed_seconds": 125},
    ).json()
    assert graded["session"]["scores"]["1"] == 100
    assert graded["session"]["roundFeedback"] == "## What You Did\n- scored 100"
    assert fake_feedback[0]["performance"]["timeTaken"] == "2:05"
    client.post(f"{BASE}/feedback/viewed")
    client.post(f"{BASE}/next")

    # coding: partial pass is capped
    coded = client.post(
        f"{BASE}/rounds/coding/submit",
        json={"ai_score": 85, "feedback": "Readable", "complexity": "O(n)", "passed_tests": 2, "total_tests": 3},
    ).json()
    assert coded["session"]["scores"]["2"] == 50
    assert coded["session"]["roundFeedback"] == "Readable\n\nComplexity Analysis: O(n)"
    client.post(f"{BASE}/feedback/viewed")
    client.post(f"{BASE}/next")

    # hr, then completion
    client.post(f"{BASE}/submit", json={"score": 75, "feedback": "Friendly"})
    client.post(f"{BASE}/feedback/viewed")
    done = client.post(f"{BASE}/next").json()
    assert done["phase"] == "completed"
    assert done["current_round"] is None
    assert done["average_score"] == 76
    assert client.post(f"{BASE}/next").status_code == 409
    assert client.post(f"{BASE}/submit", json={"score": 1, "feedback": "x"}).status_code == 409

    report = client.get(f"{BASE}/report.pdf")
    assert report.status_code == 200
    assert report.headers["content-type"] == "application/pdf"
    assert report.content.startswith(b"%PDF")

    scores = _rows("round_scores")
    assert [(r["round_index"], r["round_type"], r["score"]) for r in scores] == [
        (0, "resume", 80),
        (1, "aptitude", 100),
        (2, "coding", 50),
        (3, "hr", 75),
    ]


def test_warnings_terminate_and_reset_recovers(cms):
    client.post(f"{BASE}/start", json={"company_id": "2"})
    first = client.post(f"{BASE}/warning", json={"reason": "tab_switch"}).json()
    assert first["session"]["warnings"] == 1
    assert first["warnings_remaining"] == 2
    client.post(f"{BASE}/warning", json={})
    third = client.post(f"{BASE}/warning", json={}).json()
    assert third["session"]["isTerminated"] is True
    assert third["phase"] == "terminated"
    assert third["warnings_remaining"] == 0

    assert client.post(f"{BASE}/submit", json={"score": 90, "feedback": "x"}).status_code == 409
    assert client.post(f"{BASE}/next").status_code == 409
    assert client.post(f"{BASE}/rounds/aptitude/questions").status_code == 409

    fourth = client.post(f"{BASE}/warning", json={}).json()
    assert fourth["session"]["warnings"] == 4
    assert fourth["session"]["isTerminated"] is True

    warnings = _rows("proctor_warnings")
    assert [r["warning_count"] for r in warnings] == [1, 2, 3, 4]
    assert warnings[0]["reason"] == "tab_switch"
    assert [r["terminated"] for r in warnings] == [0, 0, 1, 1]

    reset = client.post(f"{BASE}/reset").json()
    assert reset["session"] is None
    assert reset["phase"] == "not_started"
    restarted = client.post(f"{BASE}/start", json={"company_id": "2"}).json()
    assert restarted["session"]["warnings"] == 0


def test_resubmission_overwrites_and_sessions_are_per_owner(cms):
    client.post(f"{BASE}/start", json={"company_id": "1"})
    client.post(f"{BASE}/submit", json={"score": 40, "feedback": "first"})
    again = client.post(f"{BASE}/submit", json={"score": 90, "feedback": "second"}).json()
    assert again["session"]["scores"] == {"0": 90}
    assert again["session"]["roundFeedback"] == "second"

    other = client.get("/api/marathon/tab-2").json()
    assert other["session"] is None


def test_next_requires_submitted_and_viewed_round(cms):
    client.post(f"{BASE}/start", json={"company_id": "1"})

    early = client.post(f"{BASE}/next")
    assert early.status_code == 409
    assert early.json()["detail"] == "round not submitted"

    client.post(f"{BASE}/submit", json={"score": 65, "feedback": "ok"})
    unviewed = client.post(f"{BASE}/next")
    assert unviewed.status_code == 409
    assert unviewed.json()["detail"] == "feedback not viewed"

    client.post(f"{BASE}/feedback/viewed")
    advanced = client.post(f"{BASE}/next").json()
    assert advanced["session"]["currentRoundIndex"] == 1
    assert advanced["session"]["scores"] == {"0": 65}


def test_generic_submit_only_for_externally_scored_rounds(cms):
    client.post(f"{BASE}/start", json={"company_id": "2"})
    resp = client.post(f"{BASE}/submit", json={"score": 100, "feedback": "self graded"})
    assert resp.status_code == 409
    assert client.get(BASE).json()["session"]["scores"] == {}


def test_aptitude_grades_only_served_questions(cms):
    client.post(f"{BASE}/start", json={"company_id": "2"})
    assert client.post(f"{BASE}/rounds/aptitude/submit", json={"question_ids": ["d1"]}).status_code == 409

    served = client.post(f"{BASE}/rounds/aptitude/questions").json()["questions"]
    assert len(served) == 10
    first = served[0]["id"]
    bank = {q["id"]: q["answer"] for q in client.get("/api/cms/aptitude-bank").json()}

    unknown = client.post(f"{BASE}/rounds/aptitude/submit", json={"question_ids": [first, "nope"]})
    assert unknown.status_code == 422

    repeated = client.post(
        f"{BASE}/rounds/aptitude/submit",
        json={"question_ids": [first] * 10, "answers": {first: bank[first]}},
    ).json()
    assert repeated["session"]["scores"] == {"0": 10}


def test_running_session_keeps_its_workflow_after_cms_edits(cms):
    client.post(f"{BASE}/start", json={"company_id": "1"})

    assert client.patch("/api/cms/companies/1", json={"workflow": []}).status_code == 200
    view = client.get(BASE).json()
    assert view["workflow_length"] == 4
    assert view["phase"] == "round_active"
    assert view["current_round"]["type"] == "resume"

    assert client.delete("/api/cms/companies/1").status_code == 204
    submitted = client.post(f"{BASE}/submit", json={"score": 70, "feedback": "fine"})
    assert submitted.status_code == 200
    assert submitted.json()["session"]["scores"] == {"0": 70}

    client.post(f"{BASE}/reset")
    assert client.post(f"{BASE}/start", json={"company_id": "1"}).status_code == 404
