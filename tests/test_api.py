"""
End-to-end API flow with the AI calls replaced by canned results.

Run with: pytest tests/test_api.py -v
"""
import re

import pytest

import app as api_app
from matching.llm_openai import LLMError

JOB = {
    "client_name": "Acme",
    "role_title": "Head of Engineering",
    "job_description": "Lead a 40 person engineering org.",
    "meeting_notes": "Needs to scale the team fast.",
}


def _job_with_candidates(client, names=("Ana", "Ben")):
    job = client.post("/jobs", json=JOB).json()
    client.post(f"/jobs/{job['id']}/analyze", json={"language": "en"})
    for name in names:
        client.post(f"/jobs/{job['id']}/candidates", json={"name": name, "resume": f"{name} resume"})
    return job["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


# -------------------- Jobs --------------------
def test_create_and_fetch_job(client):
    created = client.post("/jobs", json=JOB)
    assert created.status_code == 200
    job = created.json()
    assert job["status"] == "draft"
    assert job["kec_items"] == []

    fetched = client.get(f"/jobs/{job['id']}").json()
    assert fetched["role_title"] == "Head of Engineering"
    assert [j["id"] for j in client.get("/jobs/list").json()] == [job["id"]]


def test_empty_job_description_rejected(client):
    r = client.post("/jobs", json={**JOB, "job_description": "   "})
    assert r.status_code == 400


def test_unknown_ids_404(client):
    assert client.get("/jobs/nope").status_code == 404
    assert client.patch("/candidates/nope", json={"name": "x"}).status_code == 404
    assert client.get("/reports/AP-1-2000").status_code == 404
    assert client.get("/jobs/nope/comparison").status_code == 404


def test_analyze_stores_kec(client, fake_llm):
    job = client.post("/jobs", json=JOB).json()
    analyzed = client.post(f"/jobs/{job['id']}/analyze").json()
    assert [k["name"] for k in analyzed["kec_items"]] == ["Leadership", "Technical"]
    assert analyzed["executive_summary"] == "Hiring a head of engineering."
    assert analyzed["insight_flags"][0]["emoji"] == "🚀"
    assert fake_llm == ["extract_kec"]


def test_patch_job_edits_kec(client, fake_llm):
    job_id = _job_with_candidates(client, names=())
    kec = client.get(f"/jobs/{job_id}").json()["kec_items"]
    kec[0]["requirement_level"] = 95
    kec[0]["weight"] = None

    updated = client.patch(f"/jobs/{job_id}", json={"kec_items": kec, "role_title": "VP Engineering"}).json()
    assert updated["kec_items"][0]["requirement_level"] == 95
    assert updated["kec_items"][0]["weight"] is None
    assert updated["role_title"] == "VP Engineering"
    assert updated["client_name"] == "Acme"


def test_llm_failure_maps_to_502(client, monkeypatch):
    def fail(*args, **kwargs):
        raise LLMError("LLM API error: quota exceeded")

    monkeypatch.setattr(api_app, "extract_kec", fail)
    job = client.post("/jobs", json=JOB).json()
    r = client.post(f"/jobs/{job['id']}/analyze")
    assert r.status_code == 502
    assert "quota exceeded" in r.json()["detail"]


# -------------------- Candidates --------------------
def test_candidates_listed_in_insertion_order(client, fake_llm):
    job_id = _job_with_candidates(client, names=("Zoe", "Ana", "Max"))
    names = [c["name"] for c in client.get(f"/jobs/{job_id}/candidates").json()]
    assert names == ["Zoe", "Ana", "Max"]


def test_patch_candidate(client, fake_llm):
    job_id = _job_with_candidates(client, names=("Ana",))
    cand = client.get(f"/jobs/{job_id}/candidates").json()[0]
    updated = client.patch(f"/candidates/{cand['id']}", json={"profile": {"experience": "12 years"}}).json()
    assert updated["profile"] == {"experience": "12 years"}
    assert updated["resume"] == "Ana resume"


def test_evaluate_requires_kec_and_candidates(client, fake_llm):
    job = client.post("/jobs", json=JOB).json()
    assert client.post(f"/jobs/{job['id']}/evaluate").status_code == 400
    client.post(f"/jobs/{job['id']}/analyze")
    assert client.post(f"/jobs/{job['id']}/evaluate").status_code == 400


def test_evaluate_single_candidate(client, fake_llm):
    job_id = _job_with_candidates(client, names=("Ana",))
    cand = client.get(f"/jobs/{job_id}/candidates").json()[0]
    evaluated = client.post(f"/candidates/{cand['id']}/evaluate").json()
    assert evaluated["status"] == "complete"
    assert evaluated["ai_evaluation"]["evaluation_scores"][0]["score"] == 90


# -------------------- Comparison --------------------
def test_comparison_before_evaluation_is_empty(client, fake_llm):
    job_id = _job_with_candidates(client)
    comparison = client.get(f"/jobs/{job_id}/comparison").json()
    assert comparison["matrix"] == []
    assert comparison["totals"] == []
    assert comparison["winners"] == []


def test_comparison_after_evaluation(client, fake_llm):
    job_id = _job_with_candidates(client)
    client.post(f"/jobs/{job_id}/evaluate", json={"language": "en"})

    comparison = client.get(f"/jobs/{job_id}/comparison").json()
    totals = {t["candidate_name"]: t["display_total"] for t in comparison["totals"]}
    assert totals == {"Ana": pytest.approx(7.8), "Ben": pytest.approx(8.0)}
    assert comparison["winners"] == ["Ben"]
    assert comparison["matrix"][0]["cells"][0]["rank"] == "top"
    assert comparison["gaps"][1][0]["level"] == "minor"
    assert len(comparison["radar"][0]["points"]) == 2


def test_comparison_chart_parameters(client, fake_llm):
    job_id = _job_with_candidates(client)
    client.post(f"/jobs/{job_id}/evaluate")
    comparison = client.get(f"/jobs/{job_id}/comparison",
                            params={"axis_count": 1, "radius": 100, "center_x": 0, "center_y": 0}).json()
    point = comparison["radar"][0]["points"][0]
    assert len(comparison["radar"][0]["points"]) == 1
    assert point["y"] == pytest.approx(-90)
    assert client.get(f"/jobs/{job_id}/comparison", params={"axis_count": 0}).status_code == 422


# -------------------- Reports --------------------
def test_report_flow(client, fake_llm):
    job_id = _job_with_candidates(client)
    client.post(f"/jobs/{job_id}/evaluate")

    created = client.post(f"/jobs/{job_id}/reports", json={"language": "en"})
    assert created.status_code == 200
    report = created.json()
    reference = report["report_reference"]
    assert re.fullmatch(r"AP-\d{1,3}-\d{4}", reference)
    assert report["executive_summary"] == "Ben edges ahead on technical depth."
    assert report["report_data"]["comparison"]["winners"] == ["Ben"]
    assert report["report_data"]["key_insights"]["top_performer"]["candidate"] == "Ben"
    assert fake_llm[-2:] == ["generate_key_insights", "generate_executive_summary"]

    assert client.get(f"/jobs/{job_id}").json()["status"] == "complete"
    assert client.get(f"/reports/{reference}").json()["id"] == report["id"]
    assert [r["report_reference"] for r in client.get("/reports/list").json()] == [reference]

    html = client.get(f"/reports/{reference}/html")
    assert html.headers["content-type"].startswith("text/html")
    assert "Head of Engineering Assessment" in html.text

    pdf = client.get(f"/reports/{reference}/pdf")
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_report_fills_missing_weights(client, fake_llm):
    job_id = _job_with_candidates(client)
    kec = client.get(f"/jobs/{job_id}").json()["kec_items"]
    for item in kec:
        item["weight"] = None
    client.patch(f"/jobs/{job_id}", json={"kec_items": kec})
    client.post(f"/jobs/{job_id}/evaluate")

    client.post(f"/jobs/{job_id}/reports")
    weights = [k["weight"] for k in client.get(f"/jobs/{job_id}").json()["kec_items"]]
    # requirement levels 80 and 70
    assert weights == [20, 15]


def test_report_requires_evaluated_candidates(client, fake_llm):
    job_id = _job_with_candidates(client)
    assert client.post(f"/jobs/{job_id}/reports").status_code == 400


# -------------------- Documents --------------------
def test_document_upload(client):
    r = client.post("/documents/extract", files={"file": ("cv.txt", b"Jane Doe\nEngineer\n", "text/plain")})
    assert r.status_code == 200
    assert r.json() == {"file_name": "cv.txt", "text": "Jane Doe\nEngineer", "characters": 17}


def test_document_upload_unsupported(client):
    r = client.post("/documents/extract", files={"file": ("cv.exe", b"MZ", "application/octet-stream")})
    assert r.status_code == 400


def test_document_upload_too_large(client, monkeypatch):
    monkeypatch.setattr(api_app.config, "MAX_UPLOAD_MB", 0)
    r = client.post("/documents/extract", files={"file": ("cv.txt", b"x", "text/plain")})
    assert r.status_code == 413


def test_report_reference_exhaustion_returns_503(client, fake_llm, monkeypatch):
    draws = []

    def same_number(a, b):
        draws.append((a, b))
        return 7

    monkeypatch.setattr(api_app.random, "randint", same_number)
    job_id = _job_with_candidates(client)
    client.post(f"/jobs/{job_id}/evaluate")
    first = client.post(f"/jobs/{job_id}/reports")
    assert first.json()["report_reference"].startswith("AP-7-")
    assert draws == [(0, 999)]

    second = client.post(f"/jobs/{job_id}/reports")
    assert second.status_code == 503
    assert len(draws) == 1 + api_app.REFERENCE_ATTEMPTS
