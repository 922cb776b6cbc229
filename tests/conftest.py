import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

import app as api_app
from schemas import (
    CandidateEvaluation,
    EvaluationParameter,
    KecExtraction,
    KeyInsight,
    KeyInsights,
    KeyInsightsResult,
    ParameterScore,
)


def make_kec():
    return KecExtraction(
        executive_summary="Hiring a head of engineering.",
        kec_description="Five areas that decide success in the role.",
        kec_items=[
            EvaluationParameter(name="Leadership", requirement_level=80, weight=60, icon="🧭"),
            EvaluationParameter(name="Technical", requirement_level=70, weight=40, icon="🛠"),
        ],
        insight_flags=[{"title": "Scale-up", "emoji": "🚀", "description": "Team doubles this year"}],
    )


SCORES = {
    "Ana": {"Leadership": 90, "Technical": 60},
    "Ben": {"Leadership": 70, "Technical": 95},
}


def make_evaluation(name, parameters, profile_fields=None, language=None):
    scores = SCORES.get(name, {})
    return CandidateEvaluation(
        candidate_name=name,
        overall_assessment=f"{name} is a solid fit.",
        profile_fields={"title": "Engineering Manager"},
        evaluation_scores=[
            ParameterScore(parameter_name=p, score=s, strengths=[f"{p} strength"], limitations=[])
            for p, s in scores.items()
        ],
    )


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace every AI call the API makes with canned results."""
    calls = []

    def extract_kec(job_description, **kwargs):
        calls.append("extract_kec")
        return make_kec()

    def evaluate_candidate(name, info, parameters, profile_fields=None, language=None):
        calls.append("evaluate_candidate")
        return make_evaluation(name, parameters, profile_fields, language)

    def generate_key_insights(evaluations, parameters, language=None):
        calls.append("generate_key_insights")
        return KeyInsightsResult(
            key_insights=KeyInsights(top_performer=KeyInsight(title="Top Performer", candidate="Ben",
                                                              description="Highest weighted score")),
            decision_factors=["Leadership depth vs. technical breadth"],
        )

    def generate_executive_summary(client_name, role_title, evaluations, insights=None, language=None):
        calls.append("generate_executive_summary")
        return "Ben edges ahead on technical depth."

    monkeypatch.setattr(api_app, "extract_kec", extract_kec)
    monkeypatch.setattr(api_app, "evaluate_candidate", evaluate_candidate)
    monkeypatch.setattr(api_app, "generate_key_insights", generate_key_insights)
    monkeypatch.setattr(api_app, "generate_executive_summary", generate_executive_summary)
    return calls


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    with TestClient(api_app.app) as c:
        yield c
