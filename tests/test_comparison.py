from datetime import datetime, timezone

import pytest

from matching.comparison import (
    NEXT_STEPS,
    apply_default_weights,
    assemble_report,
    candidate_profile,
    comparison_for,
    evaluation_scores,
    probe_areas,
    strengths_table,
    suggest_weight,
    to_parameters,
    to_score_sets,
)
from matching.scorer import Rank
from schemas import CandidateEvaluation, CandidateOut, EvaluationParameter, JobOut, ParameterScore

KEC = [
    EvaluationParameter(name="Leadership", requirement_level=80, weight=60),
    EvaluationParameter(name="Technical", requirement_level=70, weight=40),
]


def candidate(name, scores=None, profile=None, **evaluation):
    ev = None
    if scores is not None:
        ev = CandidateEvaluation(
            candidate_name=name,
            evaluation_scores=[ParameterScore(parameter_name=p, score=s) for p, s in scores.items()],
            **evaluation,
        )
    return CandidateOut(id=f"id-{name}", job_id="job", name=name, profile=profile or {}, ai_evaluation=ev)


@pytest.mark.parametrize("level, weight", [
    (95, 25), (90, 25), (89, 22), (85, 22), (80, 20), (75, 18), (74, 15), (0, 15),
])
def test_suggest_weight(level, weight):
    assert suggest_weight(level) == weight


def test_apply_default_weights_only_fills_missing():
    items = [
        EvaluationParameter(name="A", requirement_level=92),
        EvaluationParameter(name="B", requirement_level=50, weight=35),
    ]
    weighted = apply_default_weights(items)
    assert [i.weight for i in weighted] == [25, 35]
    assert items[0].weight is None


def test_to_parameters_keeps_ids_and_levels():
    params = to_parameters(KEC)
    assert [p.name for p in params] == ["Leadership", "Technical"]
    assert params[0].id == KEC[0].id
    assert params[1].requirement_level == 70


def test_first_duplicate_parameter_score_wins():
    ev = CandidateEvaluation(evaluation_scores=[
        ParameterScore(parameter_name="Leadership", score=40),
        ParameterScore(parameter_name="Leadership", score=90),
    ])
    assert evaluation_scores(ev) == {"Leadership": 40}


def test_unevaluated_candidates_are_left_out_of_score_sets():
    sets = to_score_sets([candidate("Ana", {"Leadership": 90}), candidate("Ben")])
    assert [s.candidate_name for s in sets] == ["Ana"]
    assert sets[0].id == "id-Ana"


def test_probe_areas_strengths_and_focus():
    params = to_parameters([
        EvaluationParameter(name="Leadership", requirement_level=80),
        EvaluationParameter(name="Technical", requirement_level=70),
        EvaluationParameter(name="Budget", requirement_level=60),
        EvaluationParameter(name="Hiring", requirement_level=60),
    ])
    score_set = to_score_sets([candidate("Ana", {"Leadership": 85, "Technical": 50, "Budget": 70})])[0]
    probes = probe_areas(params, score_set)
    assert probes.strengths == [
        "Strong leadership capabilities demonstrated through experience",
        "Strong budget capabilities demonstrated through experience",
    ]
    # Hiring has no score and is not probed
    assert [f.area for f in probes.focus_areas] == ["Technical"]


def test_probe_areas_limits():
    names = [f"P{i}" for i in range(6)]
    params = to_parameters([EvaluationParameter(name=n, requirement_level=50) for n in names])
    high = to_score_sets([candidate("Hi", {n: 99 for n in names})])[0]
    low = to_score_sets([candidate("Lo", {n: 10 for n in names})])[0]
    assert len(probe_areas(params, high).strengths) == 2
    assert len(probe_areas(params, low).focus_areas) == 3


def test_strengths_table_marks_missing_entries():
    ana = candidate("Ana", {"Leadership": 90})
    ana.ai_evaluation.evaluation_scores[0].strengths.append("Led 40 engineers")
    rows = strengths_table(KEC, [ana])
    assert rows[0].cells[0].has_data is True
    assert rows[0].cells[0].strengths == ["Led 40 engineers"]
    assert rows[1].cells[0].has_data is False


def test_candidate_profile_prefers_recruiter_values():
    c = candidate(
        "Ana", {"Leadership": 90},
        profile={"title": "VP Engineering", "experience": ""},
        profile_fields={"title": "Engineer", "experience": "12 years"},
        overall_assessment="Strong leader.",
    )
    profile = candidate_profile(c)
    assert profile.fields == {"title": "VP Engineering", "experience": "12 years"}
    assert profile.overall_assessment == "Strong leader."


def test_comparison_for_serializes_engine_output():
    out = comparison_for(KEC, [candidate("A", {"Leadership": 90, "Technical": 60}),
                               candidate("B", {"Leadership": 70, "Technical": 95})])
    assert out.winners == ["B"]
    assert out.matrix[0].cells[0].rank == Rank.TOP
    assert out.model_dump(mode="json")["matrix"][0]["cells"][0]["rank"] == "top"


def test_assemble_report_uses_evaluated_candidates_only():
    job = JobOut(id="job", job_description="JD", role_title="CTO", kec_items=KEC, executive_summary="Job summary")
    generated = datetime(2024, 5, 1, tzinfo=timezone.utc)
    report = assemble_report(
        "AP-7-2024", job,
        [candidate("Ana", {"Leadership": 90}), candidate("Ben")],
        insights=None, executive_summary="", generated_at=generated,
    )
    assert report.reference == "AP-7-2024"
    assert report.generated_at == generated
    assert report.executive_summary == "Job summary"
    assert [c.name for c in report.candidates] == ["Ana"]
    assert [t.candidate_name for t in report.comparison.totals] == ["Ana"]
    assert report.comparison.gaps[1][0].has_data is False
    assert report.next_steps == NEXT_STEPS
    assert report.key_insights.top_performer is None
