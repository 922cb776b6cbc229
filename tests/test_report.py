import io
from datetime import datetime, timezone

from PyPDF2 import PdfReader

from matching.comparison import assemble_report
from report.html_report import MISSING_DATA, render_html
from report.pdf_report import render_pdf
from schemas import (
    CandidateEvaluation,
    CandidateOut,
    EvaluationParameter,
    JobOut,
    KeyInsight,
    KeyInsights,
    KeyInsightsResult,
    ParameterScore,
)


def _candidate(name, scores):
    return CandidateOut(
        id=name, job_id="job", name=name,
        ai_evaluation=CandidateEvaluation(
            candidate_name=name,
            overall_assessment=f"{name} <assessed>",
            evaluation_scores=[ParameterScore(parameter_name=p, score=s) for p, s in scores.items()],
        ),
    )


def _report():
    job = JobOut(
        id="job", job_description="JD", client_name="Acme & Co", role_title="CTO",
        kec_items=[
            EvaluationParameter(name="Leadership", requirement_level=80, weight=60),
            EvaluationParameter(name="Technical", requirement_level=70, weight=40),
        ],
    )
    candidates = [
        _candidate("A", {"Leadership": 90, "Technical": 0}),
        _candidate("B", {"Leadership": 70}),
    ]
    insights = KeyInsightsResult(
        key_insights=KeyInsights(top_performer=KeyInsight(title="Top Performer", candidate="A", description="Best")),
        decision_factors=["Leadership vs. delivery"],
    )
    return assemble_report("AP-12-2024", job, candidates, insights, "Summary text",
                           generated_at=datetime(2024, 3, 1, tzinfo=timezone.utc))


def test_html_distinguishes_missing_from_zero():
    html = render_html(_report())
    # A scored an explicit 0 on Technical, B has no entry
    assert "0.0 <span" in html
    assert '0% <span class="gap-indicator gap-major">-70</span>' in html
    assert MISSING_DATA in html


def test_html_winner_badge_and_ranks():
    html = render_html(_report())
    assert html.count('<span class="winner-badge">1st</span>') == 1
    assert "top-score" in html and "second-score" in html


def test_html_radar_has_one_polygon_per_candidate():
    html = render_html(_report())
    assert html.count("<polygon") == 2
    assert 'data-candidate="A"' in html


def test_html_escapes_text():
    html = render_html(_report())
    assert "Acme &amp; Co" in html
    assert "<assessed>" not in html
    assert "A &lt;assessed&gt;" in html


def test_html_header_and_sections():
    html = render_html(_report())
    assert "Ref: AP-12-2024" in html
    assert "2024-03-01" in html
    assert "Key Insights" in html and "Recommended Next Steps" in html


def test_pdf_bytes():
    pdf = render_pdf(_report())
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_pdf_carries_profiles_strengths_and_insights():
    report = _report()
    report.strengths_table[0].cells[0].strengths.append("Led the platform team")
    reader = PdfReader(io.BytesIO(render_pdf(report)))
    text = "\n".join(page.extract_text() or "" for page in reader.pages)
    for heading in ("Calibration Profiles", "Limitations", "Key Insights", "Gap Analysis"):
        assert heading in text
    assert "Led the platform team" in text
    # B has no Technical entry; A scored an explicit 0
    assert MISSING_DATA in text
    assert "0% (-70, major)" in text
