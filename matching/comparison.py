"""
Glue between stored records and the scoring engine.

Records carry stable ids; the engine joins on parameter names. Everything
that turns jobs/candidates into engine inputs, or engine output into a
report snapshot, lives here.
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from schemas import (
    CandidateEvaluation,
    CandidateOut,
    CandidateProbes,
    CandidateProfileOut,
    ComparisonOut,
    EvaluationParameter,
    JobOut,
    KeyInsightsResult,
    ProbeArea,
    ReportData,
    StrengthsCell,
    StrengthsRow,
)
from .scorer import (
    CandidateScoreSet,
    Parameter,
    build_comparison,
    has_score,
    requirement_for,
    score_for,
)

STRENGTH_MARGIN = 5
MAX_STRENGTHS = 2
MAX_FOCUS_AREAS = 3

NEXT_STEPS = [
    "Schedule final interviews with shortlisted candidates",
    "Prepare focused technical and leadership questions based on identified gaps",
    "Arrange for candidates to meet key stakeholders",
    "Develop onboarding plan for the selected candidate",
    "Prepare competitive compensation package",
]


def to_parameters(kec_items: Iterable[EvaluationParameter]) -> List[Parameter]:
    return [
        Parameter(
            name=item.name,
            weight=item.weight,
            requirement_level=item.requirement_level,
            id=item.id,
        )
        for item in kec_items
    ]


def evaluation_scores(evaluation: CandidateEvaluation) -> Dict[str, float]:
    # first entry wins when the model repeats a parameter name
    scores = {}
    for s in evaluation.evaluation_scores:
        scores.setdefault(s.parameter_name, s.score)
    return scores


def to_score_sets(candidates: Iterable[CandidateOut]) -> List[CandidateScoreSet]:
    """Evaluated candidates only; unevaluated ones are not charted."""
    return [
        CandidateScoreSet(
            candidate_name=c.name,
            scores=evaluation_scores(c.ai_evaluation),
            id=c.id,
        )
        for c in candidates
        if c.ai_evaluation is not None
    ]


def suggest_weight(requirement_level: float) -> int:
    if requirement_level >= 90:
        return 25
    if requirement_level >= 85:
        return 22
    if requirement_level >= 80:
        return 20
    if requirement_level >= 75:
        return 18
    return 15


def apply_default_weights(kec_items: Sequence[EvaluationParameter]) -> List[EvaluationParameter]:
    """Fill in a weight from the requirement level wherever none was set."""
    return [
        item if item.weight else item.model_copy(update={"weight": suggest_weight(item.requirement_level)})
        for item in kec_items
    ]


def probe_areas(parameters: Sequence[Parameter], score_set: CandidateScoreSet) -> CandidateProbes:
    strengths, focus = [], []
    for p in parameters:
        if not has_score(score_set, p.name):
            continue
        score = score_for(score_set, p.name)
        requirement = requirement_for(p)
        if score >= requirement + STRENGTH_MARGIN and len(strengths) < MAX_STRENGTHS:
            strengths.append(f"Strong {p.name.lower()} capabilities demonstrated through experience")
        if score < requirement and len(focus) < MAX_FOCUS_AREAS:
            focus.append(ProbeArea(
                area=p.name,
                question=f"How have you addressed challenges in {p.name.lower()} in previous roles?",
            ))
    return CandidateProbes(candidate_name=score_set.candidate_name, strengths=strengths, focus_areas=focus)


def strengths_table(kec_items: Sequence[EvaluationParameter],
                    candidates: Sequence[CandidateOut]) -> List[StrengthsRow]:
    rows = []
    for item in kec_items:
        cells = []
        for c in candidates:
            entry = None
            if c.ai_evaluation is not None:
                entry = next(
                    (s for s in c.ai_evaluation.evaluation_scores if s.parameter_name == item.name),
                    None,
                )
            cells.append(StrengthsCell(
                candidate_name=c.name,
                has_data=entry is not None,
                strengths=entry.strengths if entry else [],
                limitations=entry.limitations if entry else [],
            ))
        rows.append(StrengthsRow(parameter_name=item.name, cells=cells))
    return rows


def candidate_profile(candidate: CandidateOut) -> CandidateProfileOut:
    fields = dict(candidate.profile)
    assessment = ""
    if candidate.ai_evaluation is not None:
        # values typed in by the recruiter take precedence over extracted ones
        for key, value in candidate.ai_evaluation.profile_fields.items():
            if not fields.get(key):
                fields[key] = value
        assessment = candidate.ai_evaluation.overall_assessment
    return CandidateProfileOut(name=candidate.name, overall_assessment=assessment, fields=fields)


def comparison_for(kec_items: Sequence[EvaluationParameter],
                   candidates: Sequence[CandidateOut],
                   **chart) -> ComparisonOut:
    """Run the scoring engine over stored records. ``chart`` goes to the radar projection."""
    comparison = build_comparison(to_parameters(kec_items), to_score_sets(candidates), **chart)
    return ComparisonOut.model_validate(comparison)


def assemble_report(reference: str,
                    job: JobOut,
                    candidates: Sequence[CandidateOut],
                    insights: Optional[KeyInsightsResult],
                    executive_summary: str,
                    generated_at: datetime = None) -> ReportData:
    evaluated = [c for c in candidates if c.ai_evaluation is not None]
    parameters = to_parameters(job.kec_items)
    insights = insights or KeyInsightsResult()

    return ReportData(
        reference=reference,
        generated_at=generated_at or datetime.now(timezone.utc),
        client_name=job.client_name,
        role_title=job.role_title,
        executive_summary=executive_summary or job.executive_summary or "",
        kec_description=job.kec_description or "",
        kec_items=job.kec_items,
        candidates=[candidate_profile(c) for c in evaluated],
        comparison=comparison_for(job.kec_items, evaluated),
        strengths_table=strengths_table(job.kec_items, evaluated),
        probes=[probe_areas(parameters, s) for s in to_score_sets(evaluated)],
        key_insights=insights.key_insights,
        decision_factors=insights.decision_factors,
        next_steps=list(NEXT_STEPS),
    )
