import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from matching.scorer import GapLevel, Rank

Status = Literal["draft", "complete", "archived"]


def _new_id() -> str:
    return uuid.uuid4().hex


# -------------------------------------------------------------------
# LLM payloads (camelCase on the wire, snake_case in Python)
# -------------------------------------------------------------------
class LLMModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AssessmentQuestion(LLMModel):
    question: str
    rationale: str = ""
    ideal_answer: str = Field("", alias="idealAnswer")


class EvaluationParameter(LLMModel):
    """One Key Evaluation Criterion (KEC). ``name`` joins it to candidate scores."""
    id: str = Field(default_factory=_new_id)
    name: str
    description: str = ""
    icon: str = ""
    requirement_level: float = Field(0, alias="requirementLevel")
    weight: Optional[float] = None
    requirement_justification: str = Field("", alias="requirementJustification")
    assessment_questions: List[AssessmentQuestion] = Field([], alias="assessmentQuestions")

    @field_validator("requirement_level", mode="before")
    @classmethod
    def _requirement_default(cls, v):
        return 0 if v is None else v


class InsightFlag(LLMModel):
    title: str = ""
    emoji: str = ""
    description: str = ""
    type: Literal["insight", "coreNeed"] = "insight"


class KecExtraction(LLMModel):
    executive_summary: str = Field("", alias="executiveSummary")
    kec_description: str = Field("", alias="kecDescription")
    kec_items: List[EvaluationParameter] = Field(..., alias="kecItems")
    insight_flags: List[InsightFlag] = Field([], alias="insightFlags")


class QuestionAssessment(LLMModel):
    question: str = ""
    answer: str = ""
    evidence: str = ""


class ParameterScore(LLMModel):
    parameter_name: str = Field(..., alias="parameterName")
    score: float
    justification: str = ""
    strengths: List[str] = []
    limitations: List[str] = []
    assessment: List[QuestionAssessment] = []

    @field_validator("score")
    @classmethod
    def _clamp(cls, v):
        return max(0.0, min(100.0, v))


class CandidateEvaluation(LLMModel):
    candidate_name: str = Field("", alias="candidateName")
    overall_assessment: str = Field("", alias="overallAssessment")
    profile_fields: Dict[str, Any] = Field({}, alias="profileFields")
    evaluation_scores: List[ParameterScore] = Field([], alias="evaluationScores")


class KeyInsight(LLMModel):
    title: str = ""
    candidate: str = ""
    description: str = ""


class KeyInsights(LLMModel):
    top_performer: Optional[KeyInsight] = Field(None, alias="topPerformer")
    technical_edge: Optional[KeyInsight] = Field(None, alias="technicalEdge")
    fastest_onboarding: Optional[KeyInsight] = Field(None, alias="fastestOnboarding")


class KeyInsightsResult(LLMModel):
    key_insights: KeyInsights = Field(default_factory=KeyInsights, alias="keyInsights")
    decision_factors: List[str] = Field([], alias="decisionFactors")


class ProfileFieldsSelection(BaseModel):
    stats: List[str] = ["experience", "teamSize", "budgetManaged", "noticePeriod"]
    text: List[str] = ["title", "education"]


# -------------------------------------------------------------------
# Jobs
# -------------------------------------------------------------------
class JobIn(BaseModel):
    client_name: str = ""
    role_title: str = ""
    job_description: str
    client_requirements: Optional[str] = None
    meeting_notes: Optional[str] = None
    recruiter_notes: Optional[str] = None
    additional_notes: Optional[str] = None


class JobUpdate(BaseModel):
    client_name: Optional[str] = None
    role_title: Optional[str] = None
    job_description: Optional[str] = None
    client_requirements: Optional[str] = None
    meeting_notes: Optional[str] = None
    recruiter_notes: Optional[str] = None
    additional_notes: Optional[str] = None
    executive_summary: Optional[str] = None
    kec_description: Optional[str] = None
    kec_items: Optional[List[EvaluationParameter]] = None
    insight_flags: Optional[List[InsightFlag]] = None
    status: Optional[Status] = None


class JobOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_name: str = ""
    role_title: str = ""
    job_description: str
    client_requirements: Optional[str] = None
    meeting_notes: Optional[str] = None
    recruiter_notes: Optional[str] = None
    additional_notes: Optional[str] = None
    executive_summary: Optional[str] = None
    kec_description: Optional[str] = None
    kec_items: List[EvaluationParameter] = []
    insight_flags: List[InsightFlag] = []
    status: str = "draft"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("kec_items", "insight_flags", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return v or []


class AnalyzeRequest(BaseModel):
    language: Optional[str] = None


# -------------------------------------------------------------------
# Candidates
# -------------------------------------------------------------------
class CandidateIn(BaseModel):
    name: str
    resume: str = ""
    recruiter_notes: Optional[str] = None
    meeting_notes: Optional[str] = None
    additional_info: Optional[str] = None
    profile: Dict[str, Any] = {}


class CandidateUpdate(BaseModel):
    name: Optional[str] = None
    resume: Optional[str] = None
    recruiter_notes: Optional[str] = None
    meeting_notes: Optional[str] = None
    additional_info: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None
    ai_evaluation: Optional[CandidateEvaluation] = None
    status: Optional[Status] = None


class CandidateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    name: str
    resume: Optional[str] = None
    recruiter_notes: Optional[str] = None
    meeting_notes: Optional[str] = None
    additional_info: Optional[str] = None
    profile: Dict[str, Any] = {}
    ai_evaluation: Optional[CandidateEvaluation] = None
    status: str = "draft"
    created_at: Optional[datetime] = None

    @field_validator("profile", mode="before")
    @classmethod
    def _none_to_dict(cls, v):
        return v or {}


class EvaluateRequest(BaseModel):
    language: Optional[str] = None
    profile_fields: ProfileFieldsSelection = ProfileFieldsSelection()


class DocumentText(BaseModel):
    file_name: str
    text: str
    characters: int


# -------------------------------------------------------------------
# Scoring engine output
# -------------------------------------------------------------------
class EngineModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class WeightedCellOut(EngineModel):
    candidate_name: str
    parameter_name: str
    score: float
    raw_score: float
    weighted_contribution: float
    rank: Rank
    has_data: bool


class MatrixRowOut(EngineModel):
    parameter_name: str
    weight: float
    cells: List[WeightedCellOut]


class CandidateTotalOut(EngineModel):
    candidate_name: str
    total: float
    display_total: float
    is_winner: bool


class GapCellOut(EngineModel):
    candidate_name: str
    parameter_name: str
    score: float
    requirement_level: float
    difference: float
    level: GapLevel
    has_data: bool


class RadarPointOut(EngineModel):
    axis_index: int
    parameter_name: str
    angle: float
    normalized: float
    x: float
    y: float


class RadarPolygonOut(EngineModel):
    candidate_name: str
    points: List[RadarPointOut]


class RadarAxisOut(EngineModel):
    axis_index: int
    parameter_name: str
    angle: float
    x: float
    y: float
    label_x: float
    label_y: float


class ComparisonOut(EngineModel):
    matrix: List[MatrixRowOut]
    totals: List[CandidateTotalOut]
    winners: List[str]
    gaps: List[List[GapCellOut]]
    radar: List[RadarPolygonOut]
    axes: List[RadarAxisOut]


# -------------------------------------------------------------------
# Reports
# -------------------------------------------------------------------
class ProbeArea(BaseModel):
    area: str
    question: str


class CandidateProbes(BaseModel):
    candidate_name: str
    strengths: List[str] = []
    focus_areas: List[ProbeArea] = []


class StrengthsCell(BaseModel):
    candidate_name: str
    has_data: bool
    strengths: List[str] = []
    limitations: List[str] = []


class StrengthsRow(BaseModel):
    parameter_name: str
    cells: List[StrengthsCell]


class CandidateProfileOut(BaseModel):
    name: str
    overall_assessment: str = ""
    fields: Dict[str, Any] = {}


class ReportData(BaseModel):
    reference: str
    generated_at: datetime
    client_name: str = ""
    role_title: str = ""
    executive_summary: str = ""
    kec_description: str = ""
    kec_items: List[EvaluationParameter] = []
    candidates: List[CandidateProfileOut] = []
    comparison: ComparisonOut
    strengths_table: List[StrengthsRow] = []
    probes: List[CandidateProbes] = []
    key_insights: KeyInsights = KeyInsights()
    decision_factors: List[str] = []
    next_steps: List[str] = []


class ReportCreate(BaseModel):
    language: Optional[str] = None


class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    report_reference: str
    executive_summary: Optional[str] = None
    report_data: Optional[ReportData] = None
    status: str = "draft"
    created_at: Optional[datetime] = None


class ReportSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    report_reference: str
    status: str = "draft"
    created_at: Optional[datetime] = None
