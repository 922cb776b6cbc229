from __future__ import annotations
import os
import random
import logging
from datetime import datetime
from typing import List, Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI, UploadFile, File, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import config
from models import Base, Candidate, Job, Report
from schemas import (
    AnalyzeRequest, CandidateIn, CandidateOut, CandidateUpdate, ComparisonOut,
    DocumentText, EvaluateRequest, JobIn, JobOut, JobUpdate, ReportCreate,
    ReportData, ReportOut, ReportSummary,
)
from parsers.documents import DocumentExtractionError, UnsupportedDocumentError, extract_text
from matching.comparison import apply_default_weights, assemble_report, comparison_for
from matching.llm_openai import (
    LLMError, evaluate_candidate, extract_kec, generate_executive_summary, generate_key_insights,
)
from matching.scorer import DEFAULT_AXIS_COUNT, DEFAULT_CENTER, DEFAULT_RADIUS
from report.html_report import render_html
from report.pdf_report import render_pdf

logger = logging.getLogger(__name__)

engine = None
Session = sessionmaker(autoflush=False, autocommit=False, future=True, expire_on_commit=False)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Bind the session factory to the configured database and create tables."""
    global engine
    config.configure_logging()

    url = config.database_url()
    if url.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(os.path.abspath(url[len("sqlite:///"):])), exist_ok=True)
    logger.info(f"Database: {url}")
    engine = create_engine(url, future=True)
    Session.configure(bind=engine)
    Base.metadata.create_all(engine)

    yield
    engine.dispose()
    logger.info("Application shutting down.")


app = FastAPI(title="Candidate Assessment API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _get_job(s, job_id: str) -> Job:
    job = s.get(Job, job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found.")
    return job


def _get_candidate(s, candidate_id: str) -> Candidate:
    candidate = s.get(Candidate, candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail=f"Candidate {candidate_id} not found.")
    return candidate


def _get_report(s, reference: str) -> Report:
    report = s.query(Report).filter(Report.report_reference == reference).one_or_none()
    if not report:
        raise HTTPException(status_code=404, detail=f"Report {reference} not found.")
    return report


def _job_candidates(s, job_id: str) -> List[Candidate]:
    return (
        s.query(Candidate)
        .filter(Candidate.job_id == job_id)
        .order_by(Candidate.position, Candidate.created_at)
        .all()
    )


def _apply(row, update, dumpers=None):
    """Copy explicitly-set fields of a pydantic update onto an ORM row."""
    dumpers = dumpers or {}
    for field in update.model_fields_set:
        value = getattr(update, field)
        if field in dumpers and value is not None:
            value = dumpers[field](value)
        setattr(row, field, value)


def _llm_failure(e: LLMError) -> HTTPException:
    logger.error(f"AI service error: {e}")
    return HTTPException(status_code=502, detail=str(e))


def _candidate_info(c: Candidate) -> str:
    """Everything we know about a candidate, as one block of text for the model."""
    parts = [f"RESUME:\n{c.resume or ''}"]
    if c.recruiter_notes:
        parts.append(f"RECRUITER NOTES:\n{c.recruiter_notes}")
    if c.meeting_notes:
        parts.append(f"MEETING NOTES:\n{c.meeting_notes}")
    if c.additional_info:
        parts.append(f"ADDITIONAL INFO:\n{c.additional_info}")
    if c.profile:
        parts.append("PROFILE:\n" + "\n".join(f"{k}: {v}" for k, v in c.profile.items() if v))
    return "\n\n".join(parts)


REFERENCE_ATTEMPTS = 50


def _new_reference(s) -> str:
    year = datetime.now().year
    for _ in range(REFERENCE_ATTEMPTS):
        reference = f"AP-{random.randint(0, 999)}-{year}"
        if not s.query(Report).filter(Report.report_reference == reference).first():
            return reference
    logger.error(f"No free report reference after {REFERENCE_ATTEMPTS} attempts for {year}")
    raise HTTPException(status_code=503, detail="Could not allocate a report reference. Try again later.")


def _dump_list(items):
    return [i.model_dump() for i in items]


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------
@app.get("/")
def root():
    return {"status": "ok", "service": "Candidate Assessment API"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.post("/documents/extract", response_model=DocumentText)
async def extract_document(file: UploadFile = File(...)):
    """Convert an uploaded resume / notes file to plain text."""
    data = await file.read()
    if len(data) > config.MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File exceeds {config.MAX_UPLOAD_MB} MB limit.")
    try:
        text = extract_text(file.filename, data)
    except UnsupportedDocumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DocumentExtractionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return DocumentText(file_name=file.filename, text=text, characters=len(text))


# --- Jobs ---
@app.post("/jobs", response_model=JobOut)
def create_job(job: JobIn):
    if not job.job_description or not job.job_description.strip():
        raise HTTPException(status_code=400, detail="job_description cannot be empty.")

    with Session() as s:
        j = Job(**job.model_dump(), status="draft")
        s.add(j)
        s.commit()
        s.refresh(j)
        logger.info(f"Created job {j.id} ({j.role_title})")
        return JobOut.model_validate(j)


@app.get("/jobs/list", response_model=List[JobOut])
def list_jobs():
    with Session() as s:
        jobs = s.query(Job).order_by(Job.created_at.desc()).all()
        return [JobOut.model_validate(j) for j in jobs]


@app.get("/jobs/{job_id}", response_model=JobOut)
def get_job(job_id: str):
    with Session() as s:
        return JobOut.model_validate(_get_job(s, job_id))


@app.patch("/jobs/{job_id}", response_model=JobOut)
def update_job(job_id: str, update: JobUpdate):
    with Session() as s:
        j = _get_job(s, job_id)
        _apply(j, update, {"kec_items": _dump_list, "insight_flags": _dump_list})
        s.commit()
        s.refresh(j)
        return JobOut.model_validate(j)


@app.post("/jobs/{job_id}/analyze", response_model=JobOut)
def analyze_job(job_id: str, request: Optional[AnalyzeRequest] = None):
    """Generate the executive summary, KEC items and insight flags for a job."""
    language = request.language if request else None
    with Session() as s:
        j = _get_job(s, job_id)
        try:
            result = extract_kec(
                j.job_description,
                client_requirements=j.client_requirements or "",
                meeting_notes=j.meeting_notes or "",
                recruiter_notes=j.recruiter_notes or "",
                additional_notes=j.additional_notes or "",
                language=language,
            )
        except LLMError as e:
            raise _llm_failure(e)

        j.executive_summary = result.executive_summary
        j.kec_description = result.kec_description
        j.kec_items = _dump_list(result.kec_items)
        j.insight_flags = _dump_list(result.insight_flags)
        s.commit()
        s.refresh(j)
        logger.info(f"Job {job_id}: extracted {len(result.kec_items)} evaluation parameters")
        return JobOut.model_validate(j)


# --- Candidates ---
@app.post("/jobs/{job_id}/candidates", response_model=CandidateOut)
def add_candidate(job_id: str, candidate: CandidateIn):
    if not candidate.name.strip():
        raise HTTPException(status_code=400, detail="Candidate name cannot be empty.")

    with Session() as s:
        _get_job(s, job_id)
        position = s.query(Candidate).filter(Candidate.job_id == job_id).count()
        c = Candidate(job_id=job_id, position=position, status="draft", **candidate.model_dump())
        s.add(c)
        s.commit()
        s.refresh(c)
        return CandidateOut.model_validate(c)


@app.get("/jobs/{job_id}/candidates", response_model=List[CandidateOut])
def list_candidates(job_id: str):
    with Session() as s:
        _get_job(s, job_id)
        return [CandidateOut.model_validate(c) for c in _job_candidates(s, job_id)]


@app.patch("/candidates/{candidate_id}", response_model=CandidateOut)
def update_candidate(candidate_id: str, update: CandidateUpdate):
    with Session() as s:
        c = _get_candidate(s, candidate_id)
        _apply(c, update, {"ai_evaluation": lambda ev: ev.model_dump()})
        s.commit()
        s.refresh(c)
        return CandidateOut.model_validate(c)


def _evaluate(s, c: Candidate, job: JobOut, request: EvaluateRequest) -> CandidateOut:
    try:
        evaluation = evaluate_candidate(
            c.name,
            _candidate_info(c),
            job.kec_items,
            profile_fields=request.profile_fields,
            language=request.language,
        )
    except LLMError as e:
        raise _llm_failure(e)
    c.ai_evaluation = evaluation.model_dump()
    c.status = "complete"
    s.commit()
    s.refresh(c)
    logger.info(f"Evaluated candidate {c.id} ({c.name}) on {len(evaluation.evaluation_scores)} parameters")
    return CandidateOut.model_validate(c)


def _job_with_kec(s, job_id: str) -> JobOut:
    job = JobOut.model_validate(_get_job(s, job_id))
    if not job.kec_items:
        raise HTTPException(status_code=400, detail="Job has no evaluation parameters yet. Run /analyze first.")
    return job


@app.post("/candidates/{candidate_id}/evaluate", response_model=CandidateOut)
def evaluate_one(candidate_id: str, request: Optional[EvaluateRequest] = None):
    request = request or EvaluateRequest()
    with Session() as s:
        c = _get_candidate(s, candidate_id)
        job = _job_with_kec(s, c.job_id)
        return _evaluate(s, c, job, request)


@app.post("/jobs/{job_id}/evaluate", response_model=List[CandidateOut])
def evaluate_all(job_id: str, request: Optional[EvaluateRequest] = None):
    request = request or EvaluateRequest()
    with Session() as s:
        job = _job_with_kec(s, job_id)
        candidates = _job_candidates(s, job_id)
        if not candidates:
            raise HTTPException(status_code=400, detail="Job has no candidates.")
        return [_evaluate(s, c, job, request) for c in candidates]


# --- Scoring ---
@app.get("/jobs/{job_id}/comparison", response_model=ComparisonOut)
def job_comparison(
    job_id: str,
    axis_count: int = Query(DEFAULT_AXIS_COUNT, ge=1, le=20),
    radius: float = Query(DEFAULT_RADIUS, gt=0),
    center_x: float = Query(DEFAULT_CENTER),
    center_y: float = Query(DEFAULT_CENTER),
    scale: float = Query(1.0, gt=0),
):
    """Weighted matrix, totals, gaps and radar points for the job's evaluated candidates."""
    with Session() as s:
        job = JobOut.model_validate(_get_job(s, job_id))
        candidates = [CandidateOut.model_validate(c) for c in _job_candidates(s, job_id)]
    return comparison_for(
        job.kec_items, candidates,
        axis_count=axis_count, radius=radius, center_x=center_x, center_y=center_y, scale=scale,
    )


# --- Reports ---
@app.post("/jobs/{job_id}/reports", response_model=ReportOut)
def create_report(job_id: str, request: Optional[ReportCreate] = None):
    """Finalize weights, ask the model for insights and a summary, store a shareable snapshot."""
    language = request.language if request else None
    with Session() as s:
        j = _get_job(s, job_id)
        job = _job_with_kec(s, job_id)
        candidates = [CandidateOut.model_validate(c) for c in _job_candidates(s, job_id)]
        evaluated = [c for c in candidates if c.ai_evaluation is not None]
        if not evaluated:
            raise HTTPException(status_code=400, detail="No evaluated candidates for this job.")

        kec_items = apply_default_weights(job.kec_items)
        j.kec_items = _dump_list(kec_items)
        job = job.model_copy(update={"kec_items": kec_items})

        evaluations = [c.ai_evaluation for c in evaluated]
        try:
            insights = generate_key_insights(evaluations, kec_items, language=language)
            summary = generate_executive_summary(
                job.client_name, job.role_title, evaluations, insights, language=language,
            )
        except LLMError as e:
            raise _llm_failure(e)

        reference = _new_reference(s)
        data = assemble_report(reference, job, evaluated, insights, summary)
        r = Report(
            job_id=job_id,
            report_reference=reference,
            executive_summary=summary,
            report_data=data.model_dump(mode="json"),
            status="complete",
        )
        j.status = "complete"
        s.add(r)
        s.commit()
        s.refresh(r)
        logger.info(f"Created report {reference} for job {job_id}")
        return ReportOut.model_validate(r)


@app.get("/reports/list", response_model=List[ReportSummary])
def list_reports():
    with Session() as s:
        reports = s.query(Report).order_by(Report.created_at.desc()).all()
        return [ReportSummary.model_validate(r) for r in reports]


@app.get("/reports/{reference}", response_model=ReportOut)
def get_report(reference: str):
    with Session() as s:
        return ReportOut.model_validate(_get_report(s, reference))


def _report_data(reference: str) -> ReportData:
    with Session() as s:
        r = _get_report(s, reference)
        if not r.report_data:
            raise HTTPException(status_code=404, detail=f"Report {reference} has no content.")
        return ReportData.model_validate(r.report_data)


@app.get("/reports/{reference}/html", response_class=HTMLResponse)
def report_html(reference: str):
    return HTMLResponse(render_html(_report_data(reference)))


@app.get("/reports/{reference}/pdf")
def report_pdf(reference: str):
    pdf = render_pdf(_report_data(reference))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{reference}.pdf"'},
    )
