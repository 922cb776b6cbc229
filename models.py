import json
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, TypeDecorator
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JSONType(TypeDecorator):
    """JSON stored as text so SQLite and Postgres behave the same."""
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return json.loads(value)


class Job(Base):
    __tablename__ = "jobs"
    id = Column(String(32), primary_key=True, default=_new_id)
    client_name = Column(String, nullable=False, default="")
    role_title = Column(String, nullable=False, default="")
    job_description = Column(Text, nullable=False)
    client_requirements = Column(Text, nullable=True)
    meeting_notes = Column(Text, nullable=True)
    recruiter_notes = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)
    executive_summary = Column(Text, nullable=True)
    kec_description = Column(Text, nullable=True)
    kec_items = Column(JSONType, nullable=True)      # list of EvaluationParameter dicts
    insight_flags = Column(JSONType, nullable=True)
    status = Column(String, nullable=False, default="draft")
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class Candidate(Base):
    __tablename__ = "candidates"
    id = Column(String(32), primary_key=True, default=_new_id)
    job_id = Column(String(32), ForeignKey("jobs.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # wizard slot, insertion order
    name = Column(String, nullable=False)
    resume = Column(Text, nullable=True)
    recruiter_notes = Column(Text, nullable=True)
    meeting_notes = Column(Text, nullable=True)
    additional_info = Column(Text, nullable=True)
    profile = Column(JSONType, nullable=True)        # title, experience, teamSize, ...
    ai_evaluation = Column(JSONType, nullable=True)  # CandidateEvaluation dict
    status = Column(String, nullable=False, default="draft")
    created_at = Column(DateTime, default=_now)


class Report(Base):
    __tablename__ = "reports"
    id = Column(String(32), primary_key=True, default=_new_id)
    job_id = Column(String(32), ForeignKey("jobs.id"), nullable=False, index=True)
    report_reference = Column(String, nullable=False, unique=True, index=True)
    executive_summary = Column(Text, nullable=True)
    report_data = Column(JSONType, nullable=True)    # ReportData snapshot
    status = Column(String, nullable=False, default="draft")
    created_at = Column(DateTime, default=_now)
