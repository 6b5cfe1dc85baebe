"""Application-related Pydantic schemas."""
from datetime import datetime
from typing import Literal, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class InterviewRecord(BaseModel):
    """Employer's note after interviewing a candidate."""
    note: str = ""
    contact_info: Optional[str] = None
    interview_date: Optional[str] = None  # Free text, e.g. "2025-07-01 14:00"


class OfferDetails(BaseModel):
    salary: Optional[str] = None
    start_date: Optional[str] = None
    benefits: Optional[str] = None


class DecisionRequest(BaseModel):
    """Final hiring decision. `reason` is required for both outcomes."""
    decision: Literal["accepted", "rejected"]
    reason: str = ""
    offer_details: Optional[OfferDetails] = None


class ApplicationCreate(BaseModel):
    """A jobseeker's application to a posting."""
    job_post_id: int
    cover_letter: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    skills: list[str] = []
    expected_salary: Optional[int] = Field(None, ge=0)
    message: Optional[str] = None


class ApplicationUpdate(BaseModel):
    """Candidate-authored fields; only set fields are rewritten."""
    cover_letter: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    skills: Optional[list[str]] = None
    expected_salary: Optional[int] = Field(None, ge=0)
    message: Optional[str] = None


class ApplicationResponse(BaseModel):
    """Schema for application response."""
    id: UUID
    job_post_id: int
    jobseeker_id: UUID
    jobseeker_name: str
    employer_id: UUID
    job_title: Optional[str] = None
    status: str
    cover_letter: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    skills: list[str] = []
    expected_salary: Optional[int] = None
    message: Optional[str] = None
    employer_feedback: Optional[str] = None
    employer_feedback_at: Optional[datetime] = None
    interview_contact_info: Optional[str] = None
    interview_date: Optional[str] = None
    offer_details: Optional[dict] = None
    applied_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class StatusSummary(BaseModel):
    total: int = 0
    pending: int = 0
    interview_completed: int = 0
    accepted: int = 0
    rejected: int = 0
    other: int = 0


class ApplicationListResponse(BaseModel):
    items: list[ApplicationResponse]
    summary: StatusSummary


class DecisionResponse(BaseModel):
    application: ApplicationResponse
    notification_sent: bool
