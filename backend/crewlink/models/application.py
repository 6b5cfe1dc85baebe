from datetime import datetime
from enum import Enum
from typing import Union
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Index, JSON
import uuid

from crewlink.database import Base
from crewlink.database_types import GUID, StringList


class ApplicationStatus(str, Enum):
    """States of the hiring pipeline driven by the lifecycle manager"""
    PENDING = "pending"
    INTERVIEW_COMPLETED = "interview_completed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class LegacyStatus(str, Enum):
    """
    Statuses found on older records.
    Displayed as-is; never entered or left by the lifecycle manager.
    """
    REVIEWING = "reviewing"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    OFFER_SENT = "offer_sent"
    WITHDRAWN = "withdrawn"


AnyStatus = Union[ApplicationStatus, LegacyStatus]


def parse_status(value: str) -> AnyStatus:
    """Resolve a stored status string to its enum member."""
    try:
        return ApplicationStatus(value)
    except ValueError:
        return LegacyStatus(value)


class Application(Base):
    __tablename__ = "applications"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    job_post_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False, index=True)
    jobseeker_id = Column(GUID, nullable=False, index=True)
    jobseeker_name = Column(String, nullable=False)
    
    # Denormalized from the posting at submission time
    employer_id = Column(GUID, nullable=False, index=True)
    job_title = Column(String, nullable=True)
    
    status = Column(String, nullable=False, default=ApplicationStatus.PENDING.value)
    
    # Candidate-authored fields (editable only while pending)
    cover_letter = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    education = Column(Text, nullable=True)
    skills = Column(StringList, nullable=True, default=list)
    expected_salary = Column(Integer, nullable=True)
    message = Column(Text, nullable=True)
    
    # Employer-authored fields (written on transitions)
    employer_feedback = Column(Text, nullable=True)
    employer_feedback_at = Column(DateTime, nullable=True)
    interview_contact_info = Column(String, nullable=True)
    interview_date = Column(String, nullable=True)
    # Structure: {"salary": "...", "start_date": "...", "benefits": "..."}
    offer_details = Column(JSON, nullable=True)
    
    # Timestamps
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    __table_args__ = (
        Index('idx_applications_employer_status', 'employer_id', 'status'),
    )
    
    def is_visible_to(self, user_id) -> bool:
        """Only the posting's employer and the applicant may see an application."""
        return str(user_id) in (str(self.employer_id), str(self.jobseeker_id))
