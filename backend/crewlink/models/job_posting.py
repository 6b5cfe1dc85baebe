from datetime import datetime
import enum
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Index

from crewlink.database import Base
from crewlink.database_types import GUID


class PostingStatus(str, enum.Enum):
    """Moderation status of a posting."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class JobPosting(Base):
    __tablename__ = "job_postings"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    
    # Owner
    employer_id = Column(GUID, nullable=False, index=True)
    employer_name = Column(String, nullable=True)
    
    # Job details
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    
    # Salary range
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_unit = Column(String, nullable=True)  # hourly | daily | monthly
    
    # Lifecycle flags (status/is_hidden set by moderation, is_active by the employer)
    status = Column(String, nullable=False, default=PostingStatus.DRAFT.value)
    is_hidden = Column(Boolean, nullable=True, default=False)
    is_active = Column(Boolean, nullable=True, default=True)
    
    # Legacy rows may not carry a creation timestamp
    created_at = Column(DateTime, nullable=True, default=datetime.utcnow)
    
    __table_args__ = (
        Index('idx_job_postings_visibility', 'status', 'is_hidden', 'is_active'),
    )
