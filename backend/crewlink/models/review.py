from datetime import datetime
from sqlalchemy import Column, Integer, Text, DateTime
import uuid

from crewlink.database import Base
from crewlink.database_types import GUID


class ReviewRecord(Base):
    """Append-only review of an employer. Ratings are optional (1-5)."""
    __tablename__ = "reviews"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    employer_id = Column(GUID, nullable=False, index=True)
    reviewer_id = Column(GUID, nullable=True)
    
    rating = Column(Integer, nullable=True)
    accommodation_rating = Column(Integer, nullable=True)
    content = Column(Text, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
