from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON

from crewlink.database import Base
from crewlink.database_types import GUID, StringList


class LodgingProfile(Base):
    """
    Worker housing record. Optional, at most one per employer.
    
    Existence of a row means lodging is provided, regardless of the
    employer profile's dormitory flag.
    """
    __tablename__ = "lodging_profiles"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    employer_id = Column(GUID, nullable=False, unique=True, index=True)
    
    name = Column(String, nullable=True)
    images = Column(StringList, nullable=True, default=list)
    capacity = Column(Integer, nullable=True)
    
    # Structure: [{"type": "single", "price": 300000}, ...]
    room_types = Column(JSON, nullable=True, default=list)
    payment_type = Column(String, nullable=True)  # free | paid
    
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
