from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text

from crewlink.database import Base
from crewlink.database_types import GUID, StringList


class EmployerProfile(Base):
    __tablename__ = "employer_profiles"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    employer_id = Column(GUID, nullable=False, unique=True, index=True)
    
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    
    # Free-text region/address, e.g. "강원도 평창군 대관령면"
    region = Column(String, nullable=True)
    address = Column(String, nullable=True)
    
    # Contact
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String(20), nullable=True)
    contact_person = Column(String, nullable=True)
    
    # Lodging offered for crew, and which facilities it has
    dormitory = Column(Boolean, nullable=False, default=False)
    dormitory_facilities = Column(StringList, nullable=True, default=list)
    
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
