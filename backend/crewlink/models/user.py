from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
import uuid
import enum

from crewlink.database import Base
from crewlink.database_types import GUID


class UserRole(str, enum.Enum):
    """Which side of the marketplace an account acts for."""
    JOBSEEKER = "jobseeker"  # Crew member applying to postings
    EMPLOYER = "employer"  # Resort publishing postings and deciding applications
    ADMIN = "admin"  # Moderation only


class User(Base):
    __tablename__ = "users"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    
    role = Column(
        SQLEnum(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.JOBSEEKER,
        index=True
    )
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    def is_employer(self) -> bool:
        return self.role == UserRole.EMPLOYER
