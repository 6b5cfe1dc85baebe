from datetime import datetime
import enum
from sqlalchemy import Column, String, Boolean, DateTime, Text
import uuid

from crewlink.database import Base
from crewlink.database_types import GUID


class NotificationType(str, enum.Enum):
    APPLICATION = "application"
    MESSAGE = "message"
    REVIEW = "review"
    SYSTEM = "system"
    APPLICATION_STATUS = "application_status"


class Notification(Base):
    __tablename__ = "notifications"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, nullable=False, index=True)  # Recipient
    
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False, default=NotificationType.SYSTEM.value)
    is_read = Column(Boolean, nullable=False, default=False)
    
    # Set for application-related notifications
    application_id = Column(GUID, nullable=True, index=True)
    status = Column(String, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
