"""Database models"""
from crewlink.models.user import User, UserRole
from crewlink.models.job_posting import JobPosting, PostingStatus
from crewlink.models.employer_profile import EmployerProfile
from crewlink.models.lodging_profile import LodgingProfile
from crewlink.models.review import ReviewRecord
from crewlink.models.application import (
    Application,
    ApplicationStatus,
    LegacyStatus,
    parse_status,
)
from crewlink.models.notification import Notification, NotificationType

__all__ = [
    "User",
    "UserRole",
    "JobPosting",
    "PostingStatus",
    "EmployerProfile",
    "LodgingProfile",
    "ReviewRecord",
    "Application",
    "ApplicationStatus",
    "LegacyStatus",
    "parse_status",
    "Notification",
    "NotificationType",
]
