"""
State machine for job applications.
ALL status changes made by employers or candidates go through this module.

    pending -> interview_completed -> accepted | rejected

accepted and rejected are terminal. Legacy statuses (reviewing, offer_sent,
...) are accepted as a current status but have no transitions.

These functions only mutate the Application instance they are given and
return what should be persisted or delivered. Loading and saving is done by
crewlink.services.applications.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from crewlink.models.application import (
    Application,
    ApplicationStatus,
    LegacyStatus,
    parse_status,
)
from crewlink.models.notification import Notification, NotificationType
from crewlink.schemas.application import ApplicationUpdate, DecisionRequest, InterviewRecord
from crewlink.services.errors import (
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)

# Configure logger
logger = logging.getLogger(__name__)


# Define allowed state transitions
ALLOWED_TRANSITIONS: Dict[ApplicationStatus, list[ApplicationStatus]] = {
    ApplicationStatus.PENDING: [ApplicationStatus.INTERVIEW_COMPLETED],
    ApplicationStatus.INTERVIEW_COMPLETED: [
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    ],
    ApplicationStatus.ACCEPTED: [],  # Terminal state
    ApplicationStatus.REJECTED: [],  # Terminal state
}

FEEDBACK_TAGS = {
    ApplicationStatus.ACCEPTED: "[hiring]",
    ApplicationStatus.REJECTED: "[rejection]",
}


@dataclass
class DecisionOutcome:
    """Result of a hiring decision: the updated application and the
    candidate notification that still has to be delivered."""
    application: Application
    notification: Notification


def can_transition(from_status, to_status) -> bool:
    """Check if a transition is allowed. Legacy statuses never are."""
    if isinstance(from_status, LegacyStatus) or isinstance(to_status, LegacyStatus):
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def _resolve(value) -> object:
    try:
        return parse_status(value)
    except ValueError:
        return value


def _transition(application: Application, to_status: ApplicationStatus, now: datetime) -> None:
    from_status = application.status
    if not can_transition(_resolve(from_status), to_status):
        raise InvalidTransitionError(
            f"Invalid transition from {from_status} to {to_status.value}"
        )

    application.status = to_status.value
    application.updated_at = now

    logger.info(
        f"Application status transition: {from_status} → {to_status.value}",
        extra={
            "application_id": str(application.id),
            "job_post_id": application.job_post_id,
            "from_status": from_status,
            "to_status": to_status.value,
        },
    )


def record_interview(
    application: Application,
    interview: InterviewRecord,
    now: Optional[datetime] = None,
) -> Application:
    """
    pending → interview_completed.
    Stores the interview note as employer feedback. No notification.
    """
    now = now or datetime.utcnow()
    _transition(application, ApplicationStatus.INTERVIEW_COMPLETED, now)

    application.employer_feedback = interview.note
    application.interview_contact_info = interview.contact_info
    application.interview_date = interview.interview_date
    application.employer_feedback_at = now
    return application


def _decision_notification(
    application: Application,
    decision: ApplicationStatus,
    reason: str,
    now: datetime,
) -> Notification:
    job_title = application.job_title or "the position"
    if decision == ApplicationStatus.ACCEPTED:
        title = "Hiring confirmed"
        message = f"Congratulations! You have been hired for {job_title}. Reason: {reason}"
    else:
        title = "Application not selected"
        message = f"Unfortunately your application for {job_title} was not selected. Reason: {reason}"

    return Notification(
        id=uuid.uuid4(),
        user_id=application.jobseeker_id,
        title=title,
        message=message,
        type=NotificationType.APPLICATION_STATUS.value,
        is_read=False,
        application_id=application.id,
        status=decision.value,
        created_at=now,
    )


def decide(
    application: Application,
    request: DecisionRequest,
    now: Optional[datetime] = None,
) -> DecisionOutcome:
    """
    interview_completed → accepted | rejected.

    Raises:
        InvalidTransitionError: application is not interview_completed
        ValidationError: reason is blank
    """
    now = now or datetime.utcnow()
    try:
        decision = ApplicationStatus(request.decision)
    except ValueError:
        raise InvalidTransitionError(f"Unknown decision {request.decision}")
    if decision not in FEEDBACK_TAGS:
        raise InvalidTransitionError(f"{decision.value} is not a hiring decision")

    current = _resolve(application.status)
    if not can_transition(current, decision):
        raise InvalidTransitionError(
            f"Invalid transition from {application.status} to {decision.value}"
        )

    reason = (request.reason or "").strip()
    if not reason:
        raise ValidationError(f"A reason is required to mark an application {decision.value}")

    _transition(application, decision, now)
    application.employer_feedback = f"{FEEDBACK_TAGS[decision]} {reason}"
    application.employer_feedback_at = now
    if decision == ApplicationStatus.ACCEPTED and request.offer_details is not None:
        application.offer_details = request.offer_details.model_dump(exclude_none=True)
    else:
        application.offer_details = None

    return DecisionOutcome(
        application=application,
        notification=_decision_notification(application, decision, reason, now),
    )


def update_candidate_fields(
    application: Application,
    changes: ApplicationUpdate,
    now: Optional[datetime] = None,
) -> Application:
    """Rewrite candidate-authored fields. Only allowed while pending."""
    if application.status != ApplicationStatus.PENDING.value:
        raise ConflictError(
            f"Application {application.id} is {application.status}; only pending applications can be edited"
        )

    for name, value in changes.model_dump(exclude_unset=True).items():
        setattr(application, name, value)
    application.updated_at = now or datetime.utcnow()
    return application
