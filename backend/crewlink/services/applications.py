"""
Application lifecycle manager.
Creates pending applications against listed postings; afterwards loads an
application, runs the state machine on it, saves the result and hands any
resulting notification to the dispatcher.

Writes are single-record and last-write-wins; there is no locking.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from crewlink.models.application import Application, ApplicationStatus
from crewlink.models.user import User
from crewlink.schemas.application import (
    ApplicationCreate,
    ApplicationUpdate,
    DecisionRequest,
    InterviewRecord,
    StatusSummary,
)
from crewlink.services import state_machine
from crewlink.services.errors import NotFoundError
from crewlink.services.listing import is_visible
from crewlink.services.notifications import NotificationDispatcher
from crewlink.services.state_machine import DecisionOutcome
from crewlink.services.stores import ApplicationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApplicationFilter:
    """Dashboard filters, ANDed. None / empty means no constraint."""
    status: Optional[str] = None
    job_post_id: Optional[int] = None
    search_term: str = ""


def filter_applications(
    applications: Iterable[Application],
    filters: ApplicationFilter,
) -> list[Application]:
    term = filters.search_term.strip().lower()
    matched = []
    for application in applications:
        if filters.status and application.status != filters.status:
            continue
        if filters.job_post_id is not None and application.job_post_id != filters.job_post_id:
            continue
        if term and not (
            term in (application.jobseeker_name or "").lower()
            or term in (application.job_title or "").lower()
        ):
            continue
        matched.append(application)
    return matched


def summarize_statuses(applications: Iterable[Application]) -> StatusSummary:
    """Per-status counts for the dashboard. Legacy statuses count as other."""
    summary = StatusSummary()
    pipeline = {status.value for status in ApplicationStatus}
    for application in applications:
        summary.total += 1
        if application.status in pipeline:
            setattr(summary, application.status, getattr(summary, application.status) + 1)
        else:
            summary.other += 1
    return summary


class ApplicationLifecycleManager:
    """Employer- and candidate-side operations on a single application."""

    def __init__(self, store: ApplicationStore, dispatcher: NotificationDispatcher):
        self.store = store
        self.dispatcher = dispatcher

    async def submit_application(self, jobseeker: User, submission: ApplicationCreate) -> Application:
        """
        Apply to a visible posting. The new application starts pending and
        keeps the posting's employer and title as they were at submission.
        """
        posting = await self.store.get_posting(submission.job_post_id)
        if not is_visible(posting):
            raise NotFoundError(f"Job posting {submission.job_post_id} not found")

        now = datetime.utcnow()
        application = Application(
            id=uuid.uuid4(),
            job_post_id=posting.id,
            jobseeker_id=jobseeker.id,
            jobseeker_name=jobseeker.full_name or jobseeker.email,
            employer_id=posting.employer_id,
            job_title=posting.title,
            status=ApplicationStatus.PENDING.value,
            applied_at=now,
            updated_at=now,
            **submission.model_dump(exclude={"job_post_id"}, exclude_unset=True),
        )
        application = await self.store.save_application(application)
        logger.info(
            f"Application {application.id} submitted to posting {posting.id}",
            extra={"application_id": str(application.id), "job_post_id": posting.id},
        )
        return application

    async def get_visible(self, application_id: UUID, user_id: UUID) -> Application:
        """
        Fetch an application the user may see.
        Anyone but the posting's employer and the applicant gets NotFoundError.
        """
        application = await self.store.get_application(application_id)
        if not application.is_visible_to(user_id):
            raise NotFoundError(f"Application {application_id} not found")
        return application

    async def _get_as_employer(self, application_id: UUID, employer_id: UUID) -> Application:
        application = await self.store.get_application(application_id)
        if str(application.employer_id) != str(employer_id):
            raise NotFoundError(f"Application {application_id} not found")
        return application

    async def record_interview(
        self,
        application_id: UUID,
        employer_id: UUID,
        interview: InterviewRecord,
    ) -> Application:
        application = await self._get_as_employer(application_id, employer_id)
        state_machine.record_interview(application, interview)
        return await self.store.save_application(application)

    async def decide(
        self,
        application_id: UUID,
        employer_id: UUID,
        request: DecisionRequest,
    ) -> tuple[DecisionOutcome, bool]:
        """
        Apply a hiring decision, then deliver the candidate notification.

        Returns the outcome and whether the notification was delivered. The
        decision stays saved even if delivery fails.
        """
        application = await self._get_as_employer(application_id, employer_id)
        outcome = state_machine.decide(application, request)
        outcome.application = await self.store.save_application(outcome.application)

        delivered = await self.dispatcher.dispatch(outcome.notification)
        if not delivered:
            # A failed notification write rolls the session back; the
            # decision is already committed, so reload it.
            outcome.application = await self.store.refresh_application(outcome.application)
            logger.warning(
                f"Application {application_id} marked {outcome.application.status} but notification was not delivered"
            )
        return outcome, delivered

    async def update_application(
        self,
        application_id: UUID,
        jobseeker_id: UUID,
        changes: ApplicationUpdate,
    ) -> Application:
        """Candidate edits their own application while it is still pending."""
        application = await self.store.get_application(application_id)
        if str(application.jobseeker_id) != str(jobseeker_id):
            raise NotFoundError(f"Application {application_id} not found")
        state_machine.update_candidate_fields(application, changes)
        return await self.store.save_application(application)

    async def list_for_employer(
        self,
        employer_id: UUID,
        filters: ApplicationFilter,
    ) -> tuple[list[Application], StatusSummary]:
        applications = await self.store.list_applications(employer_id=employer_id)
        matched = filter_applications(applications, filters)
        return matched, summarize_statuses(matched)
