"""
Tests for the application lifecycle manager against the database.

Validates:
- Interview and decision transitions are persisted
- The candidate is notified of a decision
- A failed notification does not undo the decision
- Submission copies the posting context and only targets listed postings
- Only the posting's employer and the applicant can reach an application
- Dashboard filters and status counts
"""
import uuid

import pytest
from sqlalchemy import select

from crewlink.models.application import Application, ApplicationStatus
from crewlink.models.notification import Notification
from crewlink.models.job_posting import JobPosting, PostingStatus
from crewlink.schemas.application import (
    ApplicationCreate,
    ApplicationUpdate,
    DecisionRequest,
    InterviewRecord,
)
from crewlink.services.applications import (
    ApplicationFilter,
    ApplicationLifecycleManager,
    filter_applications,
    summarize_statuses,
)
from crewlink.services.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from crewlink.services.notifications import NotificationDispatcher
from crewlink.services.stores import SqlAlchemyStore


class RecordingEmailService:
    def __init__(self):
        self.sent = []

    async def send_application_status_email(self, email, title, message):
        self.sent.append((email, title, message))
        return True


class UndeliverableStore(SqlAlchemyStore):
    """Notification writes always fail."""

    async def create_notification(self, notification):
        raise RuntimeError("notification backend unavailable")


class RejectingNotificationStore(SqlAlchemyStore):
    """The database refuses the notification row (NOT NULL title)."""

    async def create_notification(self, notification):
        notification.title = None
        return await super().create_notification(notification)


def make_manager(db, email_service=None, notification_store=None):
    store = SqlAlchemyStore(db)
    dispatcher = NotificationDispatcher(notification_store or store, email_service)
    return ApplicationLifecycleManager(store, dispatcher)


async def notifications_for(db, user_id):
    result = await db.execute(select(Notification).where(Notification.user_id == user_id))
    return list(result.scalars().all())


# =============================================================================
# Transitions
# =============================================================================

@pytest.mark.asyncio
async def test_record_interview_is_persisted(db, employer, application):
    manager = make_manager(db)

    updated = await manager.record_interview(
        application.id, employer.id, InterviewRecord(note="Confident, available all season")
    )

    assert updated.status == ApplicationStatus.INTERVIEW_COMPLETED.value
    await db.refresh(application)
    assert application.status == ApplicationStatus.INTERVIEW_COMPLETED.value
    assert application.employer_feedback == "Confident, available all season"
    assert application.employer_feedback_at is not None


@pytest.mark.asyncio
async def test_record_interview_does_not_notify(db, employer, jobseeker, application):
    manager = make_manager(db)
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))
    assert await notifications_for(db, jobseeker.id) == []


@pytest.mark.asyncio
async def test_reject_after_interview(db, employer, jobseeker, application):
    email_service = RecordingEmailService()
    manager = make_manager(db, email_service)
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))

    outcome, delivered = await manager.decide(
        application.id, employer.id, DecisionRequest(decision="rejected", reason="skills mismatch")
    )

    assert delivered is True
    await db.refresh(application)
    assert application.status == ApplicationStatus.REJECTED.value
    assert application.employer_feedback == "[rejection] skills mismatch"

    inbox = await notifications_for(db, jobseeker.id)
    assert len(inbox) == 1
    assert inbox[0].status == "rejected"
    assert inbox[0].application_id == application.id
    assert "skills mismatch" in inbox[0].message
    assert inbox[0].is_read is False

    assert len(email_service.sent) == 1
    assert email_service.sent[0][0] == jobseeker.email


@pytest.mark.asyncio
async def test_decision_on_pending_is_rejected(db, employer, jobseeker, application):
    manager = make_manager(db)

    with pytest.raises(InvalidTransitionError):
        await manager.decide(application.id, employer.id, DecisionRequest(decision="accepted", reason="fit"))

    await db.refresh(application)
    assert application.status == ApplicationStatus.PENDING.value
    assert await notifications_for(db, jobseeker.id) == []


@pytest.mark.asyncio
async def test_decision_requires_reason(db, employer, application):
    manager = make_manager(db)
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))

    with pytest.raises(ValidationError):
        await manager.decide(application.id, employer.id, DecisionRequest(decision="accepted", reason=" "))

    await db.refresh(application)
    assert application.status == ApplicationStatus.INTERVIEW_COMPLETED.value


@pytest.mark.asyncio
async def test_second_decision_is_rejected(db, employer, application):
    manager = make_manager(db)
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))
    await manager.decide(application.id, employer.id, DecisionRequest(decision="accepted", reason="fit"))

    with pytest.raises(InvalidTransitionError):
        await manager.decide(application.id, employer.id, DecisionRequest(decision="rejected", reason="oops"))

    await db.refresh(application)
    assert application.status == ApplicationStatus.ACCEPTED.value


@pytest.mark.asyncio
async def test_failed_notification_keeps_decision(db, employer, jobseeker, application):
    manager = make_manager(db, notification_store=UndeliverableStore(db))
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))

    outcome, delivered = await manager.decide(
        application.id, employer.id, DecisionRequest(decision="accepted", reason="great fit")
    )

    assert delivered is False
    assert outcome.application.status == ApplicationStatus.ACCEPTED.value
    await db.refresh(application)
    assert application.status == ApplicationStatus.ACCEPTED.value
    assert await notifications_for(db, jobseeker.id) == []


@pytest.mark.asyncio
async def test_database_rejecting_notification_keeps_decision(db, employer, jobseeker, application):
    manager = make_manager(db, notification_store=RejectingNotificationStore(db))
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))

    outcome, delivered = await manager.decide(
        application.id, employer.id, DecisionRequest(decision="accepted", reason="great fit")
    )

    assert delivered is False
    assert outcome.application.status == ApplicationStatus.ACCEPTED.value
    assert outcome.application.employer_feedback == "[hiring] great fit"
    await db.refresh(application)
    assert application.status == ApplicationStatus.ACCEPTED.value
    assert await notifications_for(db, jobseeker.id) == []


# =============================================================================
# Submission
# =============================================================================

@pytest.mark.asyncio
async def test_submit_copies_posting_context(db, jobseeker, posting):
    manager = make_manager(db)

    submitted = await manager.submit_application(
        jobseeker,
        ApplicationCreate(job_post_id=posting.id, cover_letter="Two winters at a ski lodge", skills=["english"]),
    )

    stored = await SqlAlchemyStore(db).get_application(submitted.id)
    assert stored.status == ApplicationStatus.PENDING.value
    assert stored.job_post_id == posting.id
    assert stored.employer_id == posting.employer_id
    assert stored.job_title == "Front Desk"
    assert stored.jobseeker_id == jobseeker.id
    assert stored.jobseeker_name == "Kim Crew"
    assert stored.cover_letter == "Two winters at a ski lodge"
    assert stored.skills == ["english"]


@pytest.mark.asyncio
async def test_submit_to_unknown_posting(db, jobseeker):
    manager = make_manager(db)
    with pytest.raises(NotFoundError):
        await manager.submit_application(jobseeker, ApplicationCreate(job_post_id=9999))


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"is_hidden": True},
    {"is_active": False},
    {"status": PostingStatus.PENDING.value},
])
async def test_submit_to_unlisted_posting(db, employer, jobseeker, overrides):
    fields = {"status": PostingStatus.APPROVED.value, "is_hidden": False, "is_active": True}
    fields.update(overrides)
    unlisted = JobPosting(employer_id=employer.id, title="Lift Operator", **fields)
    db.add(unlisted)
    await db.commit()
    await db.refresh(unlisted)

    manager = make_manager(db)
    with pytest.raises(NotFoundError):
        await manager.submit_application(jobseeker, ApplicationCreate(job_post_id=unlisted.id))

    assert (await SqlAlchemyStore(db).list_applications(jobseeker_id=jobseeker.id)) == []


# =============================================================================
# Ownership
# =============================================================================

@pytest.mark.asyncio
async def test_other_employer_cannot_act(db, other_employer, application):
    manager = make_manager(db)

    with pytest.raises(NotFoundError):
        await manager.record_interview(application.id, other_employer.id, InterviewRecord(note="mine?"))

    await db.refresh(application)
    assert application.status == ApplicationStatus.PENDING.value


@pytest.mark.asyncio
async def test_visibility(db, employer, other_employer, jobseeker, application):
    manager = make_manager(db)

    assert (await manager.get_visible(application.id, employer.id)).id == application.id
    assert (await manager.get_visible(application.id, jobseeker.id)).id == application.id
    with pytest.raises(NotFoundError):
        await manager.get_visible(application.id, other_employer.id)


@pytest.mark.asyncio
async def test_unknown_application(db, employer):
    manager = make_manager(db)
    with pytest.raises(NotFoundError):
        await manager.get_visible(uuid.uuid4(), employer.id)


# =============================================================================
# Candidate edits
# =============================================================================

@pytest.mark.asyncio
async def test_candidate_edits_pending_application(db, jobseeker, application):
    manager = make_manager(db)

    await manager.update_application(application.id, jobseeker.id, ApplicationUpdate(message="Available from December"))

    await db.refresh(application)
    assert application.message == "Available from December"
    assert application.skills == ["reception", "english"]


@pytest.mark.asyncio
async def test_candidate_cannot_edit_after_interview(db, employer, jobseeker, application):
    manager = make_manager(db)
    await manager.record_interview(application.id, employer.id, InterviewRecord(note="ok"))

    with pytest.raises(ConflictError):
        await manager.update_application(application.id, jobseeker.id, ApplicationUpdate(message="late"))


@pytest.mark.asyncio
async def test_only_the_applicant_can_edit(db, employer, application):
    manager = make_manager(db)
    with pytest.raises(NotFoundError):
        await manager.update_application(application.id, employer.id, ApplicationUpdate(message="hi"))


# =============================================================================
# Dashboard
# =============================================================================

def make_application(status, name="Kim Crew", title="Front Desk", job_post_id=1):
    return Application(
        id=uuid.uuid4(),
        job_post_id=job_post_id,
        jobseeker_id=uuid.uuid4(),
        jobseeker_name=name,
        employer_id=uuid.uuid4(),
        job_title=title,
        status=status,
    )


def test_filter_applications():
    applications = [
        make_application("pending", name="Kim Crew"),
        make_application("interview_completed", name="Lee Ski", title="Ski Instructor", job_post_id=2),
        make_application("pending", name="Park Lift", title="Lift Operator", job_post_id=2),
    ]

    assert len(filter_applications(applications, ApplicationFilter())) == 3
    assert [a.jobseeker_name for a in filter_applications(applications, ApplicationFilter(status="pending"))] == [
        "Kim Crew",
        "Park Lift",
    ]
    assert len(filter_applications(applications, ApplicationFilter(job_post_id=2))) == 2
    assert [a.jobseeker_name for a in filter_applications(applications, ApplicationFilter(search_term=" SKI "))] == [
        "Lee Ski"
    ]
    assert filter_applications(applications, ApplicationFilter(status="pending", job_post_id=2))[0].jobseeker_name == "Park Lift"


def test_summarize_statuses_counts_legacy_as_other():
    summary = summarize_statuses([
        make_application("pending"),
        make_application("pending"),
        make_application("accepted"),
        make_application("reviewing"),
    ])

    assert summary.total == 4
    assert summary.pending == 2
    assert summary.accepted == 1
    assert summary.interview_completed == 0
    assert summary.other == 1


@pytest.mark.asyncio
async def test_list_for_employer_is_scoped(db, employer, other_employer, application):
    manager = make_manager(db)

    mine, summary = await manager.list_for_employer(employer.id, ApplicationFilter())
    theirs, _ = await manager.list_for_employer(other_employer.id, ApplicationFilter())

    assert [a.id for a in mine] == [application.id]
    assert summary.pending == 1
    assert theirs == []
