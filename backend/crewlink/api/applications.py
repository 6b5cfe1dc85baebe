"""
Applications API endpoints.
Submission, employer dashboard, interview notes, hiring decisions and
candidate edits.

Domain errors (not found, invalid transition, conflict, validation) are
turned into HTTP responses by the handlers registered in crewlink.main.
"""
import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewlink.database import get_db
from crewlink.models.user import User
from crewlink.api.auth import get_current_user, require_employer, require_jobseeker
from crewlink.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    DecisionRequest,
    DecisionResponse,
    InterviewRecord,
)
from crewlink.services.applications import ApplicationFilter, ApplicationLifecycleManager
from crewlink.services.email import EmailService
from crewlink.services.notifications import NotificationDispatcher
from crewlink.services.stores import SqlAlchemyStore

logger = logging.getLogger(__name__)
router = APIRouter()


def get_email_service() -> EmailService:
    return EmailService()


def get_lifecycle_manager(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> ApplicationLifecycleManager:
    store = SqlAlchemyStore(db)
    return ApplicationLifecycleManager(store, NotificationDispatcher(store, email_service))


# Endpoints
@router.get("/", response_model=ApplicationListResponse)
async def list_applications(
    status: Optional[str] = Query(None, description="Filter by status (pending, interview_completed, ...)"),
    job_post_id: Optional[int] = Query(None, description="Filter by posting"),
    search: str = Query("", description="Substring of candidate name or posting title"),
    current_user: User = Depends(require_employer),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Applications received by the current employer, with status counts
    computed over the filtered set.
    """
    applications, summary = await manager.list_for_employer(
        current_user.id,
        ApplicationFilter(status=status, job_post_id=job_post_id, search_term=search),
    )
    return ApplicationListResponse(
        items=[ApplicationResponse.model_validate(application) for application in applications],
        summary=summary,
    )


@router.post("/", response_model=ApplicationResponse, status_code=201)
async def submit_application(
    submission: ApplicationCreate,
    current_user: User = Depends(require_jobseeker),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Apply to a posting. The application starts as `pending`.

    Returns 404 if the posting does not exist or is not publicly listed.
    """
    return await manager.submit_application(current_user, submission)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    current_user: User = Depends(get_current_user),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Get an application. Only the posting's employer and the applicant can see it.
    """
    return await manager.get_visible(application_id, current_user.id)


@router.patch("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: UUID,
    changes: ApplicationUpdate,
    current_user: User = Depends(get_current_user),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Candidate edits their own application.
    
    Returns 409 once the application has left `pending`.
    """
    application = await manager.update_application(application_id, current_user.id, changes)
    logger.info(f"Application {application_id} edited by candidate {current_user.id}")
    return application


@router.post("/{application_id}/interview", response_model=ApplicationResponse)
async def record_interview(
    application_id: UUID,
    interview: InterviewRecord,
    current_user: User = Depends(require_employer),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Record the interview note: pending → interview_completed.
    
    Returns 409 if the application is not pending.
    """
    return await manager.record_interview(application_id, current_user.id, interview)


@router.post("/{application_id}/decision", response_model=DecisionResponse)
async def decide(
    application_id: UUID,
    request: DecisionRequest,
    current_user: User = Depends(require_employer),
    manager: ApplicationLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Final hiring decision: interview_completed → accepted | rejected.
    
    - 409 if the interview has not been recorded, or the decision was already made
    - 422 if no reason is given
    
    The candidate is notified; a failed notification does not undo the decision.
    """
    outcome, delivered = await manager.decide(application_id, current_user.id, request)
    return DecisionResponse(
        application=ApplicationResponse.model_validate(outcome.application),
        notification_sent=delivered,
    )
