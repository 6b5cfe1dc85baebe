"""
Store interfaces consumed by the listing and application services.

Every read goes through a caller-imposed timeout; timeouts and driver errors
surface as UpstreamReadError. Nothing here retries.
"""
import asyncio
import logging
from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crewlink.config import settings
from crewlink.models.application import Application
from crewlink.models.employer_profile import EmployerProfile
from crewlink.models.job_posting import JobPosting
from crewlink.models.lodging_profile import LodgingProfile
from crewlink.models.notification import Notification
from crewlink.models.review import ReviewRecord
from crewlink.models.user import User
from crewlink.services.errors import NotFoundError, UpstreamReadError

logger = logging.getLogger(__name__)


class ListingStore(Protocol):
    """Read side used by the listing aggregator."""

    async def list_postings(self) -> list[JobPosting]: ...

    async def get_employer_profile(self, employer_id: UUID) -> Optional[EmployerProfile]: ...

    async def list_employer_profiles(self) -> list[EmployerProfile]: ...

    async def get_lodging_profile(self, employer_id: UUID) -> Optional[LodgingProfile]: ...

    async def list_reviews(self) -> list[ReviewRecord]: ...


class ApplicationStore(Protocol):
    """Reads and writes used by the lifecycle manager."""

    async def get_posting(self, job_post_id: int) -> JobPosting: ...

    async def get_application(self, application_id: UUID) -> Application: ...

    async def list_applications(
        self,
        employer_id: Optional[UUID] = None,
        jobseeker_id: Optional[UUID] = None,
    ) -> list[Application]: ...

    async def save_application(self, application: Application) -> Application: ...

    async def refresh_application(self, application: Application) -> Application: ...


class NotificationStore(Protocol):

    async def create_notification(self, notification: Notification) -> Notification: ...

    async def list_notifications(self, user_id: UUID) -> list[Notification]: ...

    async def get_notification(self, notification_id: UUID) -> Notification: ...

    async def save_notification(self, notification: Notification) -> Notification: ...

    async def mark_all_read(self, user_id: UUID) -> int: ...

    async def get_user(self, user_id: UUID) -> Optional[User]: ...


class SqlAlchemyStore:
    """
    All store interfaces over one AsyncSession.

    An AsyncSession must not run two statements at once, so reads issued
    concurrently by the aggregator are serialized here.
    """

    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.db = db
        self.timeout = settings.store_read_timeout_seconds if timeout is None else timeout
        self._lock = asyncio.Lock()

    async def _fetch_all(self, description: str, statement) -> list:
        async with self._lock:
            try:
                result = await asyncio.wait_for(self.db.execute(statement), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise UpstreamReadError(f"{description} timed out after {self.timeout}s") from e
            except SQLAlchemyError as e:
                raise UpstreamReadError(f"{description} failed: {e}") from e
            return list(result.scalars().all())

    async def _fetch_one(self, description: str, statement):
        rows = await self._fetch_all(description, statement)
        return rows[0] if rows else None

    async def _persist(self, instance):
        async with self._lock:
            self.db.add(instance)
            try:
                await self.db.commit()
            except SQLAlchemyError:
                # Expires every instance in the session, not just this one
                await self.db.rollback()
                raise
            await self.db.refresh(instance)
        return instance

    # ------------------------------------------------------------------
    # Listing side
    # ------------------------------------------------------------------

    async def list_postings(self) -> list[JobPosting]:
        return await self._fetch_all("list postings", select(JobPosting))

    async def get_employer_profile(self, employer_id: UUID) -> Optional[EmployerProfile]:
        return await self._fetch_one(
            f"get employer profile {employer_id}",
            select(EmployerProfile).where(EmployerProfile.employer_id == employer_id),
        )

    async def list_employer_profiles(self) -> list[EmployerProfile]:
        return await self._fetch_all("list employer profiles", select(EmployerProfile))

    async def get_lodging_profile(self, employer_id: UUID) -> Optional[LodgingProfile]:
        return await self._fetch_one(
            f"get lodging profile {employer_id}",
            select(LodgingProfile).where(LodgingProfile.employer_id == employer_id),
        )

    async def list_reviews(self) -> list[ReviewRecord]:
        return await self._fetch_all("list reviews", select(ReviewRecord))

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    async def get_posting(self, job_post_id: int) -> JobPosting:
        posting = await self._fetch_one(
            f"get posting {job_post_id}",
            select(JobPosting).where(JobPosting.id == job_post_id),
        )
        if not posting:
            raise NotFoundError(f"Job posting {job_post_id} not found")
        return posting

    async def get_application(self, application_id: UUID) -> Application:
        application = await self._fetch_one(
            f"get application {application_id}",
            select(Application).where(Application.id == application_id),
        )
        if not application:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    async def list_applications(
        self,
        employer_id: Optional[UUID] = None,
        jobseeker_id: Optional[UUID] = None,
    ) -> list[Application]:
        query = select(Application)
        if employer_id is not None:
            query = query.where(Application.employer_id == employer_id)
        if jobseeker_id is not None:
            query = query.where(Application.jobseeker_id == jobseeker_id)
        query = query.order_by(Application.applied_at.desc())
        return await self._fetch_all("list applications", query)

    async def save_application(self, application: Application) -> Application:
        return await self._persist(application)

    async def refresh_application(self, application: Application) -> Application:
        """Reload a committed application, e.g. after a rollback expired it."""
        async with self._lock:
            try:
                await asyncio.wait_for(self.db.refresh(application), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise UpstreamReadError(f"refresh application {application.id} timed out after {self.timeout}s") from e
            except SQLAlchemyError as e:
                raise UpstreamReadError(f"refresh application failed: {e}") from e
        return application

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def create_notification(self, notification: Notification) -> Notification:
        return await self._persist(notification)

    async def list_notifications(self, user_id: UUID) -> list[Notification]:
        return await self._fetch_all(
            f"list notifications for {user_id}",
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc()),
        )

    async def get_notification(self, notification_id: UUID) -> Notification:
        notification = await self._fetch_one(
            f"get notification {notification_id}",
            select(Notification).where(Notification.id == notification_id),
        )
        if not notification:
            raise NotFoundError(f"Notification {notification_id} not found")
        return notification

    async def save_notification(self, notification: Notification) -> Notification:
        return await self.create_notification(notification)

    async def mark_all_read(self, user_id: UUID) -> int:
        async with self._lock:
            result = await self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
            )
            await self.db.commit()
        return result.rowcount or 0

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self._fetch_one(
            f"get user {user_id}",
            select(User).where(User.id == user_id),
        )
