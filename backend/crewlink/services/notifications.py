"""
Notification delivery and inbox operations.

Delivery is best-effort and at-most-once: a failure is logged and reported
to the caller as False, never raised, so the transition that produced the
notification stays committed.
"""
import logging
from typing import Optional
from uuid import UUID

from crewlink.models.notification import Notification
from crewlink.services.email import EmailService
from crewlink.services.errors import NotFoundError
from crewlink.services.stores import NotificationStore

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Persists notifications and optionally mirrors them by email."""

    def __init__(self, store: NotificationStore, email_service: Optional[EmailService] = None):
        self.store = store
        self.email_service = email_service

    async def dispatch(self, notification: Notification) -> bool:
        try:
            await self.store.create_notification(notification)
        except Exception as e:
            logger.error(
                f"Failed to deliver notification to user {notification.user_id}: {e}",
                exc_info=True,
                extra={"application_id": str(notification.application_id)},
            )
            return False

        logger.info(
            f"Notification '{notification.title}' delivered to user {notification.user_id}",
            extra={"application_id": str(notification.application_id), "status": notification.status},
        )

        if self.email_service is not None:
            await self._mirror_by_email(notification)
        return True

    async def _mirror_by_email(self, notification: Notification) -> None:
        try:
            user = await self.store.get_user(notification.user_id)
            if user is None or not user.email:
                return
            await self.email_service.send_application_status_email(
                user.email, notification.title, notification.message
            )
        except Exception as e:
            logger.error(f"Error emailing notification to user {notification.user_id}: {e}", exc_info=True)


async def list_notifications(store: NotificationStore, user_id: UUID) -> list[Notification]:
    """User's notifications, newest first."""
    return await store.list_notifications(user_id)


async def mark_as_read(store: NotificationStore, notification_id: UUID, user_id: UUID) -> Notification:
    notification = await store.get_notification(notification_id)
    # Other users' notifications are reported as missing
    if str(notification.user_id) != str(user_id):
        raise NotFoundError(f"Notification {notification_id} not found")
    if not notification.is_read:
        notification.is_read = True
        notification = await store.save_notification(notification)
    return notification


async def mark_all_as_read(store: NotificationStore, user_id: UUID) -> int:
    updated = await store.mark_all_read(user_id)
    logger.info(f"Marked {updated} notifications read for user {user_id}")
    return updated
