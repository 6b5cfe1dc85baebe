"""
Notifications API endpoints.
The current user's inbox.
"""
import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewlink.database import get_db
from crewlink.models.user import User
from crewlink.api.auth import get_current_user
from crewlink.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from crewlink.services import notifications
from crewlink.services.pagination import cursor_paginate
from crewlink.services.stores import SqlAlchemyStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current user's notifications, newest first, for infinite scroll."""
    items = await notifications.list_notifications(SqlAlchemyStore(db), current_user.id)
    page, next_cursor = cursor_paginate(items, cursor, limit, lambda n: str(n.id))
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in page],
        next_cursor=next_cursor,
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    updated = await notifications.mark_all_as_read(SqlAlchemyStore(db), current_user.id)
    return MarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Mark one notification read. Other users' notifications return 404."""
    return await notifications.mark_as_read(SqlAlchemyStore(db), notification_id, current_user.id)
