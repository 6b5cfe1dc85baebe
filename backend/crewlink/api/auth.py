"""
Request authentication dependencies.

Login and registration live outside this service; the httpOnly
`auth_token` cookie carries the user id issued by that flow.
"""
import logging
from uuid import UUID

from fastapi import Cookie, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from crewlink.database import get_db
from crewlink.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def get_current_user(
    auth_token: str = Cookie(None),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency to get current authenticated user from httpOnly cookie.
    
    Raises:
        HTTPException 401: If cookie is missing, malformed, or user not found
    """
    if not auth_token:
        raise HTTPException(status_code=401, detail="Not authenticated.")
    
    try:
        user_id = UUID(auth_token)
    except ValueError:
        logger.warning("Rejected malformed auth token")
        raise HTTPException(status_code=401, detail="Invalid token.")
    
    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()
    
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Invalid token. User not found."
        )
    
    return user


async def require_employer(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency for employer-only endpoints (interview notes, decisions)."""
    if not current_user.is_employer():
        logger.warning(f"Non-employer {current_user.id} attempted an employer action")
        raise HTTPException(status_code=403, detail="Employer account required.")
    return current_user


async def require_jobseeker(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency for candidate-only endpoints (submitting applications)."""
    if current_user.role != UserRole.JOBSEEKER:
        logger.warning(f"Non-jobseeker {current_user.id} attempted to apply")
        raise HTTPException(status_code=403, detail="Jobseeker account required.")
    return current_user
