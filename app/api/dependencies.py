from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.database import get_async_session
from app.core.request_context import HDR_USER_ID
from app.db.gateway import PersistenceGateway
from app.models.auth.user import User

logger = logging.getLogger(__name__)

async def get_current_user(
    request: Request,
    x_user_id: Optional[str] = Header(None, alias=HDR_USER_ID),
    session: AsyncSession = Depends(get_async_session)
) -> User:
    """Resolve the acting user passed explicitly by the caller"""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {HDR_USER_ID} header",
        )

    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid {HDR_USER_ID} header",
        )

    user = await PersistenceGateway(session).select_one(
        User.__tablename__, User.id == user_id, User.is_deleted == False
    )
    if user is None or not user.is_active:
        logger.warning(f"Rejected request from unknown or inactive user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    request.state.current_user = user
    return user
