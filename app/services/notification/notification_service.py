import logging
from dataclasses import dataclass, field
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError, NotificationDeliveryFailed
from app.db.gateway import PersistenceGateway
from app.models.auth.role import Role
from app.models.auth.user import User
from app.models.auth.user_role import UserRole
from app.models.notification.notification import Notification
from app.models.shared.enums import NotificationType

logger = logging.getLogger(__name__)

TABLE = Notification.__tablename__


@dataclass
class FanOutResult:
    delivered: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    lookup_failed: bool = False

    @property
    def complete(self) -> bool:
        return not self.failed and not self.lookup_failed


class NotificationService:
    """In-app notifications stored per recipient"""

    def __init__(self, session: AsyncSession, max_retries: Optional[int] = None):
        self.session = session
        self.gateway = PersistenceGateway(session)
        self.max_retries = max_retries if max_retries is not None else settings.NOTIFICATION_MAX_RETRIES

    async def create_notification(
        self,
        user_id: int,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.SYSTEM,
        related_id: Optional[int] = None,
    ) -> int:
        return await self.gateway.insert(TABLE, {
            "user_id": user_id,
            "title": title,
            "message": message,
            "notification_type": NotificationType(notification_type).value,
            "related_id": related_id,
            "is_read": False,
        })

    async def get_admin_user_ids(self) -> List[int]:
        """Active users holding one of the reviewer roles"""
        admin_ids = (
            select(UserRole.user_id)
            .join(Role, Role.id == UserRole.role_id)
            .where(
                Role.name.in_(settings.ADMIN_ROLE_NAMES),
                UserRole.is_active == True,
                Role.is_deleted == False,
            )
        )
        users = await self.gateway.select_many(
            User.__tablename__,
            User.id.in_(admin_ids),
            User.is_active == True,
            User.is_deleted == False,
            order_by=(User.id,),
        )
        return [user.id for user in users]

    async def _deliver(self, user_id: int, title: str, message: str,
                       notification_type: NotificationType, related_id: Optional[int]) -> int:
        # First try plus max_retries retries
        attempts = max(self.max_retries, 0) + 1
        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                return await self.create_notification(user_id, title, message, notification_type, related_id)
            except Exception as e:
                last_error = e
                logger.warning(f"Notification for user {user_id} failed (attempt {attempt}/{attempts}): {e}")
        raise NotificationDeliveryFailed(user_id, str(last_error))

    async def notify_admins(
        self,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.SYSTEM,
        related_id: Optional[int] = None,
    ) -> FanOutResult:
        """
        Send one notification to every administrative reviewer.

        Each recipient is retried independently; a recipient that still fails
        is reported in the result and never aborts the others. A failed reviewer
        lookup is reported through ``lookup_failed`` instead of being raised.
        """
        result = FanOutResult()
        try:
            admin_ids = await self.get_admin_user_ids()
        except Exception as e:
            logger.error(f"Reviewer lookup failed, nobody notified for '{title}': {e}")
            result.lookup_failed = True
            return result

        for user_id in admin_ids:
            try:
                await self._deliver(user_id, title, message, notification_type, related_id)
                result.delivered.append(user_id)
            except NotificationDeliveryFailed as e:
                logger.error(str(e))
                result.failed.append(user_id)

        if not result.delivered and not result.failed:
            logger.warning(f"No active reviewers found for '{title}'")
        return result

    async def get_user_notifications(self, user_id: int, unread_only: bool = False) -> List[Notification]:
        conditions = [Notification.user_id == user_id, Notification.is_deleted == False]
        if unread_only:
            conditions.append(Notification.is_read == False)
        return await self.gateway.select_many(
            TABLE, *conditions, order_by=(Notification.created_at.desc(), Notification.id.desc())
        )

    async def mark_notification_read(self, notification_id: int, user_id: int) -> Notification:
        notification = await self.gateway.select_one(
            TABLE, Notification.id == notification_id, Notification.user_id == user_id
        )
        if not notification:
            raise NotFoundError("Notification not found", notification_id=notification_id)
        if notification.is_read:
            return notification
        return await self.gateway.update(TABLE, notification_id, {"is_read": True, "updated_by": user_id})

    async def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of the user; returns how many changed"""
        count = await self.gateway.update_many(
            TABLE,
            {"is_read": True, "updated_by": user_id},
            Notification.user_id == user_id,
            Notification.is_read == False,
        )
        logger.info(f"Marked {count} notifications read for user {user_id}")
        return count
