"""
In-app notification service

Notifications are stored as rows for the recipient to read; no e-mail or
push transport is involved.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin_builder.api.database.models import NotificationRecord
from bulletin_builder.core.models import Notification

logger = logging.getLogger(__name__)


def notification_from_record(record: NotificationRecord) -> Notification:
    return Notification(
        id=record.id,
        recipient_ref=record.recipient_id,
        title=record.title,
        body=record.body,
        category=record.category,
        priority=record.priority,
        actor_ref=record.actor_id,
        payload=record.payload,
        link=record.link,
        is_read=record.is_read,
        created_at=record.created_at,
    )


class InAppNotificationService:
    """Persist notifications for in-app display"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def send(
        self,
        recipient: int,
        title: str,
        body: str,
        category: str,
        priority: str,
        actor_ref: Optional[int],
        payload: Optional[Dict[str, Any]] = None,
        link: Optional[str] = None,
    ) -> Notification:
        """
        Create a notification for a recipient

        Args:
            recipient: Recipient ID
            title: Short title
            body: Message body
            category: Notification category ("bulletin", "note", ...)
            priority: Priority label ("normale", ...)
            actor_ref: ID of the user who triggered the notification
            payload: Optional structured data
            link: Optional in-app link

        Returns:
            The stored notification
        """
        record = NotificationRecord(
            recipient_id=recipient,
            title=title,
            body=body,
            category=category,
            priority=priority,
            actor_id=actor_ref,
            payload=payload,
            link=link,
            is_read=False,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Notification '{category}' sent to {recipient} by {actor_ref}")
        return notification_from_record(record)

    async def list_for_recipient(self, recipient: int, category: Optional[str] = None) -> List[Notification]:
        query = select(NotificationRecord).where(NotificationRecord.recipient_id == recipient)
        if category is not None:
            query = query.where(NotificationRecord.category == category)
        result = await self.db.execute(query.order_by(NotificationRecord.id))
        return [notification_from_record(record) for record in result.scalars().all()]

    async def count_unread(self, recipient: int) -> int:
        result = await self.db.execute(
            select(func.count(NotificationRecord.id)).where(
                NotificationRecord.recipient_id == recipient,
                NotificationRecord.is_read.is_(False),
            )
        )
        return result.scalar_one()

    async def delete_for_recipient(self, recipient: int) -> int:
        result = await self.db.execute(delete(NotificationRecord).where(NotificationRecord.recipient_id == recipient))
        await self.db.commit()
        return result.rowcount
