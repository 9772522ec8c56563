"""
Publication workflow
Marks a report card as published and notifies the owning student.

Publishing is idempotent for the card itself, but every call sends a new
notification: delivery is at-least-once, not exactly-once.
"""

from typing import Optional
import logging

from bulletin_builder.core.interfaces import NotificationService, ReportCardStore
from bulletin_builder.core.models import ReportCard
from bulletin_builder.exceptions import NotFoundError

logger = logging.getLogger(__name__)

NOTIFICATION_CATEGORY = "bulletin"
NOTIFICATION_PRIORITY = "normale"


class PublicationWorkflow:
    """Publish report cards"""

    def __init__(self, report_card_store: ReportCardStore, notification_service: NotificationService):
        self.report_card_store = report_card_store
        self.notification_service = notification_service

    async def publish(self, report_card_id: int, actor_ref: Optional[int]) -> ReportCard:
        card = await self.report_card_store.get(report_card_id)
        if card is None:
            raise NotFoundError("Bulletin", report_card_id)

        if card.published:
            logger.info(f"Report card {report_card_id} already published, notifying again")

        published = await self.report_card_store.update(report_card_id, {"published": True})

        await self.notification_service.send(
            recipient=published.student_ref,
            title="Nouveau bulletin disponible",
            body=f"Le bulletin du {published.period_label} est maintenant disponible.",
            category=NOTIFICATION_CATEGORY,
            priority=NOTIFICATION_PRIORITY,
            actor_ref=actor_ref,
            payload={"report_card_id": published.id, "period": published.period.value},
            link=f"/bulletins/{published.id}",
        )

        logger.info(f"📢 Report card {report_card_id} published by {actor_ref}")
        return published
