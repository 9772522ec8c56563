"""
Report card queries and maintenance

Detail breakdowns, filtered listings, the student-facing views (published
cards only), manual corrections, deletions and the PDF payload stub.
"""

from typing import Any, Dict, List, Optional
import logging

from bulletin_builder.api.database.stores import SqlClassRosterStore, SqlGradeStore, SqlReportCardStore
from bulletin_builder.api.services.notification_service import InAppNotificationService
from bulletin_builder.core.calculators import MentionClassifier, round_half_up
from bulletin_builder.core.models import (
    GradeEntry,
    Mention,
    ReportCard,
    ReportCardDetail,
    ReportCardFilter,
    check_grade_value,
)
from bulletin_builder.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"average", "mention", "rank", "class_size", "comment", "published"}


class ReportCardQueryService:
    """Read and maintain stored report cards"""

    def __init__(
        self,
        report_card_store: SqlReportCardStore,
        grade_store: SqlGradeStore,
        roster_store: SqlClassRosterStore,
        notification_service: Optional[InAppNotificationService] = None,
        mention_classifier: Optional[MentionClassifier] = None,
    ):
        self.report_card_store = report_card_store
        self.grade_store = grade_store
        self.roster_store = roster_store
        self.notification_service = notification_service
        self.mention_classifier = mention_classifier or MentionClassifier()

    async def get_detail(self, report_card_id: int) -> ReportCardDetail:
        """Report card with the period's grades grouped by subject"""
        card = await self._get_or_raise(report_card_id)
        return await self._detail(card)

    async def list_report_cards(self, filters: Optional[ReportCardFilter] = None) -> List[ReportCard]:
        return await self.report_card_store.list_report_cards(filters)

    async def list_published_for_student(self, student_ref: int) -> List[ReportCard]:
        return await self.report_card_store.list_for_student(student_ref, published_only=True)

    async def get_published_detail(self, student_ref: int, report_card_id: int) -> ReportCardDetail:
        """Detail as seen by a student: only their own published cards"""
        card = await self.report_card_store.get(report_card_id)
        if card is None or card.student_ref != student_ref or not card.published:
            raise NotFoundError("Bulletin publié", report_card_id)
        return await self._detail(card)

    async def update_report_card(self, report_card_id: int, fields: Dict[str, Any]) -> ReportCard:
        """
        Apply a manual correction

        The mention always follows the average: it is recomputed when the
        average changes, and an explicit mention that disagrees with the
        average is rejected.
        """
        card = await self._get_or_raise(report_card_id)

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Champs non modifiables: {', '.join(sorted(unknown))}")

        changes: Dict[str, Any] = {}

        if "average" in fields:
            changes["average"] = round_half_up(check_grade_value(fields["average"]))
        average = changes.get("average", card.average)
        expected_mention = self.mention_classifier.classify(average)

        if "mention" in fields:
            try:
                mention = Mention(fields["mention"])
            except ValueError:
                raise ValidationError(f"Mention invalide: {fields['mention']!r}")
            if mention != expected_mention:
                raise ValidationError(
                    f"Mention {mention.value} incompatible avec la moyenne {average:.2f} ({expected_mention.value})"
                )
        if "average" in changes:
            changes["mention"] = expected_mention

        for field in ("rank", "class_size"):
            if field in fields:
                value = fields[field]
                if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                    raise ValidationError(f"{field} doit être un entier positif: {value!r}")
                changes[field] = value

        if "comment" in fields:
            if fields["comment"] is not None and not isinstance(fields["comment"], str):
                raise ValidationError("Le commentaire doit être un texte")
            changes["comment"] = fields["comment"]

        if "published" in fields:
            if not isinstance(fields["published"], bool):
                raise ValidationError("published doit être un booléen")
            changes["published"] = fields["published"]

        if not changes:
            return card

        logger.info(f"Report card {report_card_id} updated: {', '.join(sorted(changes))}")
        return await self.report_card_store.update(report_card_id, changes)

    async def delete_report_card(self, report_card_id: int) -> None:
        await self.report_card_store.delete(report_card_id)
        logger.info(f"Report card {report_card_id} deleted")

    async def remove_student(self, student_ref: int) -> Dict[str, int]:
        """
        Delete a student and everything attached to them

        Order: report cards, grades, notifications, then the student row.
        """
        display_name = await self.roster_store.require_student(student_ref)

        removed = {
            "report_cards": await self.report_card_store.delete_for_student(student_ref),
            "grades": await self.grade_store.delete_for_student(student_ref),
            "notifications": 0,
        }
        if self.notification_service is not None:
            removed["notifications"] = await self.notification_service.delete_for_recipient(student_ref)

        await self.roster_store.delete_student(student_ref)
        logger.info(f"Student {student_ref} ({display_name}) removed: {removed}")
        return removed

    async def pdf_payload(self, report_card_id: int) -> Dict[str, Any]:
        """Data for a future PDF rendering; no file is produced yet"""
        detail = await self.get_detail(report_card_id)
        logger.warning(f"PDF rendering not implemented, returning data for report card {report_card_id}")
        return {
            "report_card": detail.report_card,
            "grades_by_subject": detail.grades_by_subject,
            "pdf_url": None,
        }

    async def _get_or_raise(self, report_card_id: int) -> ReportCard:
        card = await self.report_card_store.get(report_card_id)
        if card is None:
            raise NotFoundError("Bulletin", report_card_id)
        return card

    async def _detail(self, card: ReportCard) -> ReportCardDetail:
        entries = await self.grade_store.find_by_student_and_period(card.student_ref, card.period)

        grades_by_subject: Dict[str, List[GradeEntry]] = {}
        for entry in entries:
            subject = entry.subject_name or f"Matière {entry.subject_ref}"
            if subject not in grades_by_subject:
                grades_by_subject[subject] = []
            grades_by_subject[subject].append(entry)

        return ReportCardDetail(report_card=card, grades_by_subject=grades_by_subject)
