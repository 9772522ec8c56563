"""
SQLAlchemy implementations of the collaborator stores

Stores hand back pydantic models, never ORM rows, so callers are unaffected
by session expiry after a rollback. Writes commit immediately: a conflict
on one report card never discards the rows written before it.
"""

from typing import Any, Dict, List, Optional, Sequence
import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bulletin_builder.api.database.models import Grade, ReportCardRecord, SchoolClass, Student, Subject
from bulletin_builder.core.models import GradeEntry, Period, ReportCard, ReportCardFilter
from bulletin_builder.exceptions import DuplicateReportCardError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ReportCard field -> report_cards column, for fields that may change after creation
UPDATABLE_COLUMNS = {
    "average": "average",
    "mention": "mention",
    "rank": "rank",
    "class_size": "class_size",
    "published": "published",
    "comment": "comment",
    "pdf_path": "pdf_path",
}


def report_card_from_record(record: ReportCardRecord) -> ReportCard:
    return ReportCard(
        id=record.id,
        student_ref=record.student_id,
        period=record.period,
        academic_year=record.academic_year,
        average=record.average,
        mention=record.mention,
        rank=record.rank,
        class_size=record.class_size,
        published=record.published,
        comment=record.comment,
        pdf_path=record.pdf_path,
        generated_by=record.generated_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class SqlGradeStore:
    """Grade entries backed by the grades table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_student_and_period(self, student_ref: int, period: Period) -> List[GradeEntry]:
        result = await self.db.execute(
            select(Grade, Subject.name)
            .outerjoin(Subject, Subject.id == Grade.subject_id)
            .where(Grade.student_id == student_ref, Grade.period == Period(period).value)
            .order_by(Grade.recorded_at, Grade.id)
        )
        return [self._to_entry(grade, subject_name) for grade, subject_name in result.all()]

    async def insert(self, entry: GradeEntry) -> GradeEntry:
        record = Grade(
            student_id=entry.student_ref,
            subject_id=entry.subject_ref,
            class_id=entry.class_ref,
            value=entry.value,
            period=entry.period.value,
            evaluation_type=entry.evaluation_type,
            comment=entry.comment,
            recorded_at=entry.recorded_at,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return self._to_entry(record, entry.subject_name)

    async def delete_for_student(self, student_ref: int) -> int:
        result = await self.db.execute(delete(Grade).where(Grade.student_id == student_ref))
        await self.db.commit()
        return result.rowcount

    @staticmethod
    def _to_entry(grade: Grade, subject_name: Optional[str]) -> GradeEntry:
        return GradeEntry(
            id=grade.id,
            value=grade.value,
            period=grade.period,
            subject_ref=grade.subject_id,
            subject_name=subject_name,
            student_ref=grade.student_id,
            class_ref=grade.class_id,
            evaluation_type=grade.evaluation_type,
            comment=grade.comment,
            recorded_at=grade.recorded_at,
        )


class SqlClassRosterStore:
    """Class rosters backed by the students table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def students_of(self, class_ref: int) -> List[int]:
        school_class = await self.db.get(SchoolClass, class_ref)
        if school_class is None:
            raise NotFoundError("Classe", class_ref)

        result = await self.db.execute(
            select(Student.id).where(Student.class_id == class_ref).order_by(Student.id)
        )
        return list(result.scalars().all())

    async def class_of(self, student_ref: int) -> int:
        student = await self._get_student(student_ref)
        if student.class_id is None:
            raise NotFoundError("Classe de l'élève", student_ref)
        return student.class_id

    async def display_name(self, student_ref: int) -> str:
        student = await self.db.get(Student, student_ref)
        if student is None:
            return f"élève {student_ref}"
        return student.full_name

    async def require_student(self, student_ref: int) -> str:
        """Full name of an existing student; raises NotFoundError otherwise"""
        student = await self._get_student(student_ref)
        return student.full_name

    async def delete_student(self, student_ref: int) -> None:
        student = await self._get_student(student_ref)
        await self.db.delete(student)
        await self.db.commit()

    async def _get_student(self, student_ref: int) -> Student:
        student = await self.db.get(Student, student_ref)
        if student is None:
            raise NotFoundError("Élève", student_ref)
        return student


class SqlReportCardStore:
    """Report cards backed by the report_cards table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_one(self, student_ref: int, period: Period, academic_year: str) -> Optional[ReportCard]:
        result = await self.db.execute(
            select(ReportCardRecord).where(
                ReportCardRecord.student_id == student_ref,
                ReportCardRecord.period == Period(period).value,
                ReportCardRecord.academic_year == academic_year,
            )
        )
        record = result.scalars().first()
        return report_card_from_record(record) if record else None

    async def get(self, report_card_id: int) -> Optional[ReportCard]:
        record = await self.db.get(ReportCardRecord, report_card_id)
        return report_card_from_record(record) if record else None

    async def insert(self, report_card: ReportCard) -> ReportCard:
        """Insert a report card, translating a uniqueness conflict"""
        record = ReportCardRecord(
            student_id=report_card.student_ref,
            period=report_card.period.value,
            academic_year=report_card.academic_year,
            average=report_card.average,
            mention=report_card.mention.value,
            rank=report_card.rank,
            class_size=report_card.class_size,
            published=report_card.published,
            comment=report_card.comment,
            pdf_path=report_card.pdf_path,
            generated_by=report_card.generated_by,
        )
        self.db.add(record)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # Only a row already holding the key makes this a duplicate; FK/NOT NULL failures propagate
            existing = await self.find_one(report_card.student_ref, report_card.period, report_card.academic_year)
            if existing is None:
                logger.error(f"Integrity error inserting report card for student {report_card.student_ref}")
                raise
            logger.warning(
                f"Unique constraint hit for student {report_card.student_ref} "
                f"({report_card.period.value}, {report_card.academic_year})"
            )
            raise DuplicateReportCardError(
                report_card.student_ref, report_card.period.value, report_card.academic_year
            )
        except SQLAlchemyError:
            await self.db.rollback()
            logger.error(f"Database error inserting report card for student {report_card.student_ref}")
            raise
        await self.db.refresh(record)
        return report_card_from_record(record)

    async def update(self, report_card_id: int, fields: Dict[str, Any]) -> ReportCard:
        record = await self.db.get(ReportCardRecord, report_card_id)
        if record is None:
            raise NotFoundError("Bulletin", report_card_id)

        for field, value in fields.items():
            column = UPDATABLE_COLUMNS.get(field)
            if column is None:
                raise ValidationError(f"Champ non modifiable: {field}")
            setattr(record, column, getattr(value, "value", value))

        await self.db.commit()
        await self.db.refresh(record)
        return report_card_from_record(record)

    async def update_ranks(self, ranks: Dict[int, Dict[str, int]]) -> None:
        """Write rank/class_size for several cards in a single commit"""
        for report_card_id, fields in ranks.items():
            record = await self.db.get(ReportCardRecord, report_card_id)
            if record is None:
                raise NotFoundError("Bulletin", report_card_id)
            record.rank = fields["rank"]
            record.class_size = fields["class_size"]
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def find_for_students(
        self, student_refs: Sequence[int], period: Period, academic_year: str
    ) -> List[ReportCard]:
        if not student_refs:
            return []
        result = await self.db.execute(
            select(ReportCardRecord)
            .where(
                ReportCardRecord.student_id.in_(list(student_refs)),
                ReportCardRecord.period == Period(period).value,
                ReportCardRecord.academic_year == academic_year,
            )
            .order_by(ReportCardRecord.id)
        )
        return [report_card_from_record(record) for record in result.scalars().all()]

    async def list_report_cards(self, filters: Optional[ReportCardFilter] = None) -> List[ReportCard]:
        filters = filters or ReportCardFilter()
        query = select(ReportCardRecord).join(Student, Student.id == ReportCardRecord.student_id)

        if filters.period is not None:
            query = query.where(ReportCardRecord.period == filters.period.value)
        if filters.academic_year is not None:
            query = query.where(ReportCardRecord.academic_year == filters.academic_year)
        if filters.published is not None:
            query = query.where(ReportCardRecord.published == filters.published)
        if filters.class_ref is not None:
            query = query.where(Student.class_id == filters.class_ref)
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            query = query.where(
                or_(
                    Student.first_name.ilike(pattern),
                    Student.last_name.ilike(pattern),
                    Student.registration_number.ilike(pattern),
                )
            )

        result = await self.db.execute(
            query.order_by(ReportCardRecord.created_at.desc(), ReportCardRecord.id.desc())
        )
        return [report_card_from_record(record) for record in result.scalars().all()]

    async def list_for_student(self, student_ref: int, published_only: bool = False) -> List[ReportCard]:
        query = select(ReportCardRecord).where(ReportCardRecord.student_id == student_ref)
        if published_only:
            query = query.where(ReportCardRecord.published.is_(True))
        result = await self.db.execute(
            query.order_by(ReportCardRecord.created_at.desc(), ReportCardRecord.id.desc())
        )
        return [report_card_from_record(record) for record in result.scalars().all()]

    async def delete(self, report_card_id: int) -> None:
        record = await self.db.get(ReportCardRecord, report_card_id)
        if record is None:
            raise NotFoundError("Bulletin", report_card_id)
        await self.db.delete(record)
        await self.db.commit()

    async def delete_for_student(self, student_ref: int) -> int:
        result = await self.db.execute(delete(ReportCardRecord).where(ReportCardRecord.student_id == student_ref))
        await self.db.commit()
        return result.rowcount
