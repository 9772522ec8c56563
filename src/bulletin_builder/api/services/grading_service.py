"""
Grade recording on behalf of a teacher

A teacher may only grade the subjects assigned to them. Each recorded grade
notifies the student.
"""

from datetime import datetime
from typing import Optional, Union
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from bulletin_builder.api.database.models import Student, Subject
from bulletin_builder.api.database.stores import SqlGradeStore
from bulletin_builder.core.interfaces import NotificationService
from bulletin_builder.core.models import GradeEntry, Period, check_grade_value, parse_period
from bulletin_builder.exceptions import NotFoundError, UnauthorizedSubjectError

logger = logging.getLogger(__name__)


class GradeRecorder:
    """Record grades for a teacher's own subjects"""

    def __init__(self, db: AsyncSession, notification_service: NotificationService):
        self.db = db
        self.grade_store = SqlGradeStore(db)
        self.notification_service = notification_service

    async def record_grade(
        self,
        actor_ref: int,
        student_ref: int,
        subject_ref: int,
        class_ref: int,
        value: float,
        period: Union[Period, str],
        recorded_at: Optional[datetime] = None,
        evaluation_type: str = "devoir",
        comment: Optional[str] = None,
    ) -> GradeEntry:
        """
        Record one grade

        Args:
            actor_ref: Teacher recording the grade
            student_ref: Student ID
            subject_ref: Subject ID, must be assigned to actor_ref
            class_ref: Class the evaluation took place in
            value: Grade on the 0-20 scale
            period: Grading period
            recorded_at: Evaluation date (defaults to now)
            evaluation_type: Kind of evaluation
            comment: Optional teacher comment

        Returns:
            The stored GradeEntry
        """
        value = check_grade_value(value)
        period = parse_period(period)

        subject = await self.db.get(Subject, subject_ref)
        if subject is None:
            raise NotFoundError("Matière", subject_ref)
        if subject.teacher_id != actor_ref:
            logger.warning(f"Teacher {actor_ref} tried to grade subject {subject_ref} owned by {subject.teacher_id}")
            raise UnauthorizedSubjectError(actor_ref, subject_ref)

        student = await self.db.get(Student, student_ref)
        if student is None:
            raise NotFoundError("Élève", student_ref)
        subject_name = subject.name

        entry = await self.grade_store.insert(GradeEntry(
            value=value,
            period=period,
            subject_ref=subject_ref,
            subject_name=subject_name,
            student_ref=student_ref,
            class_ref=class_ref,
            evaluation_type=evaluation_type,
            comment=comment,
            recorded_at=recorded_at or datetime.utcnow(),
        ))

        await self.notification_service.send(
            recipient=student_ref,
            title="Nouvelle note ajoutée",
            body=f"Une nouvelle note ({value:g}/20) a été ajoutée en {subject_name}.",
            category="note",
            priority="normale",
            actor_ref=actor_ref,
            payload={"valeur": value, "matiere": subject_name, "note_id": entry.id},
            link=f"/notes/{entry.id}",
        )

        logger.info(f"Grade {entry.id} recorded: student {student_ref}, {subject_name}, {value:g}/20")
        return entry
