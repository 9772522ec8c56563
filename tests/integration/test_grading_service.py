"""
Integration Tests for grade recording

A teacher records grades only for subjects assigned to them; the student is
notified of each new grade.
"""

from datetime import datetime

import pytest

from bulletin_builder.core.models import Period
from bulletin_builder.exceptions import ErrorKind, NotFoundError, UnauthorizedSubjectError, ValidationError

MATH_TEACHER = 100
FRENCH_TEACHER = 101


class TestGradeRecorder:
    """Tests for GradeRecorder.record_grade"""

    async def test_record_grade(self, services, school):
        alice = school.students[0]
        math = school.subjects["Mathématiques"]

        entry = await services.grading.record_grade(
            actor_ref=MATH_TEACHER,
            student_ref=alice,
            subject_ref=math,
            class_ref=school.class_ref,
            value=15.5,
            period=Period.P1,
            recorded_at=datetime(2024, 11, 4),
            evaluation_type="composition",
        )

        assert entry.id is not None
        assert entry.value == 15.5
        assert entry.subject_name == "Mathématiques"
        assert entry.evaluation_type == "composition"

        outcome = await services.generator.prepare(alice, Period.P1, "2024-2025")
        assert outcome.report_card.average == 15.5

    async def test_record_grade_notifies_student(self, services, school):
        alice = school.students[0]

        entry = await services.grading.record_grade(
            actor_ref=FRENCH_TEACHER,
            student_ref=alice,
            subject_ref=school.subjects["Français"],
            class_ref=school.class_ref,
            value=14,
            period="P1",
        )

        notifications = await services.notifications.list_for_recipient(alice, category="note")
        assert len(notifications) == 1
        notification = notifications[0]
        assert notification.title == "Nouvelle note ajoutée"
        assert notification.body == "Une nouvelle note (14/20) a été ajoutée en Français."
        assert notification.actor_ref == FRENCH_TEACHER
        assert notification.payload == {"valeur": 14.0, "matiere": "Français", "note_id": entry.id}
        assert notification.link == f"/notes/{entry.id}"

    async def test_other_teachers_subject_is_refused(self, services, school):
        alice = school.students[0]

        with pytest.raises(UnauthorizedSubjectError) as exc_info:
            await services.grading.record_grade(
                actor_ref=FRENCH_TEACHER,
                student_ref=alice,
                subject_ref=school.subjects["Mathématiques"],
                class_ref=school.class_ref,
                value=10,
                period=Period.P1,
            )

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED_SUBJECT
        outcome = await services.generator.prepare(alice, Period.P1, "2024-2025")
        assert outcome.error_kind == ErrorKind.NO_GRADES
        assert await services.notifications.list_for_recipient(alice) == []

    @pytest.mark.parametrize("value", [-1, 20.5, "quinze"])
    async def test_invalid_value(self, services, school, value):
        with pytest.raises(ValidationError):
            await services.grading.record_grade(
                actor_ref=MATH_TEACHER,
                student_ref=school.students[0],
                subject_ref=school.subjects["Mathématiques"],
                class_ref=school.class_ref,
                value=value,
                period=Period.P1,
            )

    async def test_unknown_subject(self, services, school):
        with pytest.raises(NotFoundError):
            await services.grading.record_grade(
                actor_ref=MATH_TEACHER,
                student_ref=school.students[0],
                subject_ref=999,
                class_ref=school.class_ref,
                value=12,
                period=Period.P1,
            )

    async def test_unknown_student(self, services, school):
        with pytest.raises(NotFoundError):
            await services.grading.record_grade(
                actor_ref=MATH_TEACHER,
                student_ref=999,
                subject_ref=school.subjects["Mathématiques"],
                class_ref=school.class_ref,
                value=12,
                period=Period.P1,
            )
