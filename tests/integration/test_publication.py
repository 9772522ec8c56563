"""
Integration Tests for report card publication

Publishing flips the published flag and notifies the student on every call.
"""

import pytest

from bulletin_builder.core.models import Period
from bulletin_builder.exceptions import NotFoundError

ACADEMIC_YEAR = "2024-2025"
ADMIN = 7


@pytest.fixture
async def report_card(services, school):
    await school.add_grades(school.students[0], [12, 15, 18])
    return await services.generator.generate(school.students[0], Period.P1, ACADEMIC_YEAR, actor_ref=ADMIN)


class TestPublication:
    """Tests for PublicationWorkflow.publish"""

    async def test_publish_sets_flag(self, services, report_card):
        published = await services.publication.publish(report_card.id, actor_ref=ADMIN)

        assert published.published is True
        assert published.id == report_card.id
        assert published.average == report_card.average

    async def test_publish_notifies_student(self, services, school, report_card):
        await services.publication.publish(report_card.id, actor_ref=ADMIN)

        notifications = await services.notifications.list_for_recipient(school.students[0])

        assert len(notifications) == 1
        notification = notifications[0]
        assert notification.title == "Nouveau bulletin disponible"
        assert notification.body == "Le bulletin du 1er Trimestre est maintenant disponible."
        assert notification.category == "bulletin"
        assert notification.priority == "normale"
        assert notification.actor_ref == ADMIN
        assert notification.payload == {"report_card_id": report_card.id, "period": "trimestre_1"}
        assert notification.link == f"/bulletins/{report_card.id}"
        assert notification.is_read is False

    async def test_republish_notifies_again(self, services, school, report_card):
        """Test publishing twice keeps the card published and sends a second notification"""
        await services.publication.publish(report_card.id, actor_ref=ADMIN)
        again = await services.publication.publish(report_card.id, actor_ref=ADMIN)

        assert again.published is True
        notifications = await services.notifications.list_for_recipient(school.students[0], category="bulletin")
        assert len(notifications) == 2
        assert await services.notifications.count_unread(school.students[0]) == 2

    async def test_publish_without_actor(self, services, report_card):
        await services.publication.publish(report_card.id, actor_ref=None)

        notifications = await services.notifications.list_for_recipient(report_card.student_ref)
        assert notifications[0].actor_ref is None

    async def test_publish_unknown_card(self, services, school):
        with pytest.raises(NotFoundError):
            await services.publication.publish(999, actor_ref=ADMIN)

        assert await services.notifications.list_for_recipient(school.students[0]) == []

    async def test_published_card_becomes_visible_to_student(self, services, school, report_card):
        alice = school.students[0]
        assert await services.queries.list_published_for_student(alice) == []

        await services.publication.publish(report_card.id, actor_ref=ADMIN)

        visible = await services.queries.list_published_for_student(alice)
        assert [card.id for card in visible] == [report_card.id]
