"""
Integration Tests for report card queries and maintenance

Tests detail breakdowns, student-facing views, manual corrections,
deletion and student removal.
"""

import pytest

from bulletin_builder.core.models import Mention, Period, ReportCardFilter
from bulletin_builder.exceptions import NotFoundError, ValidationError

ACADEMIC_YEAR = "2024-2025"
ADMIN = 7


@pytest.fixture
async def alice_card(services, school):
    alice = school.students[0]
    await school.add_grades(alice, [12, 14], subject="Mathématiques")
    await school.add_grades(alice, [16], subject="Français")
    await school.add_grades(alice, [2], period=Period.P2)
    return await services.generator.generate(alice, Period.P1, ACADEMIC_YEAR, actor_ref=ADMIN)


class TestReportCardDetail:
    """Tests for detail breakdowns"""

    async def test_grades_grouped_by_subject(self, services, alice_card):
        detail = await services.queries.get_detail(alice_card.id)

        assert detail.report_card == alice_card
        assert set(detail.grades_by_subject) == {"Mathématiques", "Français"}
        assert [g.value for g in detail.grades_by_subject["Mathématiques"]] == [12.0, 14.0]
        assert [g.value for g in detail.grades_by_subject["Français"]] == [16.0]

    async def test_unknown_card(self, services, school):
        with pytest.raises(NotFoundError):
            await services.queries.get_detail(999)

    async def test_published_detail_only_for_owner(self, services, school, alice_card):
        alice, bruno = school.students[:2]

        with pytest.raises(NotFoundError):
            await services.queries.get_published_detail(alice, alice_card.id)

        await services.publication.publish(alice_card.id, actor_ref=ADMIN)

        detail = await services.queries.get_published_detail(alice, alice_card.id)
        assert detail.report_card.published is True

        with pytest.raises(NotFoundError):
            await services.queries.get_published_detail(bruno, alice_card.id)

    async def test_pdf_payload_is_data_only(self, services, alice_card):
        payload = await services.queries.pdf_payload(alice_card.id)

        assert payload["pdf_url"] is None
        assert payload["report_card"].id == alice_card.id
        assert "Mathématiques" in payload["grades_by_subject"]


class TestListReportCards:
    async def test_filters(self, services, school, alice_card):
        bruno = school.students[1]
        await school.add_grades(bruno, [11])
        await services.generator.generate(bruno, Period.P1, ACADEMIC_YEAR)
        await services.publication.publish(alice_card.id, actor_ref=ADMIN)

        everything = await services.queries.list_report_cards()
        unpublished = await services.queries.list_report_cards(ReportCardFilter(published=False))
        by_search = await services.queries.list_report_cards(ReportCardFilter(search="diallo"))
        other_year = await services.queries.list_report_cards(ReportCardFilter(academic_year="2023-2024"))

        assert len(everything) == 2
        assert [c.student_ref for c in unpublished] == [bruno]
        assert [c.student_ref for c in by_search] == [bruno]
        assert other_year == []


class TestUpdateReportCard:
    """Tests for manual corrections"""

    async def test_average_change_recomputes_mention(self, services, alice_card):
        assert alice_card.mention == Mention.TRES_BIEN

        updated = await services.queries.update_report_card(alice_card.id, {"average": 9.5})

        assert updated.average == 9.5
        assert updated.mention == Mention.PASSABLE

    async def test_average_is_rounded(self, services, alice_card):
        updated = await services.queries.update_report_card(alice_card.id, {"average": 12.345})
        assert updated.average == 12.35

    async def test_matching_mention_is_accepted(self, services, alice_card):
        updated = await services.queries.update_report_card(
            alice_card.id, {"average": 16.5, "mention": "Excellent"}
        )
        assert updated.mention == Mention.EXCELLENT

    async def test_mismatched_mention_is_rejected(self, services, alice_card):
        with pytest.raises(ValidationError):
            await services.queries.update_report_card(alice_card.id, {"mention": Mention.EXCELLENT})

        stored = (await services.queries.get_detail(alice_card.id)).report_card
        assert stored.mention == Mention.TRES_BIEN

    async def test_comment_and_rank(self, services, alice_card):
        updated = await services.queries.update_report_card(
            alice_card.id, {"comment": "Peut mieux faire", "rank": 2, "class_size": 30}
        )

        assert updated.comment == "Peut mieux faire"
        assert updated.rank_display == "2/30"
        assert updated.average == alice_card.average

    @pytest.mark.parametrize("fields", [
        {"average": 21},
        {"average": "abc"},
        {"mention": "Génial"},
        {"rank": 0},
        {"class_size": True},
        {"published": "yes"},
        {"comment": 12},
        {"student_ref": 3},
    ])
    async def test_invalid_updates(self, services, alice_card, fields):
        with pytest.raises(ValidationError):
            await services.queries.update_report_card(alice_card.id, fields)

    async def test_empty_update_is_noop(self, services, alice_card):
        assert await services.queries.update_report_card(alice_card.id, {}) == alice_card

    async def test_update_unknown_card(self, services, school):
        with pytest.raises(NotFoundError):
            await services.queries.update_report_card(999, {"comment": "x"})


class TestDeletion:
    """Tests for report card deletion and student removal"""

    async def test_delete_report_card(self, services, alice_card):
        await services.queries.delete_report_card(alice_card.id)

        with pytest.raises(NotFoundError):
            await services.queries.get_detail(alice_card.id)

        with pytest.raises(NotFoundError):
            await services.queries.delete_report_card(alice_card.id)

    async def test_deleted_card_can_be_regenerated(self, services, school, alice_card):
        await services.queries.delete_report_card(alice_card.id)

        again = await services.generator.generate(school.students[0], Period.P1, ACADEMIC_YEAR)

        assert again.average == alice_card.average

    async def test_remove_student_deletes_dependents(self, services, school, alice_card):
        alice = school.students[0]
        await services.publication.publish(alice_card.id, actor_ref=ADMIN)

        removed = await services.queries.remove_student(alice)

        assert removed == {"report_cards": 1, "grades": 4, "notifications": 1}
        assert await services.queries.list_report_cards() == []
        assert await services.notifications.list_for_recipient(alice) == []
        with pytest.raises(NotFoundError):
            await services.generator.generate(alice, Period.P1, ACADEMIC_YEAR)

    async def test_remove_unknown_student(self, services, school):
        with pytest.raises(NotFoundError):
            await services.queries.remove_student(999)
