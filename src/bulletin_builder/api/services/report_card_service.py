"""
REPORT CARD GENERATOR - One report card for one student, period and year

GENERATION PROCESS:
1. Reject if a report card already exists for (student, period, year)
2. Fetch the student's grade entries for the period (none -> NoGradesError)
3. Average (AverageCalculator) and mention (MentionClassifier)
4. Rank over the student's whole class, restricted to students with grades
   for the period; a rank is never computed for a student in isolation
5. Persist unpublished, with the acting user recorded as generated_by

The existence check and the insert are not atomic on their own; the
report_cards unique constraint closes the race and the store turns the
conflict into DuplicateReportCardError.
"""

from typing import Optional, Union
import logging

from bulletin_builder.core.calculators import AverageCalculator, MentionClassifier, RankEngine, RankResult
from bulletin_builder.core.interfaces import ClassRosterStore, GradeStore, ReportCardStore
from bulletin_builder.core.models import Period, ReportCard, StudentOutcome, parse_academic_year, parse_period
from bulletin_builder.exceptions import DuplicateReportCardError, NoGradesError, NotFoundError

logger = logging.getLogger(__name__)


class ReportCardGenerator:
    """Generate report cards for individual students"""

    def __init__(
        self,
        grade_store: GradeStore,
        roster_store: ClassRosterStore,
        report_card_store: ReportCardStore,
        average_calculator: Optional[AverageCalculator] = None,
        mention_classifier: Optional[MentionClassifier] = None,
        rank_engine: Optional[RankEngine] = None,
    ):
        self.grade_store = grade_store
        self.roster_store = roster_store
        self.report_card_store = report_card_store
        self.average_calculator = average_calculator or AverageCalculator()
        self.mention_classifier = mention_classifier or MentionClassifier()
        self.rank_engine = rank_engine or RankEngine()

    async def generate(
        self,
        student_ref: int,
        period: Union[Period, str],
        academic_year: str,
        actor_ref: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> ReportCard:
        """
        Generate and persist a report card for one student

        Args:
            student_ref: Student ID
            period: Grading period
            academic_year: Academic year ("YYYY-YYYY")
            actor_ref: User generating the report card
            comment: Optional free-text appreciation

        Returns:
            The stored ReportCard (unpublished)
        """
        period = parse_period(period)
        academic_year = parse_academic_year(academic_year)
        class_ref = await self.roster_store.class_of(student_ref)

        logger.info(f"📄 Generating report card for student {student_ref} ({period.value}, {academic_year})")

        draft = await self._build(student_ref, period, academic_year)
        rank_result = await self.rank_in_class(class_ref, student_ref, period)

        card = draft.model_copy(update={
            "rank": rank_result.rank,
            "class_size": rank_result.class_size,
            "comment": comment,
            "generated_by": actor_ref,
        })
        created = await self.report_card_store.insert(card)

        logger.info(
            f"✅ Report card {created.id}: {created.average_display} {created.mention.value} "
            f"rank {created.rank_display}"
        )
        return created

    async def prepare(self, student_ref: int, period: Period, academic_year: str) -> StudentOutcome:
        """
        Run the uniqueness check, average and mention for one student

        Expected failures (duplicate, no grades) come back as an outcome
        instead of an exception. The draft card is unranked and unsaved.
        """
        try:
            draft = await self._build(student_ref, period, academic_year)
        except (DuplicateReportCardError, NoGradesError) as e:
            return StudentOutcome(student_ref=student_ref, error_kind=e.kind, message=e.message)
        return StudentOutcome(student_ref=student_ref, report_card=draft)

    async def rank_in_class(self, class_ref: int, student_ref: int, period: Period) -> RankResult:
        """Rank a student among classmates who have grades for the period"""
        roster = await self.roster_store.students_of(class_ref)

        averages = {}
        for classmate in roster:
            entries = await self.grade_store.find_by_student_and_period(classmate, period)
            if entries:
                averages[classmate] = self.average_calculator.calculate_for_entries(entries, student_ref=classmate)

        rankings = self.rank_engine.calculate_rankings(averages)
        result = rankings.get(student_ref)
        if result is None:
            raise NotFoundError("Élève dans la classe", student_ref)
        return result

    async def _build(self, student_ref: int, period: Period, academic_year: str) -> ReportCard:
        existing = await self.report_card_store.find_one(student_ref, period, academic_year)
        if existing is not None:
            raise DuplicateReportCardError(student_ref, period.value, academic_year)

        entries = await self.grade_store.find_by_student_and_period(student_ref, period)
        if not entries:
            raise NoGradesError(student_ref=student_ref)

        average = self.average_calculator.calculate_for_entries(entries, student_ref=student_ref)
        mention = self.mention_classifier.classify(average)

        return ReportCard(
            student_ref=student_ref,
            period=period,
            academic_year=academic_year,
            average=average,
            mention=mention,
            rank=1,
            class_size=1,
            published=False,
        )
