"""
BATCH GENERATION COORDINATOR - Report cards for a whole class
Generates every eligible report card of a class and ranks the results

BATCH FLOW:
1. Load the class roster (unknown class -> NotFoundError, nothing created)
2. For each student: uniqueness check, average and mention via ReportCardGenerator.prepare
3. Failures become per-student outcomes with a readable message; the loop never aborts
   (the store rolls back a failed insert, so later students and the rank pass share a clean session)
4. Successful cards are stored with a provisional rank and class_size
5. One rank pass over the cohort, then ranks (and class_size) are overwritten

COHORT POLICIES (EngineSettings):
- batch_rank_scope=batch: rank only the cards created by this call (legacy behavior;
  cards created by earlier calls for the same class keep their ranks)
- batch_rank_scope=class: also rank the class's existing cards for the period/year
- batch_class_size_policy=roster: class_size is the full roster size (legacy behavior)
- batch_class_size_policy=ranked: class_size is the number of ranked cards
"""

from typing import Dict, List, Optional, Sequence, Union
import logging

from tqdm import tqdm

from bulletin_builder.api.services.report_card_service import ReportCardGenerator
from bulletin_builder.config import ClassSizePolicy, EngineSettings, RankScope, get_settings
from bulletin_builder.core.calculators import RankEngine
from bulletin_builder.core.interfaces import ClassRosterStore, ReportCardStore
from bulletin_builder.core.models import (
    BatchGenerationResult,
    Period,
    ReportCard,
    StudentOutcome,
    parse_academic_year,
    parse_period,
)
from bulletin_builder.exceptions import BulletinError, DuplicateReportCardError, ErrorKind

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    ErrorKind.DUPLICATE_REPORT_CARD: "Bulletin déjà existant pour {name}",
    ErrorKind.NO_GRADES: "Aucune note pour {name}",
}


class BatchGenerationCoordinator:
    """Generate report cards for every student of a class"""

    def __init__(
        self,
        generator: ReportCardGenerator,
        roster_store: ClassRosterStore,
        report_card_store: ReportCardStore,
        settings: Optional[EngineSettings] = None,
        rank_engine: Optional[RankEngine] = None,
    ):
        self.generator = generator
        self.roster_store = roster_store
        self.report_card_store = report_card_store
        self.settings = settings or get_settings()
        self.rank_engine = rank_engine or RankEngine()

    async def generate_for_class(
        self,
        class_ref: int,
        period: Union[Period, str],
        academic_year: str,
        actor_ref: Optional[int] = None,
    ) -> BatchGenerationResult:
        """
        Generate report cards for a class

        Args:
            class_ref: Class ID
            period: Grading period
            academic_year: Academic year ("YYYY-YYYY")
            actor_ref: User running the batch

        Returns:
            BatchGenerationResult with created cards (ranked) and error messages
        """
        period = parse_period(period)
        academic_year = parse_academic_year(academic_year)
        roster = await self.roster_store.students_of(class_ref)

        logger.info(
            f"🚀 Batch generation for class {class_ref}: {len(roster)} students "
            f"({period.value}, {academic_year})"
        )

        result = BatchGenerationResult(class_ref=class_ref, period=period, academic_year=academic_year)
        created: List[ReportCard] = []

        iterator = tqdm(roster, desc="Bulletins", unit="élève") if self.settings.show_progress else roster
        for student_ref in iterator:
            outcome = await self._process_student(student_ref, period, academic_year, len(roster), actor_ref)
            result.outcomes.append(outcome)
            if outcome.ok:
                created.append(outcome.report_card)
            else:
                result.error_messages.append(outcome.message)

        ranked = await self._recalculate_ranks(created, roster, period, academic_year)

        ranked_by_student = {card.student_ref: card for card in ranked}
        for outcome in result.outcomes:
            if outcome.ok:
                outcome.report_card = ranked_by_student[outcome.student_ref]

        result.created_report_cards = ranked
        result.created_count = len(ranked)

        logger.info(f"✅ Batch done for class {class_ref}: {result.created_count} created, {result.failed_count} failed")
        return result

    async def _process_student(
        self,
        student_ref: int,
        period: Period,
        academic_year: str,
        roster_size: int,
        actor_ref: Optional[int],
    ) -> StudentOutcome:
        name = f"élève {student_ref}"
        try:
            name = await self.roster_store.display_name(student_ref)
            outcome = await self.generator.prepare(student_ref, period, academic_year)
            if not outcome.ok:
                return outcome.model_copy(update={"message": ERROR_MESSAGES[outcome.error_kind].format(name=name)})

            card = outcome.report_card.model_copy(update={
                "rank": 1,
                "class_size": roster_size,
                "generated_by": actor_ref,
            })
            stored = await self.report_card_store.insert(card)
            return StudentOutcome(student_ref=student_ref, report_card=stored)

        except DuplicateReportCardError as e:
            # Lost the race against a concurrent insert for the same key
            return StudentOutcome(
                student_ref=student_ref,
                error_kind=e.kind,
                message=ERROR_MESSAGES[e.kind].format(name=name),
            )
        except BulletinError as e:
            return StudentOutcome(student_ref=student_ref, error_kind=e.kind, message=f"Erreur pour {name}: {e.message}")
        except Exception as e:
            logger.exception(f"Unexpected error while generating report card for student {student_ref}")
            return StudentOutcome(student_ref=student_ref, error_kind=ErrorKind.INTERNAL, message=f"Erreur pour {name}: {e}")

    async def _recalculate_ranks(
        self,
        created: List[ReportCard],
        roster: Sequence[int],
        period: Period,
        academic_year: str,
    ) -> List[ReportCard]:
        """Rank the cohort once and write ranks back; returns the created cards updated"""
        if self.settings.batch_rank_scope == RankScope.CLASS:
            # Ordered by id, i.e. creation order, so earlier cards win ties
            cohort = await self.report_card_store.find_for_students(roster, period, academic_year)
        else:
            cohort = list(created)

        if not cohort:
            return []

        rankings = self.rank_engine.calculate_rankings([(card.student_ref, card.average) for card in cohort])

        if self.settings.batch_class_size_policy == ClassSizePolicy.RANKED:
            class_size = len(cohort)
        else:
            class_size = len(roster)

        updates: Dict[int, Dict[str, int]] = {}
        for card in cohort:
            updates[card.id] = {"rank": rankings[card.student_ref].rank, "class_size": class_size}

        await self.report_card_store.update_ranks(updates)

        for entry in self.rank_engine.get_ranking_log():
            logger.debug(entry)

        return [card.model_copy(update=updates[card.id]) for card in created]
