"""
RANK ENGINE - Class ranking from period averages
Rank every student of a cohort who has at least one grade for the period

RANKING METHODOLOGY:
✅ Primary Sort: period average (descending)
✅ Tie Handling: ties are NOT collapsed, ranks are always 1..N without gaps
✅ Tie-Break: presentation order, the student given to the engine first gets the better rank
✅ Class Size: number of ranked students (students without grades are left out by the caller)

The presentation-order tie-break keeps ranks compatible with report cards
issued by the legacy system. It is not a statistical ideal: two students
with identical averages are separated only by the order they were supplied
in (roster order for single generation, creation order for batches), never
by name or ID.

OUTPUT FORMATS:
- Rank: "3/25"
- Percentile: "Top 12%"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

import pandas as pd

logger = logging.getLogger(__name__)

StudentAverages = Union[Mapping[int, float], Iterable[Tuple[int, float]]]


@dataclass
class RankResult:
    """Rank calculation result for a student"""
    student_ref: int
    rank: int
    class_size: int
    average: float

    @property
    def percentile(self) -> float:
        return (self.rank / self.class_size) * 100

    @property
    def rank_display(self) -> str:
        """Get formatted rank display"""
        return f"{self.rank}/{self.class_size}"

    @property
    def percentile_display(self) -> str:
        """Get formatted percentile display"""
        if self.percentile <= 10:
            return "Top 10%"
        elif self.percentile <= 25:
            return "Top 25%"
        elif self.percentile <= 50:
            return "Top Half"
        else:
            return f"Top {int(self.percentile)}%"


class RankEngine:
    """Calculate class rankings from period averages"""

    def __init__(self):
        self.rankings: Dict[int, RankResult] = {}
        self.ranking_log: List[str] = []

    def calculate_rankings(self, student_averages: StudentAverages) -> Dict[int, RankResult]:
        """
        Calculate rankings for a cohort

        Args:
            student_averages: Ordered mapping of student_ref -> average, or
                (student_ref, average) pairs; order decides ties

        Returns:
            Dictionary mapping student_ref to RankResult, in rank order
        """
        if isinstance(student_averages, Mapping):
            entries = list(student_averages.items())
        else:
            entries = list(student_averages)

        self.ranking_log = []
        self.ranking_log.append(f"🏆 Calculating rankings for {len(entries)} students")

        if not entries:
            self.rankings = {}
            self.ranking_log.append("⚠️ No students to rank")
            return {}

        # sorted() is stable, also with reverse=True: equal averages keep input order
        sorted_students = sorted(entries, key=lambda x: x[1], reverse=True)
        class_size = len(sorted_students)

        rankings = {}
        for position, (student_ref, average) in enumerate(sorted_students, start=1):
            rankings[student_ref] = RankResult(
                student_ref=student_ref,
                rank=position,
                class_size=class_size,
                average=average,
            )

            if position <= 10:
                self.ranking_log.append(f"   #{position}: Student {student_ref} - {average:.2f}/20")

        self.rankings = rankings

        self.ranking_log.append("✅ Rankings calculated successfully")
        self.ranking_log.append(f"   Rank range: 1 to {class_size}")
        self.ranking_log.append(f"   Top average: {sorted_students[0][1]:.2f}")
        self.ranking_log.append(f"   Median average: {sorted_students[class_size // 2][1]:.2f}")
        logger.debug(f"Ranked {class_size} students")

        return rankings

    def get_student_rank(self, student_ref: int) -> Optional[RankResult]:
        """Get rank for specific student"""
        return self.rankings.get(student_ref)

    def get_top_students(self, n: int = 10) -> List[Tuple[int, RankResult]]:
        """Get top N students by rank"""
        sorted_rankings = sorted(self.rankings.items(), key=lambda x: x[1].rank)
        return sorted_rankings[:n]

    def generate_ranking_report(self, output_path: Optional[Path] = None) -> pd.DataFrame:
        """
        Generate ranking report

        Args:
            output_path: Optional path to save CSV report

        Returns:
            DataFrame with one row per ranked student, sorted by rank
        """
        if not self.rankings:
            logger.warning("No rankings calculated yet")
            return pd.DataFrame()

        records = []
        for student_ref, result in self.rankings.items():
            records.append({
                'Student ID': student_ref,
                'Average': result.average,
                'Rank': result.rank,
                'Class Size': result.class_size,
                'Percentile': f"{result.percentile:.1f}%",
                'Rank Display': result.rank_display,
                'Percentile Display': result.percentile_display,
            })

        df = pd.DataFrame(records)
        df = df.sort_values('Rank').reset_index(drop=True)

        if output_path:
            df.to_csv(output_path, index=False)
            logger.info(f"Ranking report saved to: {output_path}")

        return df

    def get_ranking_log(self) -> List[str]:
        """Get detailed ranking calculation log"""
        return self.ranking_log
