"""
AVERAGE CALCULATOR - Period average for one student
Reduce a student's grade entries for one period to a single rounded mean

CALCULATION:
✅ Arithmetic mean of all grade values (0-20 scale)
✅ Rounded to 2 decimals, half away from zero (15.125 -> 15.13)
✅ Decimal arithmetic so binary float noise never flips a rounding

PRECONDITIONS:
- At least one grade: an empty sequence raises NoGradesError, it never averages to zero
- Every value within 0-20: anything else raises ValidationError
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional
import logging

from bulletin_builder.core.models import GradeEntry, check_grade_value
from bulletin_builder.exceptions import NoGradesError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def round_half_up(value, places: Decimal = TWO_PLACES) -> float:
    """Round half away from zero (positive scale, so HALF_UP is enough)"""
    return float(Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP))


class AverageCalculator:
    """Calculate period averages from grade values"""

    def __init__(self):
        self.calculation_log: List[str] = []

    def calculate(self, values: Iterable[float], student_ref: Optional[int] = None) -> float:
        """
        Calculate the rounded mean of grade values

        Args:
            values: Grade values for one student and one period
            student_ref: Optional student ID, used for logging only

        Returns:
            Mean rounded to 2 decimals
        """
        values = [check_grade_value(v) for v in values]
        self.calculation_log = []
        self.calculation_log.append(f"📊 Calculating average for student {student_ref} ({len(values)} grades)")

        if not values:
            raise NoGradesError(student_ref=student_ref)

        total = sum((Decimal(str(v)) for v in values), Decimal(0))
        mean = total / Decimal(len(values))
        average = float(mean.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))

        self.calculation_log.append(f"✅ Average: {average:.2f}/20")
        logger.debug(f"Student {student_ref}: {len(values)} grades -> {average:.2f}")
        return average

    def calculate_for_entries(self, entries: Iterable[GradeEntry], student_ref: Optional[int] = None) -> float:
        """Calculate the rounded mean of grade entries"""
        return self.calculate([entry.value for entry in entries], student_ref=student_ref)

    def get_calculation_log(self) -> List[str]:
        """Get detailed calculation log"""
        return self.calculation_log
