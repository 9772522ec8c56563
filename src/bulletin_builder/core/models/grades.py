"""
Grade-side data models: periods, mentions and grade entries

Values use the fixed 0-20 scale. Grade entries are read-only for the
aggregation engine; they are owned by the grading subsystem.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from bulletin_builder.exceptions import ValidationError

MIN_GRADE = 0.0
MAX_GRADE = 20.0

ACADEMIC_YEAR_PATTERN = re.compile(r'^\d{4}\s*-\s*\d{4}$')


class Period(str, Enum):
    """Grading terms of an academic year"""
    P1 = "trimestre_1"
    P2 = "trimestre_2"
    P3 = "trimestre_3"

    @property
    def label(self) -> str:
        """Human-readable period label"""
        return PERIOD_LABELS[self]


PERIOD_LABELS = {
    Period.P1: "1er Trimestre",
    Period.P2: "2ème Trimestre",
    Period.P3: "3ème Trimestre",
}


class Mention(str, Enum):
    """Qualitative bands, best first"""
    EXCELLENT = "Excellent"
    TRES_BIEN = "Très bien"
    BIEN = "Bien"
    ASSEZ_BIEN = "Assez bien"
    PASSABLE = "Passable"
    INSUFFISANT = "Insuffisant"

    @property
    def level(self) -> int:
        """Position in the total order (0 = Insuffisant, 5 = Excellent)"""
        return MENTION_LEVELS[self]


MENTION_LEVELS = {
    Mention.INSUFFISANT: 0,
    Mention.PASSABLE: 1,
    Mention.ASSEZ_BIEN: 2,
    Mention.BIEN: 3,
    Mention.TRES_BIEN: 4,
    Mention.EXCELLENT: 5,
}


def parse_period(value: Union[Period, str]) -> Period:
    """Accept a Period, its stored value ("trimestre_1") or its name ("P1")"""
    if isinstance(value, Period):
        return value
    try:
        return Period(value)
    except ValueError:
        pass
    try:
        return Period[str(value).upper()]
    except KeyError:
        raise ValidationError(f"Période invalide: {value!r}")


def parse_academic_year(value: str) -> str:
    """Validate the "YYYY-YYYY" academic year format"""
    if not isinstance(value, str) or not ACADEMIC_YEAR_PATTERN.match(value.strip()):
        raise ValidationError(f'Année scolaire invalide, format attendu "YYYY-YYYY": {value!r}')
    return value.strip()


def check_grade_value(value: float) -> float:
    """Reject values outside the 0-20 scale"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Note non numérique: {value!r}")
    if not (MIN_GRADE <= number <= MAX_GRADE):
        raise ValidationError(f"Note hors barème (0-20): {value!r}")
    return number


class GradeEntry(BaseModel):
    """One recorded grade for one student in one subject"""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(None, description="Grade entry ID")
    value: float = Field(..., ge=MIN_GRADE, le=MAX_GRADE, description="Grade on the 0-20 scale")
    period: Period = Field(..., description="Grading period")
    subject_ref: int = Field(..., description="Subject ID")
    subject_name: Optional[str] = Field(None, description="Subject name for detail breakdowns")
    student_ref: int = Field(..., description="Student ID")
    class_ref: Optional[int] = Field(None, description="Class the grade was recorded in")
    evaluation_type: Optional[str] = Field(None, description="Kind of evaluation (devoir, composition, ...)")
    comment: Optional[str] = Field(None, description="Teacher comment")
    recorded_at: datetime = Field(..., description="When the grade was recorded")


__all__ = [
    'MIN_GRADE',
    'MAX_GRADE',
    'Period',
    'PERIOD_LABELS',
    'Mention',
    'MENTION_LEVELS',
    'GradeEntry',
    'parse_period',
    'parse_academic_year',
    'check_grade_value',
]
