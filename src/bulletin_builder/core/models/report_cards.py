"""
Report card (bulletin) data models

ReportCard is the persisted per-student-per-period summary. The remaining
models describe what the services hand back: batch outcomes, detail
breakdowns, list filters and notifications.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bulletin_builder.core.models.grades import (
    ACADEMIC_YEAR_PATTERN,
    MAX_GRADE,
    MIN_GRADE,
    GradeEntry,
    Mention,
    Period,
)
from bulletin_builder.exceptions import ErrorKind


class ReportCard(BaseModel):
    """Period summary for one student"""

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = Field(None, description="Report card ID, set once persisted")
    student_ref: int = Field(..., description="Student ID")
    period: Period = Field(..., description="Grading period")
    academic_year: str = Field(..., description="Academic year (e.g., '2024-2025')")

    average: float = Field(..., ge=MIN_GRADE, le=MAX_GRADE, description="Mean grade rounded to 2 decimals")
    mention: Mention = Field(..., description="Qualitative band derived from the average")
    rank: int = Field(..., ge=1, description="Position in the ranked cohort")
    class_size: int = Field(..., ge=1, description="Rank denominator")

    published: bool = Field(False, description="Visible to the student")
    comment: Optional[str] = Field(None, description="Free-text appreciation")
    pdf_path: Optional[str] = Field(None, description="Rendered PDF location (rendering not implemented)")
    generated_by: Optional[int] = Field(None, description="Actor who generated the card")

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('academic_year')
    @classmethod
    def validate_academic_year(cls, v):
        """Validate academic year format"""
        if not ACADEMIC_YEAR_PATTERN.match(v.strip()):
            raise ValueError(f'Academic year must be in format "YYYY-YYYY", got: {v}')
        return v.strip()

    @property
    def period_label(self) -> str:
        return self.period.label

    @property
    def average_display(self) -> str:
        """Formatted average, e.g. '15.00/20'"""
        return f"{self.average:.2f}/20"

    @property
    def rank_display(self) -> str:
        """Formatted rank, e.g. '2/25'"""
        return f"{self.rank}/{self.class_size}"


class StudentOutcome(BaseModel):
    """Result of one student's step in a batch: a report card or an error"""

    student_ref: int
    report_card: Optional[ReportCard] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None and self.report_card is not None


class BatchGenerationResult(BaseModel):
    """Summary of a whole-class generation run"""

    class_ref: int
    period: Period
    academic_year: str
    created_count: int = 0
    error_messages: List[str] = Field(default_factory=list)
    created_report_cards: List[ReportCard] = Field(default_factory=list)
    outcomes: List[StudentOutcome] = Field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.error_messages)


class ReportCardDetail(BaseModel):
    """Report card with the period's grades grouped by subject name"""

    report_card: ReportCard
    grades_by_subject: Dict[str, List[GradeEntry]] = Field(default_factory=dict)


class ReportCardFilter(BaseModel):
    """Optional filters for listing report cards"""

    period: Optional[Period] = None
    academic_year: Optional[str] = None
    published: Optional[bool] = None
    class_ref: Optional[int] = None
    search: Optional[str] = Field(None, description="Matches first name, last name or registration number")


class Notification(BaseModel):
    """In-app notification addressed to one recipient"""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    recipient_ref: int
    title: str
    body: str
    category: str
    priority: str = "normale"
    actor_ref: Optional[int] = None
    payload: Optional[Dict[str, Any]] = None
    link: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None


__all__ = [
    'ReportCard',
    'StudentOutcome',
    'BatchGenerationResult',
    'ReportCardDetail',
    'ReportCardFilter',
    'Notification',
]
