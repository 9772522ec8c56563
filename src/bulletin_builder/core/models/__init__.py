from bulletin_builder.core.models.grades import (
    MAX_GRADE,
    MIN_GRADE,
    GradeEntry,
    Mention,
    Period,
    check_grade_value,
    parse_academic_year,
    parse_period,
)
from bulletin_builder.core.models.report_cards import (
    BatchGenerationResult,
    Notification,
    ReportCard,
    ReportCardDetail,
    ReportCardFilter,
    StudentOutcome,
)

__all__ = [
    'MIN_GRADE',
    'MAX_GRADE',
    'Period',
    'Mention',
    'GradeEntry',
    'parse_period',
    'parse_academic_year',
    'check_grade_value',
    'ReportCard',
    'StudentOutcome',
    'BatchGenerationResult',
    'ReportCardDetail',
    'ReportCardFilter',
    'Notification',
]
