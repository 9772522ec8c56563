"""
Error taxonomy for the bulletin engine

Single-item operations raise these errors directly. Batch generation never
lets them cross the batch boundary: each failure is turned into a
StudentOutcome carrying the ErrorKind and a human-readable message.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable error category"""
    VALIDATION = "validation"
    DUPLICATE_REPORT_CARD = "duplicate_report_card"
    NO_GRADES = "no_grades"
    UNAUTHORIZED_SUBJECT = "unauthorized_subject"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class BulletinError(Exception):
    """Base class for every error raised by the engine"""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BulletinError, ValueError):
    """Malformed or out-of-range input, surfaced to the caller verbatim"""

    kind = ErrorKind.VALIDATION


class DuplicateReportCardError(BulletinError):
    """A report card already exists for (student, period, academic year)"""

    kind = ErrorKind.DUPLICATE_REPORT_CARD

    def __init__(self, student_ref: int, period: str, academic_year: str, message: Optional[str] = None):
        self.student_ref = student_ref
        self.period = period
        self.academic_year = academic_year
        super().__init__(
            message
            or f"Un bulletin existe déjà pour l'élève {student_ref} ({period}, {academic_year})"
        )


class NoGradesError(BulletinError):
    """No grade entries to average"""

    kind = ErrorKind.NO_GRADES

    def __init__(self, message: str = "Aucune note trouvée pour cette période", student_ref: Optional[int] = None):
        self.student_ref = student_ref
        super().__init__(message)


class UnauthorizedSubjectError(BulletinError):
    """Actor tried to grade or manage a subject they do not own"""

    kind = ErrorKind.UNAUTHORIZED_SUBJECT

    def __init__(self, actor_ref: int, subject_ref: int):
        self.actor_ref = actor_ref
        self.subject_ref = subject_ref
        super().__init__("Vous n'êtes pas autorisé à noter cette matière")


class NotFoundError(BulletinError, LookupError):
    """Referenced entity is missing"""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, ref):
        self.entity = entity
        self.ref = ref
        super().__init__(f"{entity} {ref} non trouvé")


__all__ = [
    'ErrorKind',
    'BulletinError',
    'ValidationError',
    'DuplicateReportCardError',
    'NoGradesError',
    'UnauthorizedSubjectError',
    'NotFoundError',
]
