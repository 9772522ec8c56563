"""
Collaborator interfaces consumed by the bulletin services

The services only depend on these protocols; the SQLAlchemy adapters in
bulletin_builder.api.database are one implementation.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from bulletin_builder.core.models import GradeEntry, Period, ReportCard


class GradeStore(Protocol):
    async def find_by_student_and_period(self, student_ref: int, period: Period) -> List[GradeEntry]:
        ...


class ClassRosterStore(Protocol):
    async def students_of(self, class_ref: int) -> List[int]:
        """Ordered student refs of a class; raises NotFoundError for an unknown class"""
        ...

    async def class_of(self, student_ref: int) -> int:
        """Class of a student; raises NotFoundError for an unknown student"""
        ...

    async def display_name(self, student_ref: int) -> str:
        ...


class ReportCardStore(Protocol):
    async def find_one(self, student_ref: int, period: Period, academic_year: str) -> Optional[ReportCard]:
        ...

    async def get(self, report_card_id: int) -> Optional[ReportCard]:
        ...

    async def insert(self, report_card: ReportCard) -> ReportCard:
        """Persist a card; raises DuplicateReportCardError on a uniqueness conflict"""
        ...

    async def update(self, report_card_id: int, fields: Dict[str, Any]) -> ReportCard:
        ...

    async def update_ranks(self, ranks: Dict[int, Dict[str, int]]) -> None:
        """Write {report_card_id: {"rank": ..., "class_size": ...}} in one commit"""
        ...

    async def find_for_students(
        self, student_refs: Sequence[int], period: Period, academic_year: str
    ) -> List[ReportCard]:
        ...


class NotificationService(Protocol):
    async def send(
        self,
        recipient: int,
        title: str,
        body: str,
        category: str,
        priority: str,
        actor_ref: Optional[int],
        payload: Optional[Dict[str, Any]] = None,
        link: Optional[str] = None,
    ) -> Any:
        ...
