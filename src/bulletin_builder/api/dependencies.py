"""
Wire the bulletin services onto one database session
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bulletin_builder.api.database.stores import SqlClassRosterStore, SqlGradeStore, SqlReportCardStore
from bulletin_builder.api.services import (
    BatchGenerationCoordinator,
    GradeRecorder,
    InAppNotificationService,
    PublicationWorkflow,
    ReportCardGenerator,
    ReportCardQueryService,
)
from bulletin_builder.config import EngineSettings, get_settings


@dataclass
class BulletinServices:
    generator: ReportCardGenerator
    batch: BatchGenerationCoordinator
    publication: PublicationWorkflow
    queries: ReportCardQueryService
    grading: GradeRecorder
    notifications: InAppNotificationService


def build_services(db: AsyncSession, settings: Optional[EngineSettings] = None) -> BulletinServices:
    settings = settings or get_settings()

    grade_store = SqlGradeStore(db)
    roster_store = SqlClassRosterStore(db)
    report_card_store = SqlReportCardStore(db)
    notifications = InAppNotificationService(db)

    generator = ReportCardGenerator(grade_store, roster_store, report_card_store)
    return BulletinServices(
        generator=generator,
        batch=BatchGenerationCoordinator(generator, roster_store, report_card_store, settings=settings),
        publication=PublicationWorkflow(report_card_store, notifications),
        queries=ReportCardQueryService(report_card_store, grade_store, roster_store, notifications),
        grading=GradeRecorder(db, notifications),
        notifications=notifications,
    )
