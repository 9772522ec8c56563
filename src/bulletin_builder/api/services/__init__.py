from bulletin_builder.api.services.batch_service import BatchGenerationCoordinator
from bulletin_builder.api.services.grading_service import GradeRecorder
from bulletin_builder.api.services.notification_service import InAppNotificationService
from bulletin_builder.api.services.publication_service import PublicationWorkflow
from bulletin_builder.api.services.query_service import ReportCardQueryService
from bulletin_builder.api.services.report_card_service import ReportCardGenerator

__all__ = [
    'ReportCardGenerator',
    'BatchGenerationCoordinator',
    'PublicationWorkflow',
    'ReportCardQueryService',
    'GradeRecorder',
    'InAppNotificationService',
]
