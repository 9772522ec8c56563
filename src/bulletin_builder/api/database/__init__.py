from bulletin_builder.api.database.models import (
    Base,
    Grade,
    NotificationRecord,
    ReportCardRecord,
    SchoolClass,
    Student,
    Subject,
)
from bulletin_builder.api.database.stores import SqlClassRosterStore, SqlGradeStore, SqlReportCardStore

__all__ = [
    'Base',
    'SchoolClass',
    'Student',
    'Subject',
    'Grade',
    'ReportCardRecord',
    'NotificationRecord',
    'SqlGradeStore',
    'SqlClassRosterStore',
    'SqlReportCardStore',
]
