"""
SQLAlchemy models for the school records the bulletin engine reads and writes

No ON DELETE CASCADE: deletions are performed explicitly by the services.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SchoolClass(Base):
    __tablename__ = "school_classes"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    level = Column(String(50), nullable=True)
    academic_year = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True)
    class_id = Column(Integer, ForeignKey("school_classes.id"), nullable=True)
    registration_number = Column(String(50), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


Index("ix_students_class", Student.class_id)


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    coefficient = Column(Float, default=1.0)
    teacher_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Grade(Base):
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("school_classes.id"), nullable=True)
    value = Column(Float, nullable=False)
    period = Column(String(20), nullable=False)
    evaluation_type = Column(String(50), nullable=True)
    comment = Column(Text, nullable=True)
    recorded_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)


Index("ix_grades_student_period", Grade.student_id, Grade.period)


class ReportCardRecord(Base):
    __tablename__ = "report_cards"
    __table_args__ = (
        UniqueConstraint("student_id", "period", "academic_year", name="uq_report_card_student_period_year"),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    period = Column(String(20), nullable=False)
    academic_year = Column(String(20), nullable=False)
    average = Column(Float, nullable=False)
    mention = Column(String(20), nullable=False)
    rank = Column(Integer, nullable=False)
    class_size = Column(Integer, nullable=False)
    published = Column(Boolean, nullable=False, default=False)
    comment = Column(Text, nullable=True)
    pdf_path = Column(String(500), nullable=True)
    generated_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


Index("ix_report_cards_period_year", ReportCardRecord.period, ReportCardRecord.academic_year)


class NotificationRecord(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    recipient_id = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)
    priority = Column(String(20), nullable=False, default="normale")
    actor_id = Column(Integer, nullable=True)
    payload = Column(JSON, nullable=True)
    link = Column(String(255), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


Index("ix_notifications_recipient", NotificationRecord.recipient_id, NotificationRecord.is_read)
