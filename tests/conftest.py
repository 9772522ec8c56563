"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- In-memory database sessions
- A seeded school (one class of five students, one other class, two subjects)
- Wired bulletin services
"""

import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional, Sequence

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bulletin_builder.api.database.models import Base, Grade, ReportCardRecord, SchoolClass, Student, Subject
from bulletin_builder.api.dependencies import BulletinServices, build_services
from bulletin_builder.config import EngineSettings
from bulletin_builder.core.models import Period

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"

ACADEMIC_YEAR = "2024-2025"
MATH_TEACHER = 100
FRENCH_TEACHER = 101


@pytest.fixture
async def engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for each test"""
    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(database_url=TEST_DATABASE_URL)


@pytest.fixture
def services(db_session: AsyncSession, settings: EngineSettings) -> BulletinServices:
    return build_services(db_session, settings)


@dataclass
class SchoolFixture:
    """Seeded school data plus a helper to record grades"""

    db: AsyncSession
    class_ref: int
    other_class_ref: int
    students: List[int]
    other_student: int
    subjects: Dict[str, int] = field(default_factory=dict)

    async def add_grades(
        self,
        student_ref: int,
        values: Sequence[float],
        period: Period = Period.P1,
        subject: Optional[str] = None,
        class_ref: Optional[int] = None,
    ) -> None:
        """Record grades, alternating subjects unless one is given"""
        subject_names = [subject] if subject else sorted(self.subjects)
        start = datetime(2024, 10, 1, 8, 0)
        for i, value in enumerate(values):
            self.db.add(Grade(
                student_id=student_ref,
                subject_id=self.subjects[subject_names[i % len(subject_names)]],
                class_id=class_ref or self.class_ref,
                value=value,
                period=period.value,
                evaluation_type="devoir",
                recorded_at=start + timedelta(days=i),
            ))
        await self.db.commit()


@pytest.fixture
async def school(db_session: AsyncSession) -> SchoolFixture:
    """Create a class of five students (roster order = id order) and a second class"""
    class_a = SchoolClass(name="6ème A", level="6ème", academic_year=ACADEMIC_YEAR)
    class_b = SchoolClass(name="6ème B", level="6ème", academic_year=ACADEMIC_YEAR)
    db_session.add_all([class_a, class_b])
    await db_session.flush()

    names = [
        ("Alice", "Martin"),
        ("Bruno", "Diallo"),
        ("Chloé", "Ndiaye"),
        ("David", "Koné"),
        ("Emma", "Sow"),
    ]
    students = []
    for i, (first_name, last_name) in enumerate(names, start=1):
        student = Student(
            class_id=class_a.id,
            registration_number=f"MAT-{i:04d}",
            first_name=first_name,
            last_name=last_name,
        )
        db_session.add(student)
        await db_session.flush()
        students.append(student.id)

    other = Student(class_id=class_b.id, registration_number="MAT-0100", first_name="Farid", last_name="Benali")
    db_session.add(other)

    math = Subject(name="Mathématiques", coefficient=4.0, teacher_id=MATH_TEACHER)
    french = Subject(name="Français", coefficient=3.0, teacher_id=FRENCH_TEACHER)
    db_session.add_all([math, french])
    await db_session.commit()

    return SchoolFixture(
        db=db_session,
        class_ref=class_a.id,
        other_class_ref=class_b.id,
        students=students,
        other_student=other.id,
        subjects={"Français": french.id, "Mathématiques": math.id},
    )


@pytest.fixture
def locked_report_cards():
    """Make report card inserts fail with a locked-database error for the student refs added to the set"""
    locked = set()

    def before_insert(mapper, connection, target):
        if target.student_id in locked:
            raise OperationalError("INSERT INTO report_cards", {}, Exception("database is locked"))

    event.listen(ReportCardRecord, "before_insert", before_insert)
    yield locked
    event.remove(ReportCardRecord, "before_insert", before_insert)
