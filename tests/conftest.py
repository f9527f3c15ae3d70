import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.deps import get_db, get_now
from app.core.security import create_access_token
from app.db.base import Base
from app.main import app
from app.models.assignment import Assignment
from app.models.content_progress import ContentProgress
from app.models.course import Course, CourseOffering
from app.models.course_section import CourseSection
from app.models.enrollment import Enrollment
from app.models.module import Module, ModuleContent, ModuleSection
from app.models.user import User

TEST_DB_FILE = "test_progress_rollup.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# fixed clock so overdue checks are deterministic
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def override_get_now():
    return NOW


@dataclass
class Seed:
    """Ids of the rows seeded for each test."""

    s1: int
    s2: int
    s3: int
    s4: int
    mentor1: int
    mentor2: int
    admin: int
    offering1: int
    offering2: int
    m_vars: int
    m_loops: int
    m_draft: int
    m_calc: int
    i1: int
    i2: int
    i_future: int
    i_calc: int


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


def _clear(db) -> None:
    # child -> parent
    for model in (
        ContentProgress,
        Assignment,
        ModuleContent,
        ModuleSection,
        Module,
        Enrollment,
        CourseSection,
        CourseOffering,
        Course,
        User,
    ):
        db.query(model).delete()
    db.commit()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def seed(db) -> Seed:
    """
    Seed a clean dataset for each test.

    Offering 1 ("CS101"): mentor1 owns section A (s1 enrolled, s2 completed),
    mentor2 owns section B (s3 dropped, s4 enrolled).
    Offering 2 ("MA201"): mentor1 owns section C (s1 enrolled).

    "Variables" module (offering 1) has one published section with
    i1 (assignment due yesterday) and i2 (lesson), plus an unpublished section
    and an unpublished item that must never be counted.
    s1 completed i1 and i2, s2 completed i2 only.
    """
    _clear(db)

    def user(email, first, last, role):
        u = User(email=email, first_name=first, last_name=last, role=role)
        db.add(u)
        return u

    s1 = user("s1@example.com", "Ana", "Reyes", "student")
    s2 = user("s2@example.com", "Ben", "Cruz", "student")
    s3 = user("s3@example.com", "Cy", "Lim", "student")
    s4 = user("s4@example.com", "Dee", "Tan", "student")
    mentor1 = user("mentor1@example.com", "Mia", "Uy", "mentor")
    mentor2 = user("mentor2@example.com", "Noel", "Go", "mentor")
    admin = user("admin@example.com", "Ada", "Min", "admin")
    db.commit()

    cs101 = Course(name="Intro to Programming", course_code="CS101")
    ma201 = Course(name="Calculus", course_code="MA201")
    db.add_all([cs101, ma201])
    db.commit()

    offering1 = CourseOffering(course_id=cs101.id)
    offering2 = CourseOffering(course_id=ma201.id)
    db.add_all([offering1, offering2])
    db.commit()

    sec_a = CourseSection(name="A", mentor_id=mentor1.id, course_offering_id=offering1.id)
    sec_b = CourseSection(name="B", mentor_id=mentor2.id, course_offering_id=offering1.id)
    sec_c = CourseSection(name="C", mentor_id=mentor1.id, course_offering_id=offering2.id)
    db.add_all([sec_a, sec_b, sec_c])
    db.commit()

    db.add_all(
        [
            Enrollment(student_id=s1.id, course_offering_id=offering1.id, course_section_id=sec_a.id, status="enrolled"),
            Enrollment(student_id=s2.id, course_offering_id=offering1.id, course_section_id=sec_a.id, status="completed"),
            Enrollment(student_id=s3.id, course_offering_id=offering1.id, course_section_id=sec_b.id, status="dropped"),
            Enrollment(student_id=s4.id, course_offering_id=offering1.id, course_section_id=sec_b.id, status="enrolled"),
            Enrollment(student_id=s1.id, course_offering_id=offering2.id, course_section_id=sec_c.id, status="enrolled"),
        ]
    )
    db.commit()

    published = NOW - timedelta(days=30)

    m_vars = Module(title="Variables", course_offering_id=offering1.id, published_at=published)
    m_loops = Module(title="Loops", course_offering_id=offering1.id, published_at=published)
    m_draft = Module(title="Draft", course_offering_id=offering1.id, published_at=None)
    m_calc = Module(title="Limits", course_offering_id=offering2.id, published_at=published)
    db.add_all([m_vars, m_loops, m_draft, m_calc])
    db.commit()

    basics = ModuleSection(module_id=m_vars.id, title="Basics", order=1, published_at=published)
    hidden = ModuleSection(module_id=m_vars.id, title="Hidden", order=0, published_at=None)
    unpublished_loops = ModuleSection(module_id=m_loops.id, title="WIP", order=1, published_at=None)
    calc_intro = ModuleSection(module_id=m_calc.id, title="Intro", order=1, published_at=published)
    db.add_all([basics, hidden, unpublished_loops, calc_intro])
    db.commit()

    i1 = ModuleContent(module_section_id=basics.id, title="Homework 1", content_type="ASSIGNMENT", order=1, published_at=published)
    i2 = ModuleContent(module_section_id=basics.id, title="Reading", content_type="LESSON", order=2, published_at=published)
    i_future = ModuleContent(module_section_id=basics.id, title="Homework 2", content_type="ASSIGNMENT", order=3, published_at=None)
    i_hidden = ModuleContent(module_section_id=hidden.id, title="Secret", content_type="LESSON", order=1, published_at=published)
    i_calc = ModuleContent(module_section_id=calc_intro.id, title="What is a limit", content_type="LESSON", order=1, published_at=published)
    db.add_all([i1, i2, i_future, i_hidden, i_calc])
    db.commit()

    db.add_all(
        [
            Assignment(module_content_id=i1.id, due_date=NOW - timedelta(days=1), grace_period_minutes=0, allow_late_submission=False),
            Assignment(module_content_id=i_future.id, due_date=NOW + timedelta(days=7), grace_period_minutes=0),
        ]
    )

    def progress(student, content, module, status, accessed):
        db.add(
            ContentProgress(
                student_id=student.id,
                module_content_id=content.id,
                module_id=module.id,
                status=status,
                completed_at=accessed if status == "COMPLETED" else None,
                last_accessed_at=accessed,
            )
        )

    progress(s1, i1, m_vars, "COMPLETED", NOW - timedelta(days=3))
    progress(s1, i2, m_vars, "COMPLETED", NOW - timedelta(days=2))
    progress(s2, i2, m_vars, "COMPLETED", NOW - timedelta(days=5))
    # rows outside the published tree must not leak into counts
    progress(s2, i_hidden, m_vars, "COMPLETED", NOW - timedelta(hours=1))
    progress(s1, i_calc, m_calc, "IN_PROGRESS", NOW - timedelta(days=1))
    db.commit()

    yield Seed(
        s1=s1.id,
        s2=s2.id,
        s3=s3.id,
        s4=s4.id,
        mentor1=mentor1.id,
        mentor2=mentor2.id,
        admin=admin.id,
        offering1=offering1.id,
        offering2=offering2.id,
        m_vars=m_vars.id,
        m_loops=m_loops.id,
        m_draft=m_draft.id,
        m_calc=m_calc.id,
        i1=i1.id,
        i2=i2.id,
        i_future=i_future.id,
        i_calc=i_calc.id,
    )


@pytest.fixture()
def client():
    """Test client that uses the test DB session and a fixed clock."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = override_get_now
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_header(user_id: int) -> dict:
    token = create_access_token(data={"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}
