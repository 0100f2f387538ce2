"""
Shared pytest fixtures.

Each test gets a fresh in-memory SQLite database with every model table
created, plus small factories for the rows most tests need.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from azhari_platform import models  # noqa: F401  registers every table
from azhari_platform.db_base import Base
from azhari_platform.models import (
    Profile,
    Subject,
    Subscription,
    TeacherAssignment,
    TeacherProfile,
)
from azhari_platform.platform.events import EventBus
from azhari_platform.platform.session import Session


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def now():
    """Fixed clock: mid-day so the 6-7 day window never straddles midnight oddly."""
    return datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def make_profile(db_session):
    def _make(role="student", full_name="طالب تجريبي", is_banned=False, **kwargs):
        profile = Profile(
            id=kwargs.pop("id", str(uuid.uuid4())),
            full_name=full_name,
            role=role,
            is_banned=is_banned,
            **kwargs,
        )
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make


@pytest.fixture
def make_subject(db_session):
    def _make(name="الفيزياء", category="science", stage="secondary", grade="first", section=None):
        subject = Subject(name=name, category=category, stage=stage, grade=grade, section=section)
        db_session.add(subject)
        db_session.commit()
        return subject

    return _make


@pytest.fixture
def make_subscription(db_session, now):
    def _make(student_id, subject_id, end_in=timedelta(days=30), is_active=True, start_date=None):
        subscription = Subscription(
            student_id=student_id,
            subject_id=subject_id,
            start_date=start_date or (now - timedelta(days=1)),
            end_date=now + end_in,
            is_active=is_active,
        )
        db_session.add(subscription)
        db_session.commit()
        return subscription

    return _make


@pytest.fixture
def make_teacher(db_session, make_profile):
    """A teacher profile with assignments for (category, stage, each grade)."""

    def _make(
        category="science",
        stage="secondary",
        grades=("first",),
        approved=True,
        full_name="أ. أحمد",
        is_banned=False,
        subject_name=None,
    ):
        profile = make_profile(role="teacher", full_name=full_name, is_banned=is_banned)
        for grade in grades:
            db_session.add(
                TeacherAssignment(
                    teacher_id=profile.id,
                    category=category,
                    stage=stage,
                    grade=grade,
                    subject_name=subject_name,
                )
            )
        db_session.add(TeacherProfile(teacher_id=profile.id, is_approved=approved, bio="مدرس خبرة"))
        db_session.commit()
        return profile

    return _make


@pytest.fixture
def student_session():
    def _make(user_id=None, role="student", is_banned=False):
        return Session(user_id=user_id or str(uuid.uuid4()), role=role, is_banned=is_banned)

    return _make

