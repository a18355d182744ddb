import os

# Settings are cached on first import; point the app at SQLite before that happens.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from dataclasses import dataclass, field
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from subcover.api.deps import get_db
from subcover.db.base import Base
from subcover.main import app
from subcover.models import (
    ClassGroup,
    Classroom,
    DayOfWeek,
    Staff,
    TeacherSchedule,
    TimeOffRequest,
    TimeSlot,
)

SCHOOL_ID = "school-1"
OTHER_SCHOOL_ID = "school-2"

# 2030-01-07 is a Monday.
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
WEDNESDAY = date(2030, 1, 9)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass
class SeededSchool:
    school_id: str
    teacher_id: str
    sub_id: str
    other_sub_id: str
    infant_room_id: str
    toddler_room_id: str
    infants_group_id: str
    am_slot_id: str
    pm_slot_id: str
    day_ids: dict[str, str] = field(default_factory=dict)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def school(db) -> SeededSchool:
    """A school with one teacher placed Monday AM/PM (Infant Room) and Wednesday AM (Toddler Room)."""
    days = {}
    for number, name in enumerate(WEEKDAYS, start=1):
        day = DayOfWeek(name=name, day_number=number, display_order=number)
        db.add(day)
        days[name] = day

    am = TimeSlot(school_id=SCHOOL_ID, code="AM", name="Morning", display_order=1)
    pm = TimeSlot(school_id=SCHOOL_ID, code="PM", name="Afternoon", display_order=2)
    infant_room = Classroom(school_id=SCHOOL_ID, name="Infant Room")
    toddler_room = Classroom(school_id=SCHOOL_ID, name="Toddler Room")
    infants = ClassGroup(school_id=SCHOOL_ID, name="Infants")
    teacher = Staff(school_id=SCHOOL_ID, first_name="Ada", last_name="Lovelace", is_teacher=True)
    sub = Staff(school_id=SCHOOL_ID, first_name="Sam", last_name="Rivera", is_teacher=False, is_sub=True)
    other_sub = Staff(
        school_id=SCHOOL_ID,
        first_name="Jo",
        last_name="Park",
        display_name="Jo P.",
        is_teacher=False,
        is_sub=True,
    )
    db.add_all([am, pm, infant_room, toddler_room, infants, teacher, sub, other_sub])
    db.flush()

    db.add_all(
        [
            TeacherSchedule(
                school_id=SCHOOL_ID,
                teacher_id=teacher.id,
                day_of_week_id=days["Monday"].id,
                time_slot_id=am.id,
                classroom_id=infant_room.id,
                class_group_id=infants.id,
            ),
            TeacherSchedule(
                school_id=SCHOOL_ID,
                teacher_id=teacher.id,
                day_of_week_id=days["Monday"].id,
                time_slot_id=pm.id,
                classroom_id=infant_room.id,
                class_group_id=infants.id,
            ),
            TeacherSchedule(
                school_id=SCHOOL_ID,
                teacher_id=teacher.id,
                day_of_week_id=days["Wednesday"].id,
                time_slot_id=am.id,
                classroom_id=toddler_room.id,
            ),
        ]
    )
    db.commit()

    return SeededSchool(
        school_id=SCHOOL_ID,
        teacher_id=teacher.id,
        sub_id=sub.id,
        other_sub_id=other_sub.id,
        infant_room_id=infant_room.id,
        toddler_room_id=toddler_room.id,
        infants_group_id=infants.id,
        am_slot_id=am.id,
        pm_slot_id=pm.id,
        day_ids={name: day.id for name, day in days.items()},
    )


@pytest.fixture()
def absence(db, school) -> TimeOffRequest:
    """Monday through Wednesday off, covering every scheduled shift."""
    request = TimeOffRequest(
        school_id=school.school_id,
        teacher_id=school.teacher_id,
        start_date=MONDAY,
        end_date=WEDNESDAY,
        reason="Sick",
    )
    db.add(request)
    db.commit()
    return request
