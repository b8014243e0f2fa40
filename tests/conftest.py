import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EXAM_HASH_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from exambank.core.database import get_db, init_db
from exambank.main import app
from exambank.services.question_bank import PracticeAreaBank, QuestionBank, QuestionRecord, add_practice_area, create_exam
from exambank.services.syllabus import SyllabusConfig, get_syllabus

SECRET = "test-secret"
EXAM_NAME = "Bar Entrance 2024"

TEST_SYLLABUS = {
    "Constitutional Law": 3,
    "Cr. P. C.-Criminal Procedure Code": 2,
    "Law of Tort": 5,
    "Empty Area": 2,
}


def q(text, answer=0):
    """Question whose options embed the text; ``answer`` is the index of the correct option."""
    options = tuple(f"{text} / option {i}" for i in range(1, 5))
    return QuestionRecord(question=text, options=options, correct_answer=options[answer], explanation=f"EXPL::{text}")


def tier(prefix, n):
    return tuple(q(f"{prefix} question {i}") for i in range(n))


@pytest.fixture
def syllabus():
    return SyllabusConfig(TEST_SYLLABUS)


@pytest.fixture
def bank():
    """Five areas in bank order; serial numbers 1..5 follow this order."""
    return QuestionBank(
        exam_id="42",
        exam_name=EXAM_NAME,
        areas=(
            PracticeAreaBank("Constitutional   law", basic=tier("Const basic", 2), intermediate=tier("Const inter", 2), advanced=tier("Const adv", 1)),
            PracticeAreaBank("Public Interest Litigation", basic=tier("PIL basic", 3)),
            PracticeAreaBank("Cr P C - Criminal Procedure Code", basic=tier("CrPC basic", 1), advanced=tier("CrPC adv", 1)),
            PracticeAreaBank("Law of Tort", intermediate=tier("Tort inter", 2)),
            PracticeAreaBank("Empty Area"),
        ),
    )


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True)
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_exam(db, bank):
    """Persist the in-memory ``bank`` fixture under EXAM_NAME."""
    exam = create_exam(db, EXAM_NAME)
    for area in bank.areas:
        add_practice_area(db, exam, area.name, basic=area.basic, intermediate=area.intermediate, advanced=area.advanced)
    return exam


@pytest.fixture
def client(engine, syllabus):
    SessionTest = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

    def override_get_db():
        session = SessionTest()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_syllabus] = lambda: syllabus
    yield TestClient(app)
    app.dependency_overrides.clear()
