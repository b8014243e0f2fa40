import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from exambank.core.database import init_db
from exambank.services.question_bank import add_practice_area, create_exam
from exambank.tools.coverage import main

from conftest import EXAM_NAME, TEST_SYLLABUS


@pytest.fixture
def store(tmp_path, bank):
    url = f"sqlite:///{tmp_path / 'bank.db'}"
    engine = create_engine(url, future=True)
    init_db(bind=engine)
    with sessionmaker(bind=engine, future=True)() as db:
        exam = create_exam(db, EXAM_NAME)
        for area in bank.areas:
            add_practice_area(db, exam, area.name, basic=area.basic, intermediate=area.intermediate, advanced=area.advanced)
    engine.dispose()
    syllabus = tmp_path / "syllabus.json"
    syllabus.write_text(json.dumps(TEST_SYLLABUS))
    return url, str(syllabus)


def test_json_output(store, capsys):
    url, syllabus = store
    assert main(["--exam", EXAM_NAME, "--dsn", url, "--syllabus", syllabus, "--json"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [r["area_name"] for r in rows][:2] == ["Constitutional   law", "Public Interest Litigation"]
    assert rows[3] == {"area_name": "Law of Tort", "required_questions": 5, "total_available_questions": 2,
                       "in_syllabus": True, "status": "Insufficient"}


def test_table_output(store, capsys):
    url, syllabus = store
    assert main(["--exam_name", EXAM_NAME, "--dsn", url, "--syllabus", syllabus]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("Practice area")
    assert out[-1] == "areas=5 in_syllabus=4 insufficient=2"


def test_missing_exam(store, capsys):
    url, syllabus = store
    assert main(["--exam", "Unknown", "--dsn", url, "--syllabus", syllabus]) == 1
    assert 'Exam "Unknown" not found' in capsys.readouterr().err
