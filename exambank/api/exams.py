from datetime import datetime
from typing import Dict, List, Optional, Union
import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from exambank.core.config import Settings, get_settings
from exambank.core.database import get_db
from exambank.core.errors import ExamNotFoundError, InvalidInputError, InvalidSubmissionError
from exambank.services.grading import SubmittedAnswer, grade_submission
from exambank.services.question_bank import QuestionBank, get_question_bank, list_exams
from exambank.services.selection import ExamDetails, select_exam_questions, syllabus_coverage
from exambank.services.syllabus import SyllabusConfig, get_syllabus

logger = logging.getLogger(__name__)

router = APIRouter()

AnswerValue = Union[str, int]

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

# ---------- requests ----------

class StartExamRequest(CamelModel):
    exam_name: Optional[str] = None

class AnswerIn(CamelModel):
    question_hash: str
    user_answer: Optional[AnswerValue] = None

class SubmitExamRequest(CamelModel):
    exam_name: Optional[str] = None
    answers: Optional[List[AnswerIn]] = Field(default=None, validation_alias=AliasChoices("answers", "userAnswers"))
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

# ---------- responses ----------

class QuestionOut(CamelModel):
    question_no: int
    question_hash: str
    question: str
    options: Dict[str, str]
    difficulty: str
    area_name: str

class AreaOut(CamelModel):
    serial_no: int
    area_name: str
    required_questions: int
    total_available_questions: int
    selected_count: int
    status: str
    questions: List[QuestionOut]

class ExamDetailsOut(CamelModel):
    duration: int
    total_marks: int
    passing_marks: float

class ExamPaperOut(CamelModel):
    exam_id: str
    exam_name: str
    total_areas: int
    total_required_questions: int
    total_selected_questions: int
    areas: List[AreaOut]
    exam_details: ExamDetailsOut
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ResultOut(CamelModel):
    question_hash: str
    question: str
    options: Dict[str, str]
    user_answer: AnswerValue
    correct_answer: AnswerValue
    is_correct: bool
    difficulty: str
    explanation: str
    area_name: str

class TierBreakdownOut(CamelModel):
    total: int
    correct: int
    percentage: float

class AreaBreakdownOut(CamelModel):
    area_name: str
    total: int
    correct: int
    incorrect: int
    percentage: float

class GradedReportOut(CamelModel):
    exam_id: str
    exam_name: str
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    not_answered: int
    unresolved_answers: int
    score: float
    passed: bool
    total_marks: int
    passing_marks: float
    time_taken: int
    time_taken_formatted: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    results: List[ResultOut]
    breakdown_by_difficulty: Dict[str, TierBreakdownOut]
    breakdown_by_area: List[AreaBreakdownOut]

class PracticeAreaDetailOut(CamelModel):
    practice_area: str
    total_questions: int
    breakdown: Dict[str, int]

class ExamSummaryOut(CamelModel):
    exam_id: str
    exam_name: str
    practice_areas: List[str]
    total_questions: int
    breakdown: Dict[str, int]
    practice_area_details: List[PracticeAreaDetailOut]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CoverageOut(CamelModel):
    area_name: str
    required_questions: int
    total_available_questions: int
    in_syllabus: bool
    status: str

# ---------- routes ----------

def _load_bank(db: Session, exam_name: Optional[str]) -> QuestionBank:
    if not exam_name or not exam_name.strip():
        raise InvalidInputError("Exam name is required")
    bank = get_question_bank(db, exam_name.strip())
    if bank is None:
        raise ExamNotFoundError(exam_name.strip())
    return bank

@router.get("", response_model=List[ExamSummaryOut])
def get_exams(db: Session = Depends(get_db)):
    return list_exams(db)

@router.post("/start", response_model=ExamPaperOut)
def start_exam(payload: StartExamRequest, db: Session = Depends(get_db),
               syllabus: SyllabusConfig = Depends(get_syllabus), settings: Settings = Depends(get_settings)):
    bank = _load_bank(db, payload.exam_name)
    details = ExamDetails(duration=settings.EXAM_DURATION_MINUTES, total_marks=settings.TOTAL_MARKS, passing_marks=settings.PASSING_MARKS)
    return select_exam_questions(bank, syllabus, secret=settings.hash_secret(), exam_details=details)

@router.post("/submit", response_model=GradedReportOut)
def submit_exam(payload: SubmitExamRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    if payload.answers is None:
        raise InvalidSubmissionError("User answers are required")
    bank = _load_bank(db, payload.exam_name)
    answers = [SubmittedAnswer(question_hash=a.question_hash, user_answer=a.user_answer) for a in payload.answers]
    return grade_submission(
        bank, answers, payload.start_time, payload.end_time,
        secret=settings.hash_secret(), passing_marks=settings.PASSING_MARKS, total_marks=settings.TOTAL_MARKS,
        reject_unresolved=settings.REJECT_UNRESOLVED_ANSWERS,
    )

@router.get("/{exam_name}/coverage", response_model=List[CoverageOut])
def exam_coverage(exam_name: str, db: Session = Depends(get_db), syllabus: SyllabusConfig = Depends(get_syllabus)):
    return syllabus_coverage(_load_bank(db, exam_name), syllabus)
