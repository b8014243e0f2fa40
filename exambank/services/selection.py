"""
Syllabus-driven question selection for one exam sitting.

Every practice area named in the syllabus contributes its quota of questions,
drawn uniformly from the area's basic, intermediate and advanced pools
combined. Selected questions leave the server with their hash but without
their answer or explanation.
"""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from exambank.core.errors import NoPracticeAreasError, NothingExaminableError
from exambank.models.orm import DifficultyTier, TIERS
from exambank.services.hashing import question_hash
from exambank.services.question_bank import PracticeAreaBank, QuestionBank, QuestionRecord
from exambank.services.syllabus import SyllabusConfig

logger = logging.getLogger(__name__)

STATUS_COMPLETE = "Complete"
STATUS_INSUFFICIENT = "Insufficient"
STATUS_EXCLUDED = "Excluded"


@dataclass
class SelectableQuestion:
    """Answer-free view of a question as sent to the candidate."""
    question_no: int
    question_hash: str
    question: str
    options: Dict[str, str]
    difficulty: str
    area_name: str


@dataclass
class SelectedArea:
    serial_no: int
    area_name: str
    required_questions: int
    total_available_questions: int
    selected_count: int
    status: str
    questions: List[SelectableQuestion] = field(default_factory=list)


@dataclass
class ExamDetails:
    duration: int = 180
    total_marks: int = 100
    passing_marks: float = 45


@dataclass
class ExamPaper:
    exam_id: str
    exam_name: str
    total_areas: int
    total_required_questions: int
    total_selected_questions: int
    areas: List[SelectedArea]
    exam_details: ExamDetails
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class AreaCoverage:
    area_name: str
    required_questions: int
    total_available_questions: int
    in_syllabus: bool
    status: str


@dataclass(frozen=True)
class _PoolItem:
    record: QuestionRecord
    difficulty: DifficultyTier
    ordinal: int


def _pool(area: PracticeAreaBank) -> List[_PoolItem]:
    """All questions of an area; ordinal restarts at 0 in every tier."""
    return [
        _PoolItem(record=rec, difficulty=tier, ordinal=i)
        for tier in TIERS
        for i, rec in enumerate(area.tier(tier))
    ]


def _status(selected: int, required: int) -> str:
    return STATUS_COMPLETE if selected >= required else STATUS_INSUFFICIENT


def select_exam_questions(
    bank: QuestionBank,
    syllabus: SyllabusConfig,
    secret: Optional[str] = None,
    rng: Optional[Any] = None,
    exam_details: Optional[ExamDetails] = None,
) -> ExamPaper:
    """Assemble one randomly sampled, answer-free exam paper from the bank.

    Areas without a syllabus quota, or with no questions at all, are left out.
    When an area holds fewer questions than its quota, all of them are used.

    Raises:
        NoPracticeAreasError: the bank has no practice areas.
        NothingExaminableError: no area produced a single question.
    """
    if not bank.areas:
        raise NoPracticeAreasError(bank.exam_name)
    rng = rng or random

    selected_areas: List[SelectedArea] = []
    for index, area in enumerate(bank.areas):
        quota = syllabus.quota_for(area.name)
        if quota <= 0:
            logger.debug("Skipping %s: not in syllabus", area.name)
            continue
        pool = _pool(area)
        if not pool:
            logger.debug("Skipping %s: no questions stored", area.name)
            continue

        rng.shuffle(pool)
        picked = pool[:min(quota, len(pool))]

        questions = [
            SelectableQuestion(
                question_no=n,
                question_hash=question_hash(bank.exam_id, area.name, item.difficulty, item.ordinal, item.record.question, secret),
                question=item.record.question,
                options=item.record.option_map(),
                difficulty=item.difficulty.value,
                area_name=area.name,
            )
            for n, item in enumerate(picked, start=1)
        ]
        if len(questions) < quota:
            logger.warning("Area %s of %s has %d of %d required questions", area.name, bank.exam_name, len(questions), quota)
        selected_areas.append(SelectedArea(
            serial_no=index + 1,
            area_name=area.name,
            required_questions=quota,
            total_available_questions=len(pool),
            selected_count=len(questions),
            status=_status(len(questions), quota),
            questions=questions,
        ))

    if not selected_areas:
        raise NothingExaminableError(bank.exam_name)

    total_selected = sum(a.selected_count for a in selected_areas)
    logger.info("Selected %d questions across %d areas for exam %s", total_selected, len(selected_areas), bank.exam_name)
    return ExamPaper(
        exam_id=bank.exam_id,
        exam_name=bank.exam_name,
        total_areas=len(selected_areas),
        total_required_questions=syllabus.total_required,
        total_selected_questions=total_selected,
        areas=selected_areas,
        exam_details=exam_details or ExamDetails(),
        created_at=bank.created_at,
        updated_at=bank.updated_at,
    )


def syllabus_coverage(bank: QuestionBank, syllabus: SyllabusConfig) -> List[AreaCoverage]:
    """How well each stored area can satisfy its syllabus quota."""
    rows = []
    for area in bank.areas:
        quota = syllabus.quota_for(area.name)
        available = area.total_questions
        if quota <= 0:
            status = STATUS_EXCLUDED
        else:
            status = _status(available, quota)
        rows.append(AreaCoverage(
            area_name=area.name,
            required_questions=quota,
            total_available_questions=available,
            in_syllabus=quota > 0,
            status=status,
        ))
    return rows
