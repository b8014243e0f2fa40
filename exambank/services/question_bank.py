"""
Question bank snapshots and their SQL storage.

A question has no identity of its own here: it is addressed by its exam,
practice area, difficulty tier and ordinal position within that tier. The
writers below only ever append, so an ordinal handed out once keeps pointing
at the same question for as long as nobody deletes or reorders rows by hand.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from exambank.core.errors import DuplicatePracticeAreaError
from exambank.models.orm import BankQuestion, DifficultyTier, Exam, PracticeArea, TIERS
from exambank.services.syllabus import normalize

logger = logging.getLogger(__name__)

OPTIONS_PER_QUESTION = 4

@dataclass(frozen=True)
class QuestionRecord:
    """One multiple-choice question with its answer key."""
    question: str
    options: Tuple[str, ...]
    correct_answer: Union[str, int]
    explanation: str = ""

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) != OPTIONS_PER_QUESTION:
            raise ValueError(f"Question must have {OPTIONS_PER_QUESTION} options, got {len(self.options)}")

    def option_map(self) -> Dict[str, str]:
        """Options keyed option1..option4, the shape clients render."""
        return {f"option{i}": text for i, text in enumerate(self.options, start=1)}

@dataclass(frozen=True)
class PracticeAreaBank:
    name: str
    basic: Tuple[QuestionRecord, ...] = ()
    intermediate: Tuple[QuestionRecord, ...] = ()
    advanced: Tuple[QuestionRecord, ...] = ()

    def tier(self, tier: DifficultyTier) -> Tuple[QuestionRecord, ...]:
        return getattr(self, DifficultyTier(tier).value)

    @property
    def total_questions(self) -> int:
        return len(self.basic) + len(self.intermediate) + len(self.advanced)

@dataclass(frozen=True)
class QuestionBank:
    """Immutable snapshot of every question stored for one exam."""
    exam_id: str
    exam_name: str
    areas: Tuple[PracticeAreaBank, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

@dataclass
class ExamSummary:
    exam_id: str
    exam_name: str
    practice_areas: List[str]
    total_questions: int
    breakdown: Dict[str, int]
    practice_area_details: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

def _to_record(row: BankQuestion) -> QuestionRecord:
    return QuestionRecord(question=row.question, options=tuple(row.options or ()), correct_answer=row.correct_answer, explanation=row.explanation or "")

def get_question_bank(db: Session, exam_name: str) -> Optional[QuestionBank]:
    """Load an exam's bank with areas and tiers in stored order; None when the exam does not exist."""
    exam = db.scalar(select(Exam).where(Exam.exam_name == exam_name))
    if not exam:
        return None
    areas = db.execute(select(PracticeArea).where(PracticeArea.exam_id == exam.id).order_by(PracticeArea.position)).scalars().all()
    rows = db.execute(
        select(BankQuestion)
        .where(BankQuestion.practice_area_id.in_([a.id for a in areas]))
        .order_by(BankQuestion.practice_area_id, BankQuestion.tier, BankQuestion.position)
    ).scalars().all() if areas else []
    by_slot: Dict[Tuple[int, str], List[QuestionRecord]] = {}
    for r in rows:
        by_slot.setdefault((r.practice_area_id, r.tier), []).append(_to_record(r))
    snapshot = tuple(
        PracticeAreaBank(
            name=a.name,
            **{t.value: tuple(by_slot.get((a.id, t.value), ())) for t in TIERS},
        )
        for a in areas
    )
    return QuestionBank(exam_id=str(exam.id), exam_name=exam.exam_name, areas=snapshot, created_at=exam.created_at, updated_at=exam.updated_at)

def list_exams(db: Session) -> List[ExamSummary]:
    """Question counts per exam, area and tier, newest exam first."""
    counts = db.execute(
        select(BankQuestion.practice_area_id, BankQuestion.tier, func.count(BankQuestion.id))
        .group_by(BankQuestion.practice_area_id, BankQuestion.tier)
    ).all()
    per_area: Dict[int, Dict[str, int]] = {}
    for area_id, tier, n in counts:
        per_area.setdefault(area_id, {})[tier] = int(n)
    out = []
    for exam in db.execute(select(Exam).order_by(Exam.created_at.desc(), Exam.id.desc())).scalars().all():
        areas = db.execute(select(PracticeArea).where(PracticeArea.exam_id == exam.id).order_by(PracticeArea.position)).scalars().all()
        breakdown = {t.value: 0 for t in TIERS}
        details = []
        for a in areas:
            area_breakdown = {t.value: per_area.get(a.id, {}).get(t.value, 0) for t in TIERS}
            for k, v in area_breakdown.items():
                breakdown[k] += v
            details.append({"practice_area": a.name, "total_questions": sum(area_breakdown.values()), "breakdown": area_breakdown})
        out.append(ExamSummary(
            exam_id=str(exam.id), exam_name=exam.exam_name, practice_areas=[a.name for a in areas],
            total_questions=sum(breakdown.values()), breakdown=breakdown, practice_area_details=details,
            created_at=exam.created_at, updated_at=exam.updated_at,
        ))
    return out

def create_exam(db: Session, exam_name: str) -> Exam:
    exam = Exam(exam_name=exam_name)
    db.add(exam); db.commit(); db.refresh(exam)
    logger.info("Created exam %s (id=%s)", exam_name, exam.id)
    return exam

def add_practice_area(db: Session, exam: Exam, name: str, basic: Iterable[QuestionRecord] = (),
                      intermediate: Iterable[QuestionRecord] = (), advanced: Iterable[QuestionRecord] = ()) -> PracticeArea:
    """Append a practice area after the exam's existing ones, with optional initial questions.

    Raises:
        DuplicatePracticeAreaError: the exam already has an area whose name normalizes the same.
    """
    key = normalize(name)
    for existing in db.execute(select(PracticeArea.name).where(PracticeArea.exam_id == exam.id)).scalars():
        if normalize(existing) == key:
            raise DuplicatePracticeAreaError(exam.exam_name, name)
    last = db.scalar(select(func.max(PracticeArea.position)).where(PracticeArea.exam_id == exam.id))
    area = PracticeArea(exam_id=exam.id, name=name, position=0 if last is None else last + 1)
    db.add(area); db.flush()
    for tier, records in ((DifficultyTier.BASIC, basic), (DifficultyTier.INTERMEDIATE, intermediate), (DifficultyTier.ADVANCED, advanced)):
        _append(db, area, tier, records)
    exam.updated_at = func.now()
    db.commit(); db.refresh(area)
    return area

def append_questions(db: Session, area: PracticeArea, tier: DifficultyTier, records: Sequence[QuestionRecord]) -> int:
    """Append questions at the end of one tier list; existing ordinals are untouched."""
    added = _append(db, area, tier, records)
    area.exam.updated_at = func.now()
    db.commit()
    logger.info("Appended %d %s questions to %s", added, DifficultyTier(tier).value, area.name)
    return added

def _append(db: Session, area: PracticeArea, tier: DifficultyTier, records: Iterable[QuestionRecord]) -> int:
    tier = DifficultyTier(tier).value
    next_pos = db.scalar(select(func.max(BankQuestion.position)).where(BankQuestion.practice_area_id == area.id, BankQuestion.tier == tier))
    next_pos = 0 if next_pos is None else next_pos + 1
    added = 0
    for rec in records:
        db.add(BankQuestion(practice_area_id=area.id, tier=tier, position=next_pos + added, question=rec.question,
                            options=list(rec.options), correct_answer=rec.correct_answer, explanation=rec.explanation))
        added += 1
    db.flush()
    return added
