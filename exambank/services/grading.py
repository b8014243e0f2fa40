"""
Grading of a submitted exam sitting.

The answer key is rebuilt from the stored bank on every submission; the
client only ever sends back question hashes and its chosen options.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Union

from exambank.core.errors import InvalidSubmissionError, UnresolvedAnswersError
from exambank.models.orm import TIERS
from exambank.services.answer_key import build_answer_key
from exambank.services.question_bank import QuestionBank

logger = logging.getLogger(__name__)

NOT_ANSWERED = "Not Answered"
DEFAULT_PASSING_MARKS = 45

AnswerValue = Union[str, int]


@dataclass
class SubmittedAnswer:
    question_hash: str
    user_answer: Optional[AnswerValue] = None


@dataclass
class GradedResult:
    question_hash: str
    question: str
    options: Dict[str, str]
    user_answer: AnswerValue
    correct_answer: AnswerValue
    is_correct: bool
    difficulty: str
    explanation: str
    area_name: str


@dataclass
class TierBreakdown:
    total: int = 0
    correct: int = 0
    percentage: float = 0.0


@dataclass
class AreaBreakdown:
    area_name: str
    total: int = 0
    correct: int = 0
    incorrect: int = 0
    percentage: float = 0.0


@dataclass
class GradedReport:
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
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    results: List[GradedResult] = field(default_factory=list)
    breakdown_by_difficulty: Dict[str, TierBreakdown] = field(default_factory=dict)
    breakdown_by_area: List[AreaBreakdown] = field(default_factory=list)


def percentage(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def elapsed_seconds(start_time: Optional[datetime], end_time: Optional[datetime]) -> int:
    if start_time is None or end_time is None:
        return 0
    if (start_time.tzinfo is None) != (end_time.tzinfo is None):
        start_time, end_time = (t if t.tzinfo else t.replace(tzinfo=timezone.utc) for t in (start_time, end_time))
    return max(0, math.floor((end_time - start_time).total_seconds()))


def format_duration(seconds: int) -> str:
    """``1h 2m 3s``, ``2m 3s`` or ``3s``."""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _by_difficulty(results: List[GradedResult]) -> Dict[str, TierBreakdown]:
    out = {t.value: TierBreakdown() for t in TIERS}
    for r in results:
        b = out.setdefault(r.difficulty, TierBreakdown())
        b.total += 1
        b.correct += r.is_correct
    for b in out.values():
        b.percentage = percentage(b.correct, b.total)
    return out


def _by_area(results: List[GradedResult]) -> List[AreaBreakdown]:
    areas: Dict[str, AreaBreakdown] = {}
    for r in results:
        b = areas.setdefault(r.area_name, AreaBreakdown(area_name=r.area_name))
        b.total += 1
        b.correct += r.is_correct
    for b in areas.values():
        b.incorrect = b.total - b.correct
        b.percentage = percentage(b.correct, b.total)
    # sorted() is stable, so equal percentages keep first-seen order
    return sorted(areas.values(), key=lambda b: b.percentage, reverse=True)


def grade_submission(
    bank: QuestionBank,
    answers: Optional[Sequence[SubmittedAnswer]],
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    secret: Optional[str] = None,
    passing_marks: float = DEFAULT_PASSING_MARKS,
    total_marks: int = 100,
    reject_unresolved: bool = False,
) -> GradedReport:
    """Grade submitted answers against the answer key rebuilt from ``bank``.

    Hashes that do not resolve (stale paper, bank changed since the paper was
    drawn, or forged) are left out of the report and counted in
    ``unresolved_answers``. With ``reject_unresolved`` they fail the whole
    submission instead.

    Raises:
        InvalidSubmissionError: ``answers`` is missing.
        UnresolvedAnswersError: ``reject_unresolved`` is set and a hash did not resolve.
    """
    if answers is None:
        raise InvalidSubmissionError("User answers are required")

    answer_key = build_answer_key(bank, secret)

    results: List[GradedResult] = []
    unresolved = 0
    not_answered = 0
    for ans in answers:
        entry = answer_key.get(ans.question_hash)
        if entry is None:
            unresolved += 1
            continue
        answered = ans.user_answer is not None
        not_answered += not answered
        results.append(GradedResult(
            question_hash=ans.question_hash,
            question=entry.question,
            options=entry.options,
            user_answer=ans.user_answer if answered else NOT_ANSWERED,
            correct_answer=entry.correct_answer,
            is_correct=answered and ans.user_answer == entry.correct_answer,
            difficulty=entry.difficulty,
            explanation=entry.explanation,
            area_name=entry.area_name,
        ))

    if unresolved:
        logger.warning("%d of %d submitted answers for %s did not resolve against the current bank", unresolved, len(answers), bank.exam_name)
        if reject_unresolved:
            raise UnresolvedAnswersError(unresolved)

    total = len(results)
    correct = sum(1 for r in results if r.is_correct)
    incorrect = total - correct - not_answered
    score = percentage(correct, total)
    elapsed = elapsed_seconds(start_time, end_time)

    logger.info("Graded %s: %d/%d correct, score %.2f", bank.exam_name, correct, total, score)
    return GradedReport(
        exam_id=bank.exam_id,
        exam_name=bank.exam_name,
        total_questions=total,
        correct_answers=correct,
        incorrect_answers=incorrect,
        not_answered=not_answered,
        unresolved_answers=unresolved,
        score=score,
        passed=score >= passing_marks,
        total_marks=total_marks,
        passing_marks=passing_marks,
        time_taken=elapsed,
        time_taken_formatted=format_duration(elapsed),
        start_time=start_time,
        end_time=end_time,
        results=results,
        breakdown_by_difficulty=_by_difficulty(results),
        breakdown_by_area=_by_area(results),
    )
