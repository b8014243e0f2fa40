import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from exambank.models.orm import TIERS
from exambank.services.hashing import question_hash
from exambank.services.question_bank import QuestionBank

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AnswerKeyEntry:
    question: str
    options: Dict[str, str]
    correct_answer: Union[str, int]
    explanation: str
    difficulty: str
    area_name: str

def build_answer_key(bank: QuestionBank, secret: Optional[str] = None) -> Dict[str, AnswerKeyEntry]:
    """Recompute the hash of every question in the bank.

    Nothing about the earlier selection is known here, so the whole bank is
    enumerated. Hashes only line up with the ones handed out if the bank's
    tier lists have not been reordered or trimmed in between.
    """
    key: Dict[str, AnswerKeyEntry] = {}
    for area in bank.areas:
        for tier in TIERS:
            for ordinal, rec in enumerate(area.tier(tier)):
                h = question_hash(bank.exam_id, area.name, tier, ordinal, rec.question, secret)
                if h in key:
                    logger.warning("Duplicate question hash in %s/%s/%s #%d; keeping first", bank.exam_name, area.name, tier.value, ordinal)
                    continue
                key[h] = AnswerKeyEntry(
                    question=rec.question,
                    options=rec.option_map(),
                    correct_answer=rec.correct_answer,
                    explanation=rec.explanation,
                    difficulty=tier.value,
                    area_name=area.name,
                )
    logger.debug("Answer key for %s has %d entries", bank.exam_name, len(key))
    return key
