import hashlib
from typing import Optional
from exambank.core.config import DEFAULT_HASH_SECRET

# Only this much of the question text takes part in the hash.
HASH_TEXT_PREFIX = 50

def question_hash(exam_id, area_name: str, difficulty: str, ordinal: int, question_text: str, secret: Optional[str] = None) -> str:
    """Opaque, deterministic id for a question slot; never reveals the answer and is never stored."""
    difficulty = getattr(difficulty, "value", difficulty)
    raw = f"{exam_id}-{area_name}-{difficulty}-{ordinal}-{(question_text or '')[:HASH_TEXT_PREFIX]}"
    raw += f"-{secret or DEFAULT_HASH_SECRET}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
