"""
Syllabus quotas: how many questions each practice area contributes to an exam.

Practice-area names arrive from question-bank uploads and from the syllabus
table with drifting punctuation and spacing ("Cr. P. C.-Criminal Procedure
Code" vs "Cr P C Criminal Procedure Code"), so every lookup goes through
``normalize``.
"""
import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Union

from exambank.core.config import get_settings

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_STRIPPED = re.compile(r"[().]")

# Law entrance exam syllabus: practice area -> questions per paper.
DEFAULT_SYLLABUS: Dict[str, int] = {
    "Constitutional law": 10,
    "Indian Penal Code-IPC": 8,
    "Cr. P. C.-Criminal Procedure Code": 10,
    "C. P. C.-Code of Civil Procedure": 10,
    "Alternative Dispute Redressal including Arbitration Act": 4,
    "Family Law": 8,
    "Administration Law": 3,
    "Professional Ethics & Cases of Professional Misconduct under Bar Council of India Rules": 4,
    "Company Law": 2,
    "Environmental Law": 2,
    "Labour & Industrial Law": 4,
    "Law of Tort": 5,
    "Law related to Taxation": 2,
    "Law of Contract": 8,
    "Specific Relief": 2,
    "Property Laws": 2,
    "Land Acquisition Act": 2,
    "Intellectual Property Laws": 2,
}


def normalize(raw_name: str) -> str:
    """Canonical form of a practice-area name.

    Lower-cases, turns ``&`` into ``and``, drops parentheses and periods,
    turns hyphens into spaces and collapses whitespace runs (newlines
    included) into single spaces.
    """
    name = (raw_name or "").lower()
    name = name.replace("&", "and")
    name = _STRIPPED.sub("", name)
    name = name.replace("-", " ")
    return _WHITESPACE.sub(" ", name).strip()


class SyllabusConfig:
    """Read-only mapping of practice-area name to required question count."""

    def __init__(self, quotas: Mapping[str, int]):
        self._quotas = MappingProxyType(dict(quotas))

    def quota_for(self, area_name: str) -> int:
        """Configured quota for an area, 0 when the area is not in the syllabus."""
        if area_name in self._quotas:
            return self._quotas[area_name]
        key = normalize(area_name)
        if key in self._quotas:
            return self._quotas[key]
        for name, count in self._quotas.items():
            if normalize(name) == key:
                return count
        return 0

    def __contains__(self, area_name: str) -> bool:
        return self.quota_for(area_name) > 0

    def __iter__(self) -> Iterator[str]:
        return iter(self._quotas)

    def __len__(self) -> int:
        return len(self._quotas)

    @property
    def total_required(self) -> int:
        return sum(self._quotas.values())

    def __repr__(self) -> str:
        return f"<SyllabusConfig(areas={len(self)}, total_required={self.total_required})>"


def load_syllabus(path: Optional[Union[str, Path]] = None) -> SyllabusConfig:
    """Build a syllabus from a JSON object file, or the built-in table when no path is given."""
    if path is None:
        return SyllabusConfig(DEFAULT_SYLLABUS)
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Syllabus file {path} must contain a JSON object")
    quotas = {}
    for name, count in data.items():
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"Syllabus quota for {name!r} must be a non-negative integer, got {count!r}")
        quotas[name] = count
    logger.info("Loaded syllabus with %d areas from %s", len(quotas), path)
    return SyllabusConfig(quotas)


@lru_cache()
def get_syllabus() -> SyllabusConfig:
    """Process-wide syllabus, loaded once."""
    return load_syllabus(get_settings().SYLLABUS_FILE)
