import enum
from datetime import datetime
from typing import Any, List
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import BigInteger, Integer, String, Text, ForeignKey, JSON, DateTime, UniqueConstraint, func

class Base(DeclarativeBase): pass

class DifficultyTier(str, enum.Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

# Pool order used by selection and answer-key reconstruction.
TIERS = (DifficultyTier.BASIC, DifficultyTier.INTERMEDIATE, DifficultyTier.ADVANCED)

class Exam(Base):
    __tablename__ = "exams"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    exam_name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())
    practice_areas: Mapped[List["PracticeArea"]] = relationship(
        back_populates="exam", order_by="PracticeArea.position", cascade="all, delete-orphan"
    )

class PracticeArea(Base):
    __tablename__ = "practice_areas"
    __table_args__ = (
        UniqueConstraint("exam_id", "position", name="uq_practice_area_position"),
        UniqueConstraint("exam_id", "name", name="uq_practice_area_name"),
    )
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    exam_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("exams.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    position: Mapped[int] = mapped_column(Integer)
    exam: Mapped["Exam"] = relationship(back_populates="practice_areas")
    questions: Mapped[List["BankQuestion"]] = relationship(
        back_populates="practice_area", cascade="all, delete-orphan"
    )

class BankQuestion(Base):
    """One stored question. (practice_area, tier, position) is its identity; position is never rewritten."""
    __tablename__ = "bank_questions"
    __table_args__ = (UniqueConstraint("practice_area_id", "tier", "position", name="uq_bank_question_slot"),)
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    practice_area_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("practice_areas.id", ondelete="CASCADE"), index=True)
    tier: Mapped[str] = mapped_column(String(16))
    position: Mapped[int] = mapped_column(Integer)
    question: Mapped[str] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JSON)
    correct_answer: Mapped[Any] = mapped_column(JSON)
    explanation: Mapped[str] = mapped_column(Text, default="")
    practice_area: Mapped["PracticeArea"] = relationship(back_populates="questions")
