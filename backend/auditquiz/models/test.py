"""
Audit Quiz Platform - Test Models
Submitted attempts (Test), their Answers and per-category scores, and the
in-progress draft (AuditProgress).
"""
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auditquiz.core.database import Base, generate_id
from auditquiz.models.presentation import Category, Option, Presentation, Question


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Test(Base):
    """
    One submission by a user against a presentation.

    Rows are history: every submission creates a new Test, and the most
    recent one (by `created_at`) is the "current" attempt.
    """
    __tablename__ = "tests"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )
    presentation_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("presentations.id", ondelete="CASCADE"),
        index=True
    )
    total_score: Mapped[int] = mapped_column(Integer, default=0)
    # Microsecond precision so "latest attempt" is well defined
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    presentation: Mapped[Presentation] = relationship("Presentation", back_populates="tests")
    answers: Mapped[list["Answer"]] = relationship(
        "Answer",
        back_populates="test",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    category_scores: Mapped[list["CategoryScore"]] = relationship(
        "CategoryScore",
        back_populates="test",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Test presentation={self.presentation_id} total={self.total_score}>"


class Answer(Base):
    """Chosen option for one question; `points` is a snapshot taken at submission."""

    __tablename__ = "answers"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    test_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("tests.id", ondelete="CASCADE"),
        index=True
    )
    # History survives later edits to the audit
    question_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("questions.id", ondelete="SET NULL"),
        nullable=True
    )
    option_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("options.id", ondelete="SET NULL"),
        nullable=True
    )
    points: Mapped[int] = mapped_column(Integer)

    test: Mapped[Test] = relationship("Test", back_populates="answers")
    question: Mapped[Question | None] = relationship("Question")
    option: Mapped[Option | None] = relationship("Option")


class CategoryScore(Base):
    """Sum of answer points for one category within one test."""

    __tablename__ = "category_scores"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    test_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("tests.id", ondelete="CASCADE"),
        index=True
    )
    category_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True
    )
    score: Mapped[int] = mapped_column(Integer)

    test: Mapped[Test] = relationship("Test", back_populates="category_scores")
    category: Mapped[Category | None] = relationship("Category")


class AuditProgress(Base):
    """
    Draft answers saved before final submission.

    One row per presentation, shared by everyone taking it.
    """
    __tablename__ = "audit_progress"

    presentation_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("presentations.id", ondelete="CASCADE"),
        primary_key=True
    )
    # Format: { questionId: optionId }
    answers: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
