"""
Audit Quiz Platform - Authoring Models
Presentation -> Category -> Question -> Option, plus the freeform Summary.
"""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auditquiz.core.database import Base, generate_id

if TYPE_CHECKING:
    from auditquiz.models.test import Test

# Every question carries exactly this many options
OPTIONS_PER_QUESTION = 5
MIN_POINTS = 1
MAX_POINTS = 5


class Presentation(Base):
    """An authored questionnaire ("audit" in the UI)."""

    __tablename__ = "presentations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )
    title: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    categories: Mapped[list["Category"]] = relationship(
        "Category",
        back_populates="presentation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Category.position",
    )
    summary: Mapped["Summary | None"] = relationship(
        "Summary",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tests: Mapped[list["Test"]] = relationship(
        "Test",
        back_populates="presentation",
        passive_deletes="all",
        order_by="Test.created_at.desc()",
    )


class Category(Base):
    """Named group of questions; `position` fixes display order."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    presentation_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("presentations.id", ondelete="CASCADE"),
        index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    presentation: Mapped[Presentation] = relationship("Presentation", back_populates="categories")
    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.position",
    )


class Question(Base):
    """A scored prompt with five options."""

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    category_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("categories.id", ondelete="CASCADE"),
        index=True
    )
    text: Mapped[str] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    category: Mapped[Category] = relationship("Category", back_populates="questions")
    options: Mapped[list["Option"]] = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Option.position",
    )


class Option(Base):
    """One answer choice; `points` is the only thing that scores."""

    __tablename__ = "options"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    question_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("questions.id", ondelete="CASCADE"),
        index=True
    )
    text: Mapped[str] = mapped_column(String(500))
    points: Mapped[int] = mapped_column(Integer)
    position: Mapped[int] = mapped_column(Integer, default=0)

    question: Mapped[Question] = relationship("Question", back_populates="options")


class Summary(Base):
    """Freeform recommendations attached one-to-one to a presentation."""

    __tablename__ = "summaries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    presentation_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("presentations.id", ondelete="CASCADE"),
        unique=True
    )
    # Format: [{ categoryId, recommendation }]
    category_recommendations: Mapped[list | None] = mapped_column(JSON, nullable=True)
    # Format: [{ type: "text" | "file", content, fileUrl }]
    next_steps: Mapped[list | None] = mapped_column(JSON, nullable=True)
    overall_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )
