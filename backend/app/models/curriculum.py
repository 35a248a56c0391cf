"""
Test Planner - Curriculum Models
SQLAlchemy models for subjects, topics and subtopics
"""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.question import Question


class Subject(Base):
    """Academic subjects (Maths, English, ...)."""

    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    # Relationships
    topics: Mapped[list["Topic"]] = relationship(
        "Topic",
        back_populates="subject",
        cascade="all, delete-orphan"
    )


class Topic(Base):
    """Topics within a subject (e.g. Fractions for Maths)."""

    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    subject_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("subjects.id", ondelete="CASCADE"),
        index=True
    )

    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    # Relationships
    subject: Mapped["Subject"] = relationship("Subject", back_populates="topics")
    subtopics: Mapped[list["Subtopic"]] = relationship(
        "Subtopic",
        back_populates="topic",
        cascade="all, delete-orphan"
    )


class Subtopic(Base):
    """Subtopics questions are filed under (e.g. Adding fractions)."""

    __tablename__ = "subtopics"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    topic_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("topics.id", ondelete="CASCADE"),
        index=True
    )

    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    # Relationships
    topic: Mapped["Topic"] = relationship("Topic", back_populates="subtopics")
    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="subtopic",
        cascade="all, delete-orphan"
    )
