"""
Test Planner - Question Bank Model
"""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId, JsonDocument

if TYPE_CHECKING:
    from app.models.curriculum import Subtopic
    from app.models.user import User


class Question(Base):
    """
    A question in the bank.

    Options are stored as a JSON list. Each option is either a plain string or
    an object ``{"option_text": ..., "is_correct": ...}``; ``correct_answer``
    holds the answer string when options do not flag it.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    subtopic_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("subtopics.id", ondelete="CASCADE"),
        index=True
    )
    created_by: Mapped[int | None] = mapped_column(
        BigIntId,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    question_text: Mapped[str] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JsonDocument, default=list)
    correct_answer: Mapped[str | None] = mapped_column(String(500), nullable=True)
    difficulty_level: Mapped[int] = mapped_column(Integer, index=True)  # 1..5

    # Soft delete
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

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
    subtopic: Mapped["Subtopic"] = relationship("Subtopic", back_populates="questions")
    creator: Mapped["User | None"] = relationship("User")

    @property
    def topic_id(self) -> int:
        """Topic reached through the subtopic; load ``subtopic`` first."""
        return self.subtopic.topic_id

    def __repr__(self):
        return f"<Question id={self.id} difficulty={self.difficulty_level}>"
