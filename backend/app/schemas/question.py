"""
Test Planner - Question Bank Schemas
"""
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import IdStr, OffsetPagination, Pagination

Difficulty = Annotated[int, Field(ge=1, le=5)]


class QuestionOption(BaseModel):
    """An answer option; exactly the flagged ones are correct."""
    option_text: Annotated[str, Field(min_length=1)]
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """Request to add a question to the bank."""
    subtopic_id: int
    question_text: Annotated[str, Field(min_length=1)]
    options: list[QuestionOption | str] = []
    correct_answer: str | None = None
    difficulty_level: Difficulty


class QuestionBulkCreate(BaseModel):
    questions: Annotated[list[QuestionCreate], Field(min_length=1, max_length=500)]


class QuestionUpdate(BaseModel):
    """Partial update; only fields sent are changed."""
    subtopic_id: int | None = None
    question_text: Annotated[str, Field(min_length=1)] | None = None
    options: list[QuestionOption | str] | None = None
    correct_answer: str | None = None
    difficulty_level: Difficulty | None = None


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    subtopic_id: IdStr
    topic_id: IdStr
    question_text: str
    options: list
    correct_answer: str | None = None
    difficulty_level: int
    created_by: IdStr | None = None
    created_at: datetime


class QuestionPage(BaseModel):
    data: list[QuestionResponse]
    pagination: Pagination


class QuestionFilterPage(BaseModel):
    data: list[QuestionResponse]
    pagination: OffsetPagination
