"""
Test Planner - Test Execution Schemas
Pydantic schemas for answering and viewing a test sitting
"""
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.test_plan import ExecutionStatus
from app.schemas.common import IdStr
from app.schemas.test_plan import RawId


def answer_text(value: Any) -> Any:
    """Numeric answers are matched as text; ``12.0`` reads as ``"12"``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class AnswerSubmit(BaseModel):
    """A single answer given during a sitting."""
    question_id: RawId
    answer: str | None = None
    time_spent: Annotated[int, Field(ge=0)] = 0

    @field_validator("answer", mode="before")
    @classmethod
    def numeric_answer(cls, v: Any) -> Any:
        return answer_text(v)


class ResponseIn(BaseModel):
    question_id: RawId
    answer: str | None = None
    time_taken: Annotated[int, Field(ge=0)] = 0

    @field_validator("answer", mode="before")
    @classmethod
    def numeric_answer(cls, v: Any) -> Any:
        return answer_text(v)


class SubmitAllRequest(BaseModel):
    """Batch of answers, typically sent when the student hands the test in."""
    responses: list[ResponseIn]
    end_time: datetime | None = None


class ExecutionResponse(BaseModel):
    """Schema for an execution view."""
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    test_plan_id: IdStr
    status: ExecutionStatus
    started_at: datetime | None = None
    paused_at: datetime | None = None
    completed_at: datetime | None = None
    score: int | None = None
    all_answered: bool = False
    test_data: dict[str, Any]
