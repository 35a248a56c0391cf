"""
Test Planner - Curriculum Schemas
Pydantic schemas for subjects, topics, and subtopics
"""
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import IdStr

Slug = Annotated[str, Field(min_length=1, max_length=200, pattern=r"^[a-z0-9-]+$")]


# ============================================================================
# Subject Schemas
# ============================================================================

class SubjectBase(BaseModel):
    """Base subject schema."""
    name: Annotated[str, Field(min_length=1, max_length=100)]
    slug: Annotated[str, Field(min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")]
    description: str | None = None
    display_order: int = 0


class SubjectCreate(SubjectBase):
    """Schema for creating a subject."""
    pass


class SubjectUpdate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=100)] | None = None
    description: str | None = None
    display_order: int | None = None
    is_active: bool | None = None


class SubjectResponse(SubjectBase):
    """Schema for subject response."""
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    is_active: bool
    created_at: datetime


# ============================================================================
# Topic Schemas
# ============================================================================

class TopicBase(BaseModel):
    """Base topic schema."""
    name: Annotated[str, Field(min_length=1, max_length=200)]
    slug: Slug
    description: str | None = None
    display_order: int = 0


class TopicCreate(TopicBase):
    """Schema for creating a topic."""
    subject_id: int


class TopicUpdate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=200)] | None = None
    description: str | None = None
    display_order: int | None = None
    is_active: bool | None = None


class TopicResponse(TopicBase):
    """Schema for topic response."""
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    subject_id: IdStr
    is_active: bool
    created_at: datetime


# ============================================================================
# Subtopic Schemas
# ============================================================================

class SubtopicBase(BaseModel):
    """Base subtopic schema."""
    name: Annotated[str, Field(min_length=1, max_length=200)]
    slug: Slug
    description: str | None = None
    display_order: int = 0


class SubtopicCreate(SubtopicBase):
    """Schema for creating a subtopic."""
    topic_id: int


class SubtopicUpdate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=200)] | None = None
    description: str | None = None
    display_order: int | None = None
    is_active: bool | None = None


class SubtopicResponse(SubtopicBase):
    """Schema for subtopic response."""
    model_config = ConfigDict(from_attributes=True)

    id: IdStr
    topic_id: IdStr
    is_active: bool
    created_at: datetime
