"""
Test Planner - Curriculum Service
Subjects, topics and subtopics that questions are filed under
"""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.models.curriculum import Subject, Subtopic, Topic
from app.schemas.curriculum import (
    SubjectCreate,
    SubjectUpdate,
    SubtopicCreate,
    SubtopicUpdate,
    TopicCreate,
    TopicUpdate,
)
from app.services.access import normalize_identity

logger = logging.getLogger(__name__)


class CurriculumService:
    """Service for curriculum operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Subjects

    async def list_subjects(self) -> list[Subject]:
        result = await self.db.execute(
            select(Subject)
            .where(Subject.is_active.is_(True))
            .order_by(Subject.display_order, Subject.id)
        )
        return list(result.scalars().all())

    async def get_subject(self, subject_id: Any) -> Subject:
        return await self._get(Subject, subject_id, "subject_id")

    async def create_subject(self, data: SubjectCreate) -> Subject:
        subject = Subject(**data.model_dump())
        return await self._insert(subject)

    async def update_subject(self, subject_id: Any, data: SubjectUpdate) -> Subject:
        subject = await self.get_subject(subject_id)
        return await self._apply(subject, data.model_dump(exclude_unset=True))

    async def delete_subject(self, subject_id: Any) -> None:
        await self._delete(await self.get_subject(subject_id))

    # Topics

    async def list_topics(self, subject_id: Any) -> list[Topic]:
        subject = await self.get_subject(subject_id)
        result = await self.db.execute(
            select(Topic)
            .where(Topic.subject_id == subject.id, Topic.is_active.is_(True))
            .order_by(Topic.display_order, Topic.id)
        )
        return list(result.scalars().all())

    async def get_topic(self, topic_id: Any) -> Topic:
        return await self._get(Topic, topic_id, "topic_id")

    async def create_topic(self, data: TopicCreate) -> Topic:
        await self.get_subject(data.subject_id)
        return await self._insert(Topic(**data.model_dump()))

    async def update_topic(self, topic_id: Any, data: TopicUpdate) -> Topic:
        topic = await self.get_topic(topic_id)
        return await self._apply(topic, data.model_dump(exclude_unset=True))

    async def delete_topic(self, topic_id: Any) -> None:
        await self._delete(await self.get_topic(topic_id))

    # Subtopics

    async def list_subtopics(self, topic_id: Any) -> list[Subtopic]:
        topic = await self.get_topic(topic_id)
        result = await self.db.execute(
            select(Subtopic)
            .where(Subtopic.topic_id == topic.id, Subtopic.is_active.is_(True))
            .order_by(Subtopic.display_order, Subtopic.id)
        )
        return list(result.scalars().all())

    async def get_subtopic(self, subtopic_id: Any) -> Subtopic:
        return await self._get(Subtopic, subtopic_id, "subtopic_id")

    async def create_subtopic(self, data: SubtopicCreate) -> Subtopic:
        await self.get_topic(data.topic_id)
        return await self._insert(Subtopic(**data.model_dump()))

    async def update_subtopic(self, subtopic_id: Any, data: SubtopicUpdate) -> Subtopic:
        subtopic = await self.get_subtopic(subtopic_id)
        return await self._apply(subtopic, data.model_dump(exclude_unset=True))

    async def delete_subtopic(self, subtopic_id: Any) -> None:
        await self._delete(await self.get_subtopic(subtopic_id))

    # Helpers

    async def _get(self, model, raw_id: Any, field: str):
        entity = await self.db.get(model, normalize_identity(raw_id, field))
        if entity is None or not entity.is_active:
            raise NotFoundError(f"{model.__name__} not found")
        return entity

    async def _insert(self, entity):
        self.db.add(entity)
        try:
            await self.db.flush()
        except IntegrityError:
            raise ValidationError(f"{type(entity).__name__} with this name or slug already exists")
        await self.db.refresh(entity)
        logger.info("Created %s %s", type(entity).__name__, entity.id)
        return entity

    async def _apply(self, entity, updates: dict[str, Any]):
        for key, value in updates.items():
            setattr(entity, key, value)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def _delete(self, entity) -> None:
        # Soft delete keeps questions and plans that reference the entry valid
        entity.is_active = False
        await self.db.flush()
        logger.info("Deactivated %s %s", type(entity).__name__, entity.id)
