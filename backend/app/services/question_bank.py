"""
Test Planner - Question Bank Service
CRUD, filtering and sampling over the question bank, plus the SQL-backed
question pool the allocator draws from.
"""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from app.models.curriculum import Subtopic
from app.models.question import Question
from app.schemas.question import QuestionCreate, QuestionUpdate
from app.services.access import normalize_identity
from app.services.allocator import QuestionSnapshot
from app.services.scoring import correct_answers

logger = logging.getLogger(__name__)


def to_snapshot(question: Question, topic_id: int) -> QuestionSnapshot:
    return QuestionSnapshot(
        question_id=question.id,
        subtopic_id=question.subtopic_id,
        topic_id=topic_id,
        question_text=question.question_text,
        options=list(question.options or []),
        correct_answer=question.correct_answer,
        difficulty_level=question.difficulty_level,
    )


class SqlQuestionPool:
    """QuestionPool backed by the questions table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_questions(
        self,
        *,
        difficulty: int | None = None,
        topic_ids: list[int] | None = None,
        subtopic_ids: list[int] | None = None,
        active_only: bool = True,
    ) -> list[QuestionSnapshot]:
        query = select(Question, Subtopic.topic_id).join(
            Subtopic, Question.subtopic_id == Subtopic.id
        )
        if active_only:
            query = query.where(Question.active.is_(True))
        if difficulty is not None:
            query = query.where(Question.difficulty_level == difficulty)
        if topic_ids:
            query = query.where(Subtopic.topic_id.in_(topic_ids))
        if subtopic_ids:
            query = query.where(Question.subtopic_id.in_(subtopic_ids))

        result = await self.db.execute(query)
        return [to_snapshot(question, topic_id) for question, topic_id in result.all()]

    async def snapshots_by_ids(self, question_ids: list[int]) -> list[QuestionSnapshot]:
        """Snapshots for ``question_ids`` in the given order, inactive ones included."""
        if not question_ids:
            return []
        result = await self.db.execute(
            select(Question, Subtopic.topic_id)
            .join(Subtopic, Question.subtopic_id == Subtopic.id)
            .where(Question.id.in_(question_ids))
        )
        found = {question.id: to_snapshot(question, topic_id) for question, topic_id in result.all()}
        missing = [qid for qid in question_ids if qid not in found]
        if missing:
            raise NotFoundError(f"Questions no longer exist: {missing}")
        return [found[qid] for qid in question_ids]


class QuestionService:
    """Service for question bank operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self):
        return select(Question).options(selectinload(Question.subtopic))

    async def list_questions(self, page: int, limit: int) -> tuple[list[Question], int]:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        total = await self.db.scalar(
            select(func.count(Question.id)).where(Question.active.is_(True))
        )
        result = await self.db.execute(
            self._base_query()
            .where(Question.active.is_(True))
            .order_by(Question.created_at.desc(), Question.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_question(self, question_id: Any) -> Question:
        question_id = normalize_identity(question_id, "question_id")
        result = await self.db.execute(
            self._base_query()
            .where(Question.id == question_id, Question.active.is_(True))
            .execution_options(populate_existing=True)
        )
        question = result.scalar_one_or_none()
        if question is None:
            raise NotFoundError("Question not found")
        return question

    async def create_question(self, user_id: Any, data: QuestionCreate) -> Question:
        user_id = normalize_identity(user_id, "user_id")
        await self._ensure_subtopic(data.subtopic_id)
        self._ensure_answerable(data.options, data.correct_answer)

        question = Question(
            subtopic_id=data.subtopic_id,
            question_text=data.question_text,
            options=[self._dump_option(option) for option in data.options],
            correct_answer=data.correct_answer,
            difficulty_level=data.difficulty_level,
            created_by=user_id,
        )
        self.db.add(question)
        await self.db.flush()
        return await self.get_question(question.id)

    async def bulk_create_questions(self, user_id: Any, items: list[QuestionCreate]) -> list[Question]:
        if not items:
            raise ValidationError("No questions to create")
        created = [await self.create_question(user_id, item) for item in items]
        logger.info("Bulk created %d questions", len(created))
        return created

    async def update_question(self, question_id: Any, user_id: Any, data: QuestionUpdate) -> Question:
        question = await self._owned_question(question_id, user_id, "modify")
        updates = data.model_dump(exclude_unset=True)

        if "subtopic_id" in updates:
            await self._ensure_subtopic(updates["subtopic_id"])
        self._ensure_answerable(
            updates.get("options", question.options),
            updates.get("correct_answer", question.correct_answer),
        )

        for key, value in updates.items():
            setattr(question, key, value)
        await self.db.flush()
        return await self.get_question(question.id)

    async def delete_question(self, question_id: Any, user_id: Any) -> None:
        question = await self._owned_question(question_id, user_id, "delete")
        question.active = False
        await self.db.flush()

    async def filter_questions(
        self,
        topic_id: Any = None,
        subtopic_id: Any = None,
        difficulty: int | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Question], int]:
        conditions = [Question.active.is_(True)]
        if topic_id is not None:
            conditions.append(Subtopic.topic_id == normalize_identity(topic_id, "topic_id"))
        if subtopic_id is not None:
            conditions.append(Question.subtopic_id == normalize_identity(subtopic_id, "subtopic_id"))
        if difficulty is not None:
            conditions.append(Question.difficulty_level == difficulty)

        total = await self.db.scalar(
            select(func.count(Question.id))
            .join(Subtopic, Question.subtopic_id == Subtopic.id)
            .where(*conditions)
        )
        result = await self.db.execute(
            self._base_query()
            .join(Subtopic, Question.subtopic_id == Subtopic.id)
            .where(*conditions)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def random_questions(
        self,
        count: int,
        difficulty: int | None = None,
        topic_ids: list[int] | None = None,
        subtopic_ids: list[int] | None = None,
    ) -> list[Question]:
        if count < 1:
            raise ValidationError("count must be positive")

        query = (
            self._base_query()
            .join(Subtopic, Question.subtopic_id == Subtopic.id)
            .where(Question.active.is_(True))
        )
        if difficulty is not None:
            query = query.where(Question.difficulty_level == difficulty)
        if topic_ids:
            query = query.where(Subtopic.topic_id.in_(topic_ids))
        if subtopic_ids:
            query = query.where(Question.subtopic_id.in_(subtopic_ids))

        result = await self.db.execute(query.order_by(func.random()).limit(count))
        return list(result.scalars().all())

    async def _owned_question(self, question_id: Any, user_id: Any, action: str) -> Question:
        question_id = normalize_identity(question_id, "question_id")
        user_id = normalize_identity(user_id, "user_id")

        question = await self.db.scalar(
            select(Question).where(Question.id == question_id, Question.active.is_(True))
        )
        if question is None:
            raise NotFoundError("Question not found")
        if question.created_by != user_id:
            raise UnauthorizedError(f"Not authorized to {action} this question")
        return question

    async def _ensure_subtopic(self, subtopic_id: int) -> None:
        if await self.db.get(Subtopic, subtopic_id) is None:
            raise NotFoundError(f"Subtopic {subtopic_id} not found")

    @staticmethod
    def _dump_option(option: Any) -> Any:
        return option.model_dump() if hasattr(option, "model_dump") else option

    @staticmethod
    def _ensure_answerable(options: list, correct_answer: str | None) -> None:
        dumped = [QuestionService._dump_option(option) for option in options or []]
        if not correct_answers({"options": dumped, "correct_answer": correct_answer}):
            raise ValidationError(
                "A question needs a correct option or a correct_answer"
            )
