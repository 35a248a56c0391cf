"""
Test Planner - Question Bank API
Endpoints for managing, filtering, and sampling questions
"""
import math
from typing import Annotated

from fastapi import APIRouter, Query, status

from app.api.deps import CurrentUser, DbSession, QuestionAuthor
from app.core.config import settings
from app.schemas.common import OffsetPagination, Pagination
from app.schemas.question import (
    QuestionBulkCreate,
    QuestionCreate,
    QuestionFilterPage,
    QuestionPage,
    QuestionResponse,
    QuestionUpdate,
)
from app.services.access import normalize_identities
from app.services.question_bank import QuestionService

router = APIRouter(prefix="/questions", tags=["Questions"])

DifficultyQuery = Annotated[int | None, Query(ge=1, le=5)]


@router.get("", response_model=QuestionPage)
async def list_questions(
    db: DbSession,
    current_user: CurrentUser,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = settings.DEFAULT_PAGE_SIZE,
):
    """
    List active questions, newest first.
    """
    questions, total = await QuestionService(db).list_questions(page, limit)
    return QuestionPage(
        data=[QuestionResponse.model_validate(q) for q in questions],
        pagination=Pagination(
            total=total,
            pages=math.ceil(total / limit),
            current=page,
            per_page=limit,
        ),
    )


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(data: QuestionCreate, db: DbSession, author: QuestionAuthor):
    return await QuestionService(db).create_question(author.id, data)


@router.post("/bulk", response_model=list[QuestionResponse], status_code=status.HTTP_201_CREATED)
async def bulk_create_questions(data: QuestionBulkCreate, db: DbSession, author: QuestionAuthor):
    return await QuestionService(db).bulk_create_questions(author.id, data.questions)


@router.get("/filter", response_model=QuestionFilterPage)
async def filter_questions(
    db: DbSession,
    current_user: CurrentUser,
    topic_id: str | None = None,
    subtopic_id: str | None = None,
    difficulty: DifficultyQuery = None,
    limit: Annotated[int, Query(ge=1, le=100)] = settings.DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """
    Filter active questions by topic, subtopic and difficulty.
    """
    questions, total = await QuestionService(db).filter_questions(
        topic_id=topic_id,
        subtopic_id=subtopic_id,
        difficulty=difficulty,
        limit=limit,
        offset=offset,
    )
    return QuestionFilterPage(
        data=[QuestionResponse.model_validate(q) for q in questions],
        pagination=OffsetPagination(total=total, offset=offset, limit=limit),
    )


@router.get("/random", response_model=list[QuestionResponse])
async def random_questions(
    db: DbSession,
    current_user: CurrentUser,
    count: Annotated[int, Query(ge=1, le=100)] = 10,
    difficulty: DifficultyQuery = None,
    topic_ids: Annotated[list[str] | None, Query()] = None,
    subtopic_ids: Annotated[list[str] | None, Query()] = None,
):
    """
    Random sample of active questions.
    """
    return await QuestionService(db).random_questions(
        count,
        difficulty=difficulty,
        topic_ids=normalize_identities(topic_ids, "topic_id"),
        subtopic_ids=normalize_identities(subtopic_ids, "subtopic_id"),
    )


@router.get("/{question_id}", response_model=QuestionResponse)
async def get_question(question_id: str, db: DbSession, current_user: CurrentUser):
    return await QuestionService(db).get_question(question_id)


@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(question_id: str, data: QuestionUpdate, db: DbSession, current_user: CurrentUser):
    """
    Update a question. Only its creator may change it.
    """
    return await QuestionService(db).update_question(question_id, current_user.id, data)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(question_id: str, db: DbSession, current_user: CurrentUser):
    """
    Soft-delete a question. Only its creator may remove it.
    """
    await QuestionService(db).delete_question(question_id, current_user.id)
