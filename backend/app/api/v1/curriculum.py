"""
Test Planner - Curriculum API
Endpoints for browsing and managing subjects, topics, and subtopics
"""
from fastapi import APIRouter, status

from app.api.deps import AdminUser, CurrentUser, DbSession
from app.schemas.curriculum import (
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
    SubtopicCreate,
    SubtopicResponse,
    SubtopicUpdate,
    TopicCreate,
    TopicResponse,
    TopicUpdate,
)
from app.services.curriculum import CurriculumService

router = APIRouter(prefix="/curriculum", tags=["Curriculum"])


# ============================================================================
# Subjects
# ============================================================================

@router.get("/subjects", response_model=list[SubjectResponse])
async def list_subjects(db: DbSession, current_user: CurrentUser):
    """
    List all active subjects.
    """
    return await CurriculumService(db).list_subjects()


@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(data: SubjectCreate, db: DbSession, admin: AdminUser):
    return await CurriculumService(db).create_subject(data)


@router.get("/subjects/{subject_id}", response_model=SubjectResponse)
async def get_subject(subject_id: str, db: DbSession, current_user: CurrentUser):
    return await CurriculumService(db).get_subject(subject_id)


@router.put("/subjects/{subject_id}", response_model=SubjectResponse)
async def update_subject(subject_id: str, data: SubjectUpdate, db: DbSession, admin: AdminUser):
    return await CurriculumService(db).update_subject(subject_id, data)


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(subject_id: str, db: DbSession, admin: AdminUser):
    await CurriculumService(db).delete_subject(subject_id)


@router.get("/subjects/{subject_id}/topics", response_model=list[TopicResponse])
async def list_topics(subject_id: str, db: DbSession, current_user: CurrentUser):
    """
    List the active topics of a subject.
    """
    return await CurriculumService(db).list_topics(subject_id)


# ============================================================================
# Topics
# ============================================================================

@router.post("/topics", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
async def create_topic(data: TopicCreate, db: DbSession, admin: AdminUser):
    return await CurriculumService(db).create_topic(data)


@router.get("/topics/{topic_id}", response_model=TopicResponse)
async def get_topic(topic_id: str, db: DbSession, current_user: CurrentUser):
    return await CurriculumService(db).get_topic(topic_id)


@router.put("/topics/{topic_id}", response_model=TopicResponse)
async def update_topic(topic_id: str, data: TopicUpdate, db: DbSession, admin: AdminUser):
    return await CurriculumService(db).update_topic(topic_id, data)


@router.delete("/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(topic_id: str, db: DbSession, admin: AdminUser):
    await CurriculumService(db).delete_topic(topic_id)


@router.get("/topics/{topic_id}/subtopics", response_model=list[SubtopicResponse])
async def list_subtopics(topic_id: str, db: DbSession, current_user: CurrentUser):
    """
    List the active subtopics of a topic.
    """
    return await CurriculumService(db).list_subtopics(topic_id)


# ============================================================================
# Subtopics
# ============================================================================

@router.post("/subtopics", response_model=SubtopicResponse, status_code=status.HTTP_201_CREATED)
async def create_subtopic(data: SubtopicCreate, db: DbSession, admin: AdminUser):
    return await CurriculumService(db).create_subtopic(data)


@router.get("/subtopics/{subtopic_id}", response_model=SubtopicResponse)
async def get_subtopic(subtopic_id: str, db: DbSession, current_user: CurrentUser):
    return await CurriculumService(db).get_subtopic(subtopic_id)


@router.put("/subtopics/{subtopic_id}", response_model=SubtopicResponse)
async def update_subtopic(subtopic_id: str, data: SubtopicUpdate, db: DbSession, admin: AdminUser):
    return await CurriculumService(db).update_subtopic(subtopic_id, data)


@router.delete("/subtopics/{subtopic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subtopic(subtopic_id: str, db: DbSession, admin: AdminUser):
    await CurriculumService(db).delete_subtopic(subtopic_id)
