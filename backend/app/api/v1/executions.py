"""
Test Planner - Test Execution API
Endpoints that drive a sitting through its lifecycle
"""
from fastapi import APIRouter

from app.api.deps import AdminUser, CurrentUser, DbSession
from app.schemas.execution import AnswerSubmit, ExecutionResponse, SubmitAllRequest
from app.services.execution import ExecutionService

router = APIRouter(prefix="/executions", tags=["Test Executions"])


@router.get("/{execution_id}", response_model=ExecutionResponse)
async def get_execution(execution_id: str, db: DbSession, current_user: CurrentUser):
    return await ExecutionService(db).get_execution(execution_id, current_user.id)


@router.post("/{execution_id}/start", response_model=ExecutionResponse)
async def start_execution(execution_id: str, db: DbSession, current_user: CurrentUser):
    return await ExecutionService(db).start(execution_id, current_user.id)


@router.post("/{execution_id}/answers", response_model=ExecutionResponse)
async def submit_answer(
    execution_id: str,
    data: AnswerSubmit,
    db: DbSession,
    current_user: CurrentUser,
):
    """
    Record one answer. The test is not completed automatically, even when
    every question has been answered.
    """
    return await ExecutionService(db).submit_answer(
        execution_id,
        current_user.id,
        question_id=data.question_id,
        answer=data.answer,
        time_spent=data.time_spent,
    )


@router.post("/{execution_id}/submit", response_model=ExecutionResponse)
async def submit_all_answers(
    execution_id: str,
    data: SubmitAllRequest,
    db: DbSession,
    current_user: CurrentUser,
):
    return await ExecutionService(db).submit_all_answers(
        execution_id,
        current_user.id,
        [response.model_dump() for response in data.responses],
        end_time=data.end_time,
    )


@router.post("/{execution_id}/pause", response_model=ExecutionResponse)
async def pause_execution(execution_id: str, db: DbSession, current_user: CurrentUser):
    return await ExecutionService(db).pause(execution_id, current_user.id)


@router.post("/{execution_id}/resume", response_model=ExecutionResponse)
async def resume_execution(execution_id: str, db: DbSession, current_user: CurrentUser):
    return await ExecutionService(db).resume(execution_id, current_user.id)


@router.post("/{execution_id}/complete", response_model=ExecutionResponse)
async def complete_execution(execution_id: str, db: DbSession, current_user: CurrentUser):
    """
    Score the test and close it.
    """
    return await ExecutionService(db).complete(execution_id, current_user.id)


@router.post("/{execution_id}/abandon", response_model=ExecutionResponse)
async def abandon_execution(execution_id: str, db: DbSession, admin: AdminUser):
    """
    Close an interrupted sitting. Used by administrators and cleanup jobs.
    """
    return await ExecutionService(db).abandon(execution_id)
