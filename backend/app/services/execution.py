"""
Test Planner - Test Execution Service
State machine for a single test sitting: start, answer, pause, resume,
complete and abandon.
"""
import copy
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    ConcurrentUpdateError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.models.test_plan import ExecutionStatus, TestExecution, TestPlan, TimingType
from app.services.access import ensure_plan_access, normalize_identity
from app.services.allocator import QuestionSnapshot
from app.services.question_bank import SqlQuestionPool
from app.services.scoring import calculate_score, check_answer

logger = logging.getLogger(__name__)


# Statuses each operation may start from
ALLOWED_TRANSITIONS: dict[str, tuple[ExecutionStatus, ...]] = {
    "start": (ExecutionStatus.NOT_STARTED,),
    "submit_answer": (ExecutionStatus.IN_PROGRESS,),
    "submit_all_answers": (ExecutionStatus.IN_PROGRESS,),
    "pause": (ExecutionStatus.IN_PROGRESS,),
    "resume": (ExecutionStatus.PAUSED,),
    "complete": (ExecutionStatus.IN_PROGRESS,),
    "abandon": (ExecutionStatus.IN_PROGRESS, ExecutionStatus.PAUSED),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def state_error_message(operation: str, current: ExecutionStatus) -> str:
    """Describe why ``operation`` cannot run from ``current``."""
    if current == ExecutionStatus.COMPLETED:
        return "Test is already completed"
    if current == ExecutionStatus.ABANDONED:
        return "Test is already abandoned"
    if operation == "start":
        return "Test has already started"
    if operation == "resume":
        return "Test is not paused"
    if current == ExecutionStatus.NOT_STARTED:
        return "Test has not started yet"
    return "Test is currently paused"


def ensure_transition(operation: str, current: ExecutionStatus | str) -> None:
    """Raise InvalidStateError unless ``operation`` is legal from ``current``."""
    current = ExecutionStatus(current)
    if current not in ALLOWED_TRANSITIONS[operation]:
        raise InvalidStateError(state_error_message(operation, current))


def snapshot_document(snapshot: QuestionSnapshot) -> dict[str, Any]:
    """Snapshot as stored in ``test_data``; identifiers are kept as strings."""
    document = snapshot.to_dict()
    for key in ("question_id", "subtopic_id", "topic_id"):
        document[key] = str(document[key])
    return document


def build_test_data(snapshots: list[QuestionSnapshot], time_limit: int | None = None) -> dict[str, Any]:
    """Fresh ``test_data`` for a sitting: snapshot, blank responses, empty timing."""
    questions = [snapshot_document(snapshot) for snapshot in snapshots]
    return {
        "questions": questions,
        "responses": [
            {
                "question_id": question["question_id"],
                "student_answer": None,
                "is_correct": None,
                "time_spent": 0,
            }
            for question in questions
        ],
        "timing": {
            "test_start_time": None,
            "test_end_time": None,
            "total_time_allowed": time_limit * 60 if time_limit else None,
        },
    }


class ExecutionService:
    """Service for test execution operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Creation & lookup
    # ------------------------------------------------------------------

    async def create_execution(
        self,
        plan: TestPlan,
        snapshots: list[QuestionSnapshot],
    ) -> TestExecution:
        """
        Seed a NOT_STARTED sitting for ``plan``.

        If the plan already has a sitting that has not started, that one is
        returned instead of creating a duplicate.
        """
        existing = await self._pending_execution(plan.id)
        if existing is not None:
            return existing

        time_limit = plan.time_limit if plan.timing_type == TimingType.TIMED else None
        execution = TestExecution(
            test_plan_id=plan.id,
            status=ExecutionStatus.NOT_STARTED,
            test_data=build_test_data(snapshots, time_limit),
        )
        self.db.add(execution)
        await self.db.flush()

        logger.info(
            "Created execution %s for plan %s with %d questions",
            execution.id, plan.id, len(snapshots),
        )
        return await self._load(execution.id)

    async def create_for_plan(self, plan_id: Any, actor_id: Any) -> TestExecution:
        """New sitting (a retake) built from the plan's allocated questions."""
        plan_id = normalize_identity(plan_id, "test_plan_id")
        plan = await self.db.get(TestPlan, plan_id)
        if plan is None:
            raise NotFoundError("Test plan not found")
        ensure_plan_access(plan.student_id, plan.planned_by, actor_id)

        existing = await self._pending_execution(plan.id)
        if existing is not None:
            return existing

        question_ids = (plan.configuration or {}).get("question_ids", [])
        snapshots = await SqlQuestionPool(self.db).snapshots_by_ids(
            [normalize_identity(qid, "question_id") for qid in question_ids]
        )
        return await self.create_execution(plan, snapshots)

    async def get_execution(self, execution_id: Any, actor_id: Any) -> TestExecution:
        execution = await self._load(execution_id)
        self._ensure_access(execution, actor_id)
        return execution

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    async def start(self, execution_id: Any, actor_id: Any) -> TestExecution:
        execution = await self.get_execution(execution_id, actor_id)
        ensure_transition("start", execution.status)

        now = _utcnow()
        test_data = copy.deepcopy(execution.test_data)
        test_data["timing"]["test_start_time"] = now.isoformat()

        execution.status = ExecutionStatus.IN_PROGRESS
        execution.started_at = now
        execution.test_data = test_data
        return await self._save(execution, "started")

    async def submit_answer(
        self,
        execution_id: Any,
        actor_id: Any,
        question_id: Any,
        answer: str | None,
        time_spent: int = 0,
    ) -> TestExecution:
        """Record one answer. Never completes the test."""
        execution = await self.get_execution(execution_id, actor_id)
        ensure_transition("submit_answer", execution.status)

        test_data = copy.deepcopy(execution.test_data)
        questions = self._questions_by_id(test_data)
        question_id = normalize_identity(question_id, "question_id")
        if question_id not in questions:
            raise NotFoundError("Question not found in this test")

        self._record(test_data, questions[question_id], answer, time_spent)
        execution.test_data = test_data
        return await self._save(execution, "answer recorded")

    async def submit_all_answers(
        self,
        execution_id: Any,
        actor_id: Any,
        responses: list[dict[str, Any]],
        end_time: datetime | None = None,
    ) -> TestExecution:
        """
        Merge a batch of answers and stamp the end time.

        Each response carries ``question_id``, ``answer`` and ``time_taken``.
        The test stays IN_PROGRESS; scoring happens on ``complete``.
        """
        execution = await self.get_execution(execution_id, actor_id)
        ensure_transition("submit_all_answers", execution.status)
        if not responses:
            raise ValidationError("No responses submitted")

        test_data = copy.deepcopy(execution.test_data)
        questions = self._questions_by_id(test_data)
        for response in responses:
            question_id = normalize_identity(response.get("question_id"), "question_id")
            if question_id not in questions:
                raise NotFoundError(f"Question {question_id} not found in this test")
            self._record(
                test_data,
                questions[question_id],
                response.get("answer"),
                response.get("time_taken") or 0,
            )

        test_data["timing"]["test_end_time"] = (end_time or _utcnow()).isoformat()
        execution.test_data = test_data
        return await self._save(execution, "answers submitted")

    async def pause(self, execution_id: Any, actor_id: Any) -> TestExecution:
        execution = await self.get_execution(execution_id, actor_id)
        ensure_transition("pause", execution.status)

        execution.status = ExecutionStatus.PAUSED
        execution.paused_at = _utcnow()
        return await self._save(execution, "paused")

    async def resume(self, execution_id: Any, actor_id: Any) -> TestExecution:
        execution = await self.get_execution(execution_id, actor_id)
        ensure_transition("resume", execution.status)

        execution.status = ExecutionStatus.IN_PROGRESS
        execution.paused_at = None
        return await self._save(execution, "resumed")

    async def complete(self, execution_id: Any, actor_id: Any) -> TestExecution:
        """Score the sitting from its snapshot and close it."""
        execution = await self.get_execution(execution_id, actor_id)
        ensure_transition("complete", execution.status)

        now = _utcnow()
        test_data = copy.deepcopy(execution.test_data)
        questions = self._questions_by_id(test_data)

        correct = 0
        for response in test_data["responses"]:
            question = questions.get(normalize_identity(response["question_id"], "question_id"))
            is_correct = question is not None and check_answer(question, response.get("student_answer"))
            response["is_correct"] = is_correct
            correct += int(is_correct)

        if not test_data["timing"].get("test_end_time"):
            test_data["timing"]["test_end_time"] = now.isoformat()

        execution.score = calculate_score(correct, len(test_data["questions"]))
        execution.status = ExecutionStatus.COMPLETED
        execution.completed_at = now
        execution.test_data = test_data
        return await self._save(execution, f"completed with score {execution.score}")

    async def abandon(self, execution_id: Any) -> TestExecution:
        """Administrative close of an interrupted sitting."""
        execution = await self._load(execution_id)
        ensure_transition("abandon", execution.status)

        execution.status = ExecutionStatus.ABANDONED
        execution.paused_at = None
        return await self._save(execution, "abandoned")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, execution_id: Any) -> TestExecution:
        execution_id = normalize_identity(execution_id, "execution_id")
        result = await self.db.execute(
            select(TestExecution)
            .options(selectinload(TestExecution.test_plan))
            .where(TestExecution.id == execution_id)
            .execution_options(populate_existing=True)
        )
        execution = result.scalar_one_or_none()
        if execution is None:
            raise NotFoundError("Test execution not found")
        return execution

    async def _pending_execution(self, plan_id: int) -> TestExecution | None:
        result = await self.db.execute(
            select(TestExecution.id)
            .where(
                TestExecution.test_plan_id == plan_id,
                TestExecution.status == ExecutionStatus.NOT_STARTED,
            )
            .order_by(TestExecution.id.desc())
            .limit(1)
        )
        execution_id = result.scalar_one_or_none()
        return await self._load(execution_id) if execution_id is not None else None

    async def _save(self, execution: TestExecution, event: str) -> TestExecution:
        # A failed flush expires the instance, so the id is read up front
        execution_id = execution.id
        try:
            await self.db.flush()
        except StaleDataError:
            logger.warning("Concurrent update on execution %s", execution_id)
            raise ConcurrentUpdateError(
                "Test execution was modified by another request; reload and retry"
            )
        logger.info("Execution %s %s", execution_id, event)
        return execution

    @staticmethod
    def _ensure_access(execution: TestExecution, actor_id: Any) -> None:
        plan = execution.test_plan
        ensure_plan_access(plan.student_id, plan.planned_by, actor_id)

    @staticmethod
    def _questions_by_id(test_data: dict[str, Any]) -> dict[int, dict[str, Any]]:
        return {
            normalize_identity(question["question_id"], "question_id"): question
            for question in test_data.get("questions", [])
        }

    @staticmethod
    def _record(
        test_data: dict[str, Any],
        question: dict[str, Any],
        answer: str | None,
        time_spent: int,
    ) -> None:
        for response in test_data["responses"]:
            if str(response["question_id"]) == str(question["question_id"]):
                response["student_answer"] = answer
                response["is_correct"] = check_answer(question, answer)
                response["time_spent"] = time_spent
                return
        raise NotFoundError("Question not found in this test")
