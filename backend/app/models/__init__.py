"""Test Planner - Models initialization."""
from app.models.user import User, UserRole, PLANNER_ROLES
from app.models.curriculum import Subject, Topic, Subtopic
from app.models.question import Question
from app.models.test_plan import (
    TestPlan,
    TestExecution,
    PlanType,
    TimingType,
    ExecutionStatus,
)


__all__ = [
    # User models
    "User",
    "UserRole",
    "PLANNER_ROLES",
    # Curriculum models
    "Subject",
    "Topic",
    "Subtopic",
    # Question bank
    "Question",
    # Test plans & executions
    "TestPlan",
    "TestExecution",
    "PlanType",
    "TimingType",
    "ExecutionStatus",
]
