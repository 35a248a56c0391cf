"""
Test Planner - Answer Checking & Scoring
"""
from typing import Any


def correct_answers(question: dict[str, Any]) -> set[str]:
    """
    Accepted answers for a snapshot question.

    Options flagged ``is_correct`` count, as does a stored ``correct_answer``.
    """
    accepted: set[str] = set()
    for option in question.get("options") or []:
        if isinstance(option, dict) and option.get("is_correct"):
            text = option.get("option_text")
            if text is not None:
                accepted.add(str(text))
    if question.get("correct_answer") is not None:
        accepted.add(str(question["correct_answer"]))
    return accepted


def check_answer(question: dict[str, Any], answer: str | None) -> bool:
    """Exact string match against the accepted answers."""
    if answer is None:
        return False
    return answer in correct_answers(question)


def all_answered(responses: list[dict[str, Any]]) -> bool:
    return all(response.get("student_answer") is not None for response in responses)


def calculate_score(correct: int, total: int) -> int:
    """Percentage score rounded half up; an empty test scores 0."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)
