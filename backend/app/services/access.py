"""
Test Planner - Identity & Access Helpers
Strict identifier parsing and plan membership checks shared by services.
"""
import logging
from collections.abc import Iterable
from typing import Any

from app.core.exceptions import UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)


def normalize_identity(value: Any, field: str = "id") -> int:
    """
    Convert a raw identifier into a canonical positive integer.

    Accepts native ints, integral floats and numeric strings. Anything else,
    including None, empty strings and zero, raises ValidationError naming
    ``field``.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")

    if isinstance(value, int):
        identity = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"Invalid {field}: {value!r}")
        identity = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text or not text.isdecimal():
            raise ValidationError(f"Invalid {field}: {value!r}")
        identity = int(text)
    else:
        raise ValidationError(f"Invalid {field}: {value!r}")

    if identity <= 0:
        raise ValidationError(f"Invalid {field}: {value!r}")
    return identity


def normalize_identities(values: Iterable[Any] | None, field: str) -> list[int]:
    """Normalize a list of identifiers, keeping order and dropping repeats."""
    result: list[int] = []
    for value in values or []:
        identity = normalize_identity(value, field)
        if identity not in result:
            result.append(identity)
    return result


def identity_set(relation: Any) -> set[int]:
    """
    Collapse a user relation into a set of identities.

    ``relation`` may be None, a bare identifier, a record exposing ``id`` or
    ``user_id`` (object or mapping), or a collection of any of those.
    """
    if relation is None:
        return set()
    if isinstance(relation, (list, tuple, set, frozenset)):
        ids: set[int] = set()
        for item in relation:
            ids |= identity_set(item)
        return ids
    if isinstance(relation, dict):
        raw = relation.get("user_id", relation.get("id"))
        return {normalize_identity(raw, "user_id")}
    if isinstance(relation, (int, str)):
        return {normalize_identity(relation, "user_id")}

    raw = getattr(relation, "user_id", None)
    if raw is None:
        raw = getattr(relation, "id", None)
    return {normalize_identity(raw, "user_id")}


def has_plan_access(student: Any, planner: Any, actor_id: Any) -> bool:
    """True when the actor is the plan's student or its planner."""
    actor = normalize_identity(actor_id, "actor_id")
    return actor in identity_set(student) | identity_set(planner)


def ensure_plan_access(student: Any, planner: Any, actor_id: Any) -> None:
    """Raise UnauthorizedError unless the actor is the student or the planner."""
    if not has_plan_access(student, planner, actor_id):
        logger.warning("Access denied for actor %s", actor_id)
        raise UnauthorizedError("You are not authorized to access this test")
