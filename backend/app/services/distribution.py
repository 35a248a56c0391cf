"""
Test Planner - Question Distribution
Resolves a plan's requested question counts into per-bucket targets.
"""
from dataclasses import dataclass, field
from typing import Union

from app.core.config import settings
from app.core.exceptions import ValidationError

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

DIFFICULTY_LABELS = {
    "EASY": 1,
    "MEDIUM": 2,
    "HARD": 3,
}


@dataclass(frozen=True)
class ByTopic:
    """Counts keyed by topic id."""
    counts: dict[int, int] = field(default_factory=dict)

    kind = "topic"


@dataclass(frozen=True)
class ByDifficulty:
    """Counts keyed by difficulty level (1..5)."""
    counts: dict[int, int] = field(default_factory=dict)

    kind = "difficulty"


@dataclass(frozen=True)
class DefaultSplit:
    """An even split of ``total`` across the lowest ``tiers`` difficulty levels."""
    total: int
    tiers: int = 3

    kind = "difficulty"

    @property
    def counts(self) -> dict[int, int]:
        return distribute(self.total, self.tiers)


DistributionSpec = Union[ByTopic, ByDifficulty, DefaultSplit]


def distribute(total_questions: int, levels: int = 3) -> dict[int, int]:
    """
    Split ``total_questions`` across difficulty levels ``1..levels``.

    Every level gets ``total // levels``; the first ``total % levels`` levels
    get one extra. ``levels`` is clamped to 1..5.

        >>> distribute(13, 3)
        {1: 5, 2: 4, 3: 4}
    """
    if total_questions < 0:
        raise ValidationError("Total questions must be a non-negative number")

    levels = max(MIN_DIFFICULTY, min(levels, MAX_DIFFICULTY))
    base, remainder = divmod(total_questions, levels)

    return {
        level: base + (1 if level <= remainder else 0)
        for level in range(1, levels + 1)
    }


def validate_distribution(distribution: dict[int, int]) -> bool:
    """A difficulty distribution is valid when keys are 1..5, counts >= 0 and the total > 0."""
    if not distribution:
        return False
    keys_ok = all(
        MIN_DIFFICULTY <= int(level) <= MAX_DIFFICULTY and count >= 0
        for level, count in distribution.items()
    )
    return keys_ok and sum(distribution.values()) > 0


def parse_difficulty_label(key: str) -> int | None:
    """Map ``EASY``/``MEDIUM``/``HARD`` or ``"1"``..``"5"`` to a level, else None."""
    text = str(key).strip()
    upper = text.upper()
    if upper in DIFFICULTY_LABELS:
        return DIFFICULTY_LABELS[upper]
    if text.isdecimal() and MIN_DIFFICULTY <= int(text) <= MAX_DIFFICULTY:
        return int(text)
    return None


def _topic_key(key: str, topic_ids: list[int]) -> int | None:
    text = str(key).strip()
    if text.lower().startswith("topic_"):
        text = text[len("topic_"):]
    if text.isdecimal() and int(text) in topic_ids:
        return int(text)
    return None


def _check_counts(question_counts: dict[str, int]) -> None:
    for key, count in question_counts.items():
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError(f"Question count for '{key}' must be an integer")
        if count < 0:
            raise ValidationError(f"Question count for '{key}' must not be negative")


def resolve_distribution(
    question_counts: dict[str, int] | None,
    topic_ids: list[int],
    total_questions: int | None = None,
    tiers: int | None = None,
) -> DistributionSpec:
    """
    Decide once how the requested counts are keyed.

    Topic keys win, then difficulty labels, then an even split of the total
    across ``tiers`` difficulty levels.
    """
    tiers = tiers or settings.DEFAULT_DIFFICULTY_TIERS
    question_counts = question_counts or {}
    _check_counts(question_counts)

    spec: DistributionSpec
    if question_counts and all(_topic_key(k, topic_ids) is not None for k in question_counts):
        counts = {topic_id: 0 for topic_id in topic_ids}
        for key, count in question_counts.items():
            counts[_topic_key(key, topic_ids)] += count
        spec = ByTopic(counts=counts)
    elif question_counts and any(parse_difficulty_label(k) is not None for k in question_counts):
        counts = {}
        for key, count in question_counts.items():
            level = parse_difficulty_label(key)
            if level is None:
                raise ValidationError(f"Unknown difficulty key in question counts: '{key}'")
            counts[level] = counts.get(level, 0) + count
        spec = ByDifficulty(counts=dict(sorted(counts.items())))
    else:
        total = sum(question_counts.values()) if question_counts else (total_questions or 0)
        spec = DefaultSplit(total=total, tiers=tiers)

    requested = sum(spec.counts.values())
    if requested <= 0:
        raise ValidationError("A test plan needs at least one question")
    if total_questions is not None and requested != total_questions:
        raise ValidationError(
            f"Question counts add up to {requested}, expected {total_questions}"
        )
    if requested > settings.MAX_QUESTIONS_PER_PLAN:
        raise ValidationError(
            f"A test plan may hold at most {settings.MAX_QUESTIONS_PER_PLAN} questions"
        )
    if isinstance(spec, (ByDifficulty, DefaultSplit)) and not validate_distribution(spec.counts):
        raise ValidationError("Invalid question distribution")

    return spec


def bucket_label(spec: DistributionSpec, key: int) -> str:
    """Human readable bucket name used in errors and logs."""
    return f"{spec.kind} {key}"
