"""
Test Planner - Question Allocator
Turns a test plan configuration into an ordered list of question snapshots.
"""
import logging
import math
import random
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

from app.core.exceptions import InsufficientQuestionsError
from app.services.distribution import (
    ByTopic,
    DistributionSpec,
    bucket_label,
    resolve_distribution,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionSnapshot:
    """Everything needed to render and score a question without the bank."""
    question_id: int
    subtopic_id: int
    topic_id: int
    question_text: str
    options: list = field(default_factory=list, hash=False)
    correct_answer: str | None = None
    difficulty_level: int = 1

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PlanConfiguration:
    """Requested topics, subtopics and question counts for a test plan."""
    topics: list[int] = field(default_factory=list)
    subtopics: list[int] = field(default_factory=list)
    question_counts: dict[str, int] | None = None
    total_questions: int | None = None

    def distribution(self) -> DistributionSpec:
        return resolve_distribution(
            self.question_counts,
            self.topics,
            total_questions=self.total_questions,
        )


class QuestionPool(Protocol):
    """Read-only view over the question bank."""

    async def find_questions(
        self,
        *,
        difficulty: int | None = None,
        topic_ids: list[int] | None = None,
        subtopic_ids: list[int] | None = None,
        active_only: bool = True,
    ) -> list[QuestionSnapshot]:
        ...


class QuestionAllocator:
    """
    Picks questions bucket by bucket.

    Each bucket (a difficulty level or a topic) is filled by a uniform random
    sample without replacement. When the plan spans several topics, a
    balancing pass swaps questions of over-represented topics for unused
    candidates of the same bucket, so bucket counts never change. The final
    list is shuffled so its order says nothing about buckets.
    """

    def __init__(self, pool: QuestionPool, rng: random.Random | None = None):
        self.pool = pool
        self.rng = rng or random.Random()

    async def allocate(
        self,
        config: PlanConfiguration,
        spec: DistributionSpec | None = None,
    ) -> list[QuestionSnapshot]:
        spec = spec or config.distribution()
        targets = {key: count for key, count in spec.counts.items() if count > 0}
        required = sum(targets.values())

        picks: dict[int, list[QuestionSnapshot]] = {}
        spares: dict[int, list[QuestionSnapshot]] = {}
        for key, count in targets.items():
            candidates = await self._candidates(spec, key, config)
            if len(candidates) < count:
                logger.warning(
                    "Insufficient questions for %s: found %d, needed %d",
                    bucket_label(spec, key), len(candidates), count,
                )
                raise InsufficientQuestionsError(
                    found=len(candidates),
                    needed=count,
                    bucket=bucket_label(spec, key),
                )
            self.rng.shuffle(candidates)
            picks[key] = candidates[:count]
            spares[key] = candidates[count:]

        if len(config.topics) > 1:
            picks = self._balance_topics(picks, spares, len(config.topics))

        selected = [question for bucket in picks.values() for question in bucket][:required]
        if len(selected) < required:
            raise InsufficientQuestionsError(found=len(selected), needed=required)

        self.rng.shuffle(selected)
        logger.info(
            "Allocated %d questions across %d %s buckets",
            len(selected), len(targets), spec.kind,
        )
        return selected

    async def _candidates(
        self,
        spec: DistributionSpec,
        key: int,
        config: PlanConfiguration,
    ) -> list[QuestionSnapshot]:
        subtopic_ids = config.subtopics or None
        if isinstance(spec, ByTopic):
            found = await self.pool.find_questions(
                topic_ids=[key],
                subtopic_ids=subtopic_ids,
            )
        else:
            found = await self.pool.find_questions(
                difficulty=key,
                subtopic_ids=subtopic_ids,
                topic_ids=None if subtopic_ids else (config.topics or None),
            )

        # Stable starting order so a seeded rng gives repeatable picks
        unique = {question.question_id: question for question in found}
        return [unique[question_id] for question_id in sorted(unique)]

    def _balance_topics(
        self,
        picks: dict[int, list[QuestionSnapshot]],
        spares: dict[int, list[QuestionSnapshot]],
        topic_count: int,
    ) -> dict[int, list[QuestionSnapshot]]:
        selected_count = sum(len(bucket) for bucket in picks.values())
        per_topic = math.ceil(selected_count / topic_count)
        per_topic_counts = Counter(
            question.topic_id for bucket in picks.values() for question in bucket
        )

        balanced: dict[int, list[QuestionSnapshot]] = {}
        for key, bucket in picks.items():
            unused = list(spares.get(key, []))
            kept: list[QuestionSnapshot] = []
            for question in bucket:
                if per_topic_counts[question.topic_id] > per_topic:
                    replacement = next(
                        (s for s in unused if per_topic_counts[s.topic_id] < per_topic),
                        None,
                    )
                    if replacement is not None:
                        unused.remove(replacement)
                        per_topic_counts[question.topic_id] -= 1
                        per_topic_counts[replacement.topic_id] += 1
                        kept.append(replacement)
                        continue
                kept.append(question)
            balanced[key] = kept
        return balanced
