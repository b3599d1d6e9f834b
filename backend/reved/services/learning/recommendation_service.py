"""
Recommendation Service

Ranks the exercises a student should do next.

Pipeline:
    cache lookup → candidate query (active, not mastered, grade/subject
    filtered, curriculum order, limit × multiplier) → scoring → top `limit`
    → cache store

Scoring (higher is better):
    difficulty tier      discovery +3, consolidation +2, mastery +1
    weak subject         +2 when the student's average success rate in the
                         exercise's subject is below 70% (no attempts = 0%)
    curriculum order     + max(0, 10 - order)
    remediation          -2 when the student is flagged on this exercise
    jitter               + uniform [0, 2) for variety between requests

The jitter makes results non-deterministic; pass a seeded random.Random
to get reproducible rankings.

Usage:
    from reved.services.learning import RecommendationService

    service = RecommendationService(db, recommendation_cache)
    exercises = await service.get_recommendations(student_id, limit=10)
"""

import logging
import random
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reved.config.settings import settings
from reved.db.models import Exercise, Module, ProgressRecord, Student
from reved.db.redis import RedisCache
from reved.enums.learning import DifficultyTier, ProgressStatus
from reved.middleware.error_handling import RecommendationError, StudentNotFound
from reved.models.learning import ExerciseSummary

logger = logging.getLogger(__name__)

_TIER_SCORES = {
    DifficultyTier.DISCOVERY.value: 3.0,
    DifficultyTier.CONSOLIDATION.value: 2.0,
    DifficultyTier.MASTERY.value: 1.0,
}


def recommendation_cache_key(
    student_id: int,
    limit: int,
    grade_level: Optional[str] = None,
    subject: Optional[str] = None,
) -> str:
    """Cache key (without namespace) for one recommendation request."""
    return f"{student_id}:{limit}:{grade_level or 'all'}:{subject or 'all'}"


class RecommendationService:
    """
    Service for exercise recommendations.

    Provides:
    - Candidate selection excluding mastered exercises
    - Heuristic scoring and ranking
    - Redis caching of ranked lists
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: RedisCache,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the recommendation service.

        Args:
            db: Async database session
            cache: Recommendation cache
            rng: Random source for score jitter (defaults to a fresh Random)
        """
        self.db = db
        self.cache = cache
        self.rng = rng or random.Random()

    async def get_recommendations(
        self,
        student_id: int,
        limit: int = None,
        grade_level: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> list[ExerciseSummary]:
        """
        Get ranked exercise recommendations for a student.

        Args:
            student_id: Student ID
            limit: Maximum exercises to return
                (defaults to settings.RECOMMENDATION_DEFAULT_LIMIT)
            grade_level: Grade filter (defaults to the student's grade)
            subject: Optional subject filter

        Returns:
            Up to `limit` exercises, best first. Empty when nothing qualifies.

        Raises:
            StudentNotFound: Unknown student
            RecommendationError: Database failure while ranking
        """
        limit = limit or settings.RECOMMENDATION_DEFAULT_LIMIT
        cache_key = recommendation_cache_key(student_id, limit, grade_level, subject)

        cached = await self._read_cache(cache_key)
        if cached is not None:
            logger.debug(f"Recommendation cache hit: {cache_key}")
            return [ExerciseSummary.model_validate(item) for item in cached]

        try:
            recommendations = await self._compute(student_id, limit, grade_level, subject)
        except SQLAlchemyError as e:
            logger.error(f"Recommendation query failed for student {student_id}: {e}")
            raise RecommendationError(
                "Recommendations could not be computed",
                details={"student_id": student_id},
            ) from e

        await self._write_cache(
            cache_key, [r.model_dump(mode="json") for r in recommendations]
        )

        logger.info(
            f"Computed {len(recommendations)} recommendations for student {student_id} "
            f"(grade={grade_level or 'default'}, subject={subject or 'all'})"
        )
        return recommendations

    async def _compute(
        self,
        student_id: int,
        limit: int,
        grade_level: Optional[str],
        subject: Optional[str],
    ) -> list[ExerciseSummary]:
        student = await self.db.get(Student, student_id)
        if student is None:
            raise StudentNotFound(f"Student {student_id} not found")

        grade_level = grade_level or student.grade_level

        mastered_ids = await self._get_mastered_ids(student_id)
        candidates = await self._get_candidates(
            grade_level, subject, mastered_ids, limit * settings.RECOMMENDATION_CANDIDATE_MULTIPLIER
        )
        if not candidates:
            return []

        subject_rates = await self._get_subject_success_rates(student_id)
        remediation_ids = await self._get_remediation_ids(
            student_id, [exercise.id for exercise, _ in candidates]
        )

        scored = [
            (self._score(exercise, module, subject_rates, remediation_ids), exercise, module)
            for exercise, module in candidates
        ]
        scored.sort(key=lambda item: item[0], reverse=True)

        return [self._to_summary(exercise, module) for _, exercise, module in scored[:limit]]

    # ===========================================
    # Queries
    # ===========================================

    async def _get_mastered_ids(self, student_id: int) -> list[int]:
        result = await self.db.execute(
            select(ProgressRecord.exercise_id).where(
                and_(
                    ProgressRecord.student_id == student_id,
                    ProgressRecord.status == ProgressStatus.MASTERED.value,
                )
            )
        )
        return list(result.scalars().all())

    async def _get_candidates(
        self,
        grade_level: str,
        subject: Optional[str],
        excluded_ids: list[int],
        max_candidates: int,
    ) -> list[tuple[Exercise, Module]]:
        conditions = [
            Exercise.is_active.is_(True),
            Module.is_active.is_(True),
            Module.grade_level == grade_level,
        ]
        if subject:
            conditions.append(Module.subject == subject)
        if excluded_ids:
            conditions.append(Exercise.id.notin_(excluded_ids))

        result = await self.db.execute(
            select(Exercise, Module)
            .join(Module, Exercise.module_id == Module.id)
            .where(and_(*conditions))
            .order_by(Exercise.order.asc(), Exercise.id.asc())
            .limit(max_candidates)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def _get_subject_success_rates(self, student_id: int) -> dict[str, float]:
        """Average success rate of the student's records, per subject."""
        result = await self.db.execute(
            select(Module.subject, func.avg(ProgressRecord.success_rate))
            .select_from(ProgressRecord)
            .join(Exercise, ProgressRecord.exercise_id == Exercise.id)
            .join(Module, Exercise.module_id == Module.id)
            .where(ProgressRecord.student_id == student_id)
            .group_by(Module.subject)
        )
        return {subject: float(rate or 0.0) for subject, rate in result.all()}

    async def _get_remediation_ids(
        self, student_id: int, exercise_ids: list[int]
    ) -> set[int]:
        result = await self.db.execute(
            select(ProgressRecord.exercise_id).where(
                and_(
                    ProgressRecord.student_id == student_id,
                    ProgressRecord.exercise_id.in_(exercise_ids),
                    ProgressRecord.needs_remediation.is_(True),
                )
            )
        )
        return set(result.scalars().all())

    # ===========================================
    # Scoring
    # ===========================================

    def _score(
        self,
        exercise: Exercise,
        module: Module,
        subject_rates: dict[str, float],
        remediation_ids: set[int],
    ) -> float:
        score = _TIER_SCORES.get(exercise.difficulty, 0.0)

        if subject_rates.get(module.subject, 0.0) < settings.RECOMMENDATION_WEAK_SUBJECT_RATE:
            score += settings.RECOMMENDATION_WEAK_SUBJECT_BONUS

        score += max(0, settings.RECOMMENDATION_ORDER_HORIZON - (exercise.order or 0))

        if exercise.id in remediation_ids:
            score -= settings.RECOMMENDATION_REMEDIATION_PENALTY

        score += self.rng.random() * settings.RECOMMENDATION_JITTER
        return score

    def _to_summary(self, exercise: Exercise, module: Module) -> ExerciseSummary:
        return ExerciseSummary(
            id=exercise.id,
            title=exercise.title,
            instructions=exercise.instructions,
            exercise_type=exercise.exercise_type,
            difficulty=exercise.difficulty,
            points_on_success=exercise.points_on_success,
            estimated_seconds=exercise.estimated_seconds,
            order=exercise.order or 0,
            module_id=module.id,
            module_title=module.title,
            subject=module.subject,
            grade_level=module.grade_level,
        )

    # ===========================================
    # Cache
    # ===========================================

    async def _read_cache(self, key: str) -> Optional[list]:
        try:
            return await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Recommendation cache read failed for {key}: {e}")
            return None

    async def _write_cache(self, key: str, value: list) -> None:
        try:
            await self.cache.set(key, value, ttl=settings.RECOMMENDATION_CACHE_TTL)
        except Exception as e:
            logger.warning(f"Recommendation cache write failed for {key}: {e}")
