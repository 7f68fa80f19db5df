import asyncio
import logging
import weakref
from dataclasses import asdict
from typing import List, Optional

from sqlalchemy import select, update, delete, distinct, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import AsyncSessionLocal
from app.models.criterion import EvaluationCriterion
from app.models.employee import Employee
from app.models.ranking import EmployeeRanking
from app.models.score import EmployeeScore
from app.services.periods import is_consolidated, next_period, parse_period, period_label, previous_period
from app.services.ranking_cache import RankingCache
from app.services.ranking_engine import (
    Criterion,
    EmployeeRecord,
    PreviousRank,
    RankingComputation,
    RankingResult,
    RawScore,
    compute_ranking,
)

logger = logging.getLogger(__name__)

# First key of the Postgres advisory lock taken while a month is rewritten
RANKING_LOCK_NAMESPACE = 7411


def chunked(items, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


def criterion_from_row(row: EvaluationCriterion) -> Criterion:
    return Criterion(
        id=row.id,
        name=row.name,
        weight=row.weight or 0.0,
        direction=row.direction,
        active=row.active,
        display_order=row.display_order or 0,
        key=row.key,
    )


def score_from_row(row: EmployeeScore) -> RawScore:
    return RawScore(
        id=row.id,
        employee_id=row.employee_id,
        criterion_id=row.criterion_id,
        period=row.period,
        raw_value=row.raw_value,
        normalized_score=row.normalized_score,
    )


def employee_from_row(row: Employee) -> EmployeeRecord:
    return EmployeeRecord(
        id=row.id,
        name=row.name,
        department=row.department or "",
        position=row.position or "",
        active=row.active,
    )


def ranking_to_row(period, result: RankingResult) -> EmployeeRanking:
    return EmployeeRanking(
        employee_id=result.employee_id,
        period=period,
        employee_name=result.employee_name,
        department=result.department,
        position=result.position,
        total_score=result.total_score,
        rank_position=result.rank_position,
        previous_rank=result.previous_rank,
        rank_variation=result.rank_variation,
        criterion_scores=[asdict(s) for s in result.criterion_scores],
        strengths=list(result.strengths),
        weaknesses=list(result.weaknesses),
        suggestions=list(result.suggestions),
    )


class RankingService:
    """
    Loads ranking inputs, runs the engine and stores its output.

    Results for concrete months are memoized in ``cache``; the consolidated
    view is always recomputed and never written back.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        cache: Optional[RankingCache] = None,
        batch_size: int = 400,
    ):
        self.session_factory = session_factory
        self.cache = cache if cache is not None else RankingCache()
        self.batch_size = batch_size
        # Bumped by every invalidation; a run that started before one must not cache
        self._generation = 0
        self._period_locks = weakref.WeakValueDictionary()

    def invalidate(self, period=None) -> None:
        if period is not None:
            period = parse_period(period)
        self._generation += 1
        self.cache.invalidate(period)

    def _lock_for(self, period) -> asyncio.Lock:
        lock = self._period_locks.get(period)
        if lock is None:
            lock = asyncio.Lock()
            self._period_locks[period] = lock
        return lock

    async def get_ranking(self, period, force_refresh: bool = False) -> List[RankingResult]:
        period = parse_period(period)
        if is_consolidated(period):
            computation = await self._compute(period)
            return computation.results if computation else []

        if not force_refresh:
            cached = self.cache.get(period)
            if cached is not None:
                logger.debug("Using cached ranking for %s", period_label(period))
                return cached

        # Runs for the same month take turns; other months proceed in parallel
        async with self._lock_for(period):
            generation = self._generation
            computation = await self._compute(period)
            if computation is None:
                return []

            await self._persist(period, computation)
            if generation == self._generation:
                self.cache.set(period, computation.results)
            else:
                logger.debug("Data changed during the %s run; result not cached", period_label(period))
            return computation.results

    async def _compute(self, period) -> Optional[RankingComputation]:
        """Run the engine on fresh inputs; None when no criterion is active."""
        # Independent reads, each on its own session
        criteria, scores, employees, previous = await asyncio.gather(
            self._load_criteria(),
            self._load_scores(period),
            self._load_employees(),
            self._load_previous_ranking(period),
        )
        computation = compute_ranking(period, criteria, scores, employees, previous)
        if not criteria:
            return None
        return computation

    async def get_employee_ranking(self, period, employee_id: int, force_refresh: bool = False) -> RankingResult:
        for result in await self.get_ranking(period, force_refresh=force_refresh):
            if result.employee_id == employee_id:
                return result
        raise LookupError(f"Employee {employee_id} is not ranked for {period_label(parse_period(period))}")

    async def recalculate_all(self) -> list:
        """Recompute every month that has stored scores, oldest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(distinct(EmployeeScore.period)).order_by(EmployeeScore.period)
            )
            periods = list(result.scalars().all())

        if not periods:
            logger.warning("No scores stored; nothing to recalculate")
            return []

        for period in periods:
            await self.get_ranking(period, force_refresh=True)
        logger.info("Recalculated rankings for %d periods", len(periods))
        return periods

    async def recalculate_periods(self, periods) -> list:
        """
        Recompute the given months, oldest first.

        The month right after each one is recomputed too when it already has a
        stored ranking, since its rank movement is measured against the month
        that just changed.
        """
        months = {parse_period(p) for p in periods}
        following = {next_period(p) for p in months} - months
        if following:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(distinct(EmployeeRanking.period))
                    .where(EmployeeRanking.period.in_(sorted(following)))
                )
                months.update(result.scalars().all())

        ordered = sorted(months)
        for period in ordered:
            await self.get_ranking(period, force_refresh=True)
        return ordered

    # ------------------------------------------------------------------ reads

    async def _load_criteria(self) -> List[Criterion]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(EvaluationCriterion)
                .where(EvaluationCriterion.active.is_(True))
                .order_by(EvaluationCriterion.display_order, EvaluationCriterion.id)
            )
            return [criterion_from_row(row) for row in result.scalars().all()]

    async def _load_scores(self, period) -> List[RawScore]:
        query = select(EmployeeScore).order_by(EmployeeScore.id)
        if not is_consolidated(period):
            query = query.where(EmployeeScore.period == period)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [score_from_row(row) for row in result.scalars().all()]

    async def _load_employees(self) -> List[EmployeeRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Employee).where(Employee.active.is_(True)).order_by(Employee.id)
            )
            return [employee_from_row(row) for row in result.scalars().all()]

    async def _load_previous_ranking(self, period) -> List[PreviousRank]:
        if is_consolidated(period):
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(EmployeeRanking.employee_id, EmployeeRanking.rank_position)
                .where(EmployeeRanking.period == previous_period(period))
            )
            return [PreviousRank(employee_id=row.employee_id, rank_position=row.rank_position) for row in result]

    # ----------------------------------------------------------------- writes

    async def _persist(self, period, computation: RankingComputation) -> None:
        """Write back normalized scores and replace the month's ranking rows."""
        async with self.session_factory() as session:
            async with session.begin():
                await self._lock_period_rows(session, period)
                await self._write_normalized_scores(session, computation)
                await session.execute(delete(EmployeeRanking).where(EmployeeRanking.period == period))
                for chunk in chunked(computation.results, self.batch_size):
                    session.add_all([ranking_to_row(period, r) for r in chunk])
                    await session.flush()

        logger.info(
            "Stored %d ranking rows and %d normalized scores for %s",
            len(computation.results), len(computation.updated_scores), period_label(period),
        )

    async def _lock_period_rows(self, session: AsyncSession, period) -> None:
        """
        Serialize the delete-then-insert of one month across processes.

        Under READ COMMITTED a second writer's DELETE cannot see rows the first
        one just inserted, so its INSERT would hit uq_employee_period_ranking.
        A transaction-scoped advisory lock makes the second writer wait until
        the first commits. SQLite already locks the whole database for writes.
        """
        if session.get_bind().dialect.name != "postgresql":
            return
        await session.execute(
            select(func.pg_advisory_xact_lock(RANKING_LOCK_NAMESPACE, period.toordinal()))
        )

    async def _write_normalized_scores(self, session: AsyncSession, computation: RankingComputation) -> None:
        for chunk in chunked(computation.updated_scores, self.batch_size):
            await session.execute(
                update(EmployeeScore),
                [{"id": u.score_id, "normalized_score": u.normalized_score} for u in chunk],
            )


ranking_service = RankingService(
    AsyncSessionLocal,
    RankingCache(
        ttl_seconds=settings.RANKING_CACHE_TTL_SECONDS,
        maxsize=settings.RANKING_CACHE_MAXSIZE,
    ),
    batch_size=settings.RANKING_BATCH_SIZE,
)


def get_ranking_service() -> RankingService:
    return ranking_service
