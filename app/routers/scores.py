import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from app.database import get_db
from app.models.score import EmployeeScore
from app.models.employee import Employee
from app.models.criterion import EvaluationCriterion
from app.schemas.score import ScoreBulkCreate, ScoreBulkResponse, ScoreResponse
from app.services.periods import parse_period, is_consolidated
from app.services.ranking import RankingService, get_ranking_service

router = APIRouter(prefix="/scores", tags=["scores"])

logger = logging.getLogger(__name__)

def month_or_400(value: str):
    try:
        period = parse_period(value)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if is_consolidated(period):
        raise HTTPException(400, "Scores belong to a concrete month")
    return period

@router.get("", response_model=List[ScoreResponse])
async def list_scores(
    period: Optional[str] = None,
    employee_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    query = select(EmployeeScore).order_by(EmployeeScore.period, EmployeeScore.id)
    if period:
        query = query.where(EmployeeScore.period == month_or_400(period))
    if employee_id is not None:
        query = query.where(EmployeeScore.employee_id == employee_id)
    result = await db.execute(query)
    return result.scalars().all()

@router.post("", response_model=ScoreBulkResponse)
async def submit_scores(
    scores_in: ScoreBulkCreate,
    recalculate: bool = False,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    entries = [(s, month_or_400(s.period)) for s in scores_in.scores]

    employee_ids = {s.employee_id for s, _ in entries}
    criterion_ids = {s.criterion_id for s, _ in entries}
    found_employees = await db.execute(select(Employee.id).where(Employee.id.in_(sorted(employee_ids))))
    missing = employee_ids - set(found_employees.scalars().all())
    if missing:
        raise HTTPException(400, f"Unknown employees: {sorted(missing)}")
    found_criteria = await db.execute(
        select(EvaluationCriterion.id).where(EvaluationCriterion.id.in_(sorted(criterion_ids)))
    )
    missing = criterion_ids - set(found_criteria.scalars().all())
    if missing:
        raise HTTPException(400, f"Unknown criteria: {sorted(missing)}")

    # (employee, criterion, period) is the natural key: resubmitting replaces the value
    periods = sorted({period for _, period in entries})
    existing = await db.execute(select(EmployeeScore).where(EmployeeScore.period.in_(periods)))
    by_key = {(s.employee_id, s.criterion_id, s.period): s for s in existing.scalars().all()}

    created = updated = 0
    for score_in, period in entries:
        key = (score_in.employee_id, score_in.criterion_id, period)
        score = by_key.get(key)
        if score:
            score.raw_value = score_in.raw_value
            score.normalized_score = None
            updated += 1
        else:
            score = EmployeeScore(
                employee_id=score_in.employee_id,
                criterion_id=score_in.criterion_id,
                period=period,
                raw_value=score_in.raw_value
            )
            db.add(score)
            by_key[key] = score
            created += 1
    await db.commit()
    logger.info("Stored scores: %d created, %d updated across %d periods", created, updated, len(periods))

    service.invalidate()
    if recalculate:
        # Also refreshes the following month, whose rank movement depends on these
        await service.recalculate_periods(periods)

    return ScoreBulkResponse(
        created=created,
        updated=updated,
        periods=periods,
        recalculated=recalculate
    )
