import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List
from app.database import get_db
from app.models.criterion import EvaluationCriterion
from app.schemas.criterion import (
    CriterionCreate, CriterionUpdate, CriterionResponse,
    WeightSummaryResponse, AutoWeightsRequest
)
from app.services.criteria import weight_summary, equal_weights
from app.services.ranking import RankingService, get_ranking_service

router = APIRouter(prefix="/criteria", tags=["criteria"])

logger = logging.getLogger(__name__)

async def list_all_criteria(db: AsyncSession) -> List[EvaluationCriterion]:
    result = await db.execute(
        select(EvaluationCriterion)
        .order_by(EvaluationCriterion.display_order, EvaluationCriterion.id)
    )
    return list(result.scalars().all())

async def get_criterion_or_404(db: AsyncSession, criterion_id: int) -> EvaluationCriterion:
    result = await db.execute(
        select(EvaluationCriterion).where(EvaluationCriterion.id == criterion_id)
    )
    criterion = result.scalar_one_or_none()
    if not criterion:
        raise HTTPException(404, "Criterion not found")
    return criterion

@router.get("", response_model=List[CriterionResponse])
async def list_criteria(
    active_only: bool = False,
    db: AsyncSession = Depends(get_db)
):
    criteria = await list_all_criteria(db)
    if active_only:
        criteria = [c for c in criteria if c.active]
    return criteria

@router.get("/weights", response_model=WeightSummaryResponse)
async def get_weight_summary(db: AsyncSession = Depends(get_db)):
    criteria = await list_all_criteria(db)
    total, is_valid = weight_summary(criteria)
    return WeightSummaryResponse(
        total_weight=total,
        is_valid=is_valid,
        criteria=[CriterionResponse.model_validate(c) for c in criteria if c.active]
    )

@router.post("", response_model=CriterionResponse)
async def create_criterion(
    criterion_in: CriterionCreate,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    criterion = EvaluationCriterion(**criterion_in.model_dump())
    db.add(criterion)
    await db.commit()
    await db.refresh(criterion)
    service.invalidate()
    return criterion

@router.post("/auto-weights", response_model=WeightSummaryResponse)
async def auto_adjust_weights(
    request: AutoWeightsRequest,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    criteria = await list_all_criteria(db)
    by_id = {c.id: c for c in criteria}

    # Repeated ids would otherwise take more than one share
    ids = list(dict.fromkeys(request.criterion_ids)) or [c.id for c in criteria if c.active]
    missing = [i for i in ids if i not in by_id]
    if missing:
        raise HTTPException(404, f"Criteria not found: {missing}")

    for criterion_id, weight in equal_weights(ids):
        by_id[criterion_id].weight = weight
    await db.commit()
    service.invalidate()
    logger.info("Weights split evenly across %d criteria", len(ids))

    total, is_valid = weight_summary(criteria)
    return WeightSummaryResponse(
        total_weight=total,
        is_valid=is_valid,
        criteria=[CriterionResponse.model_validate(c) for c in criteria if c.active]
    )

@router.patch("/{criterion_id}", response_model=CriterionResponse)
async def update_criterion(
    criterion_id: int,
    criterion_in: CriterionUpdate,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    criterion = await get_criterion_or_404(db, criterion_id)
    for field, value in criterion_in.model_dump(exclude_unset=True).items():
        setattr(criterion, field, value)
    await db.commit()
    await db.refresh(criterion)
    service.invalidate()
    return criterion

@router.delete("/{criterion_id}", response_model=CriterionResponse)
async def deactivate_criterion(
    criterion_id: int,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    # Stored scores still reference the criterion, so it is only switched off
    criterion = await get_criterion_or_404(db, criterion_id)
    criterion.active = False
    await db.commit()
    await db.refresh(criterion)
    service.invalidate()
    return criterion
