from fastapi import APIRouter, Depends, HTTPException
from app.services.periods import parse_period, period_label
from app.services.ranking import RankingService, get_ranking_service
from app.schemas.ranking import PeriodRankingResponse, RankingResponse, RecalculationResponse

router = APIRouter(prefix="/rankings", tags=["rankings"])

def resolve_period(period: str):
    try:
        return parse_period(period)
    except ValueError as e:
        raise HTTPException(400, str(e))

@router.post("/recalculate", response_model=RecalculationResponse)
async def recalculate_rankings(
    service: RankingService = Depends(get_ranking_service)
):
    periods = await service.recalculate_all()
    return RecalculationResponse(periods=periods)

@router.get("/{period}", response_model=PeriodRankingResponse)
async def get_period_ranking(
    period: str,
    refresh: bool = False,
    service: RankingService = Depends(get_ranking_service)
):
    key = resolve_period(period)
    results = await service.get_ranking(key, force_refresh=refresh)
    return PeriodRankingResponse(
        period=str(key),
        period_label=period_label(key),
        rankings=[RankingResponse.model_validate(r) for r in results]
    )

@router.get("/{period}/employees/{employee_id}", response_model=RankingResponse)
async def get_employee_ranking(
    period: str,
    employee_id: int,
    service: RankingService = Depends(get_ranking_service)
):
    key = resolve_period(period)
    try:
        result = await service.get_employee_ranking(key, employee_id)
    except LookupError as e:
        raise HTTPException(404, str(e))
    return RankingResponse.model_validate(result)
