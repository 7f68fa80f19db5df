from pydantic import BaseModel
from datetime import date
from typing import List, Optional

class CriterionScoreResponse(BaseModel):
    criterion_id: int
    criterion_name: str
    raw_value: float
    normalized_score: float
    weight: float
    weighted_score: float

    model_config = {"from_attributes": True}

class RankingResponse(BaseModel):
    employee_id: int
    employee_name: str
    department: str
    position: str
    total_score: float
    rank_position: int
    previous_rank: Optional[int] = None
    rank_variation: Optional[int] = None  # positive = climbed
    criterion_scores: List[CriterionScoreResponse]
    strengths: List[str]
    weaknesses: List[str]
    suggestions: List[str]

    model_config = {"from_attributes": True}

class PeriodRankingResponse(BaseModel):
    period: str  # "2025-10-01" or "consolidated"
    period_label: str
    rankings: List[RankingResponse]

class RecalculationResponse(BaseModel):
    periods: List[date]
