from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional

class ScoreIn(BaseModel):
    employee_id: int
    criterion_id: int
    period: str = Field(..., examples=["2025-10"])  # YYYY-MM or YYYY-MM-DD
    raw_value: float

class ScoreBulkCreate(BaseModel):
    scores: List[ScoreIn] = Field(..., min_length=1)

class ScoreResponse(BaseModel):
    id: int
    employee_id: int
    criterion_id: int
    period: date
    raw_value: float
    normalized_score: Optional[float]

    model_config = {"from_attributes": True}

class ScoreBulkResponse(BaseModel):
    created: int
    updated: int
    periods: List[date]
    recalculated: bool
