from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

class CriterionCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    key: Optional[str] = None  # attendance, punctuality, hours_worked, ...
    description: Optional[str] = None
    weight: float = Field(..., ge=0, le=100)
    direction: str = Field("higher_is_better", pattern="^(higher_is_better|lower_is_better)$")
    active: bool = True
    display_order: int = 0

class CriterionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    key: Optional[str] = None
    description: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0, le=100)
    direction: Optional[str] = Field(None, pattern="^(higher_is_better|lower_is_better)$")
    active: Optional[bool] = None
    display_order: Optional[int] = None

class CriterionResponse(BaseModel):
    id: int
    name: str
    key: Optional[str]
    description: Optional[str]
    weight: float
    direction: str
    active: bool
    display_order: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class WeightSummaryResponse(BaseModel):
    total_weight: float
    is_valid: bool  # active weights add up to 100%
    criteria: List[CriterionResponse]

class AutoWeightsRequest(BaseModel):
    # Empty → every active criterion
    criterion_ids: List[int] = []
