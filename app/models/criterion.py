from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, func
from app.database import Base

class EvaluationCriterion(Base):
    __tablename__ = "evaluation_criteria"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    key = Column(String, nullable=True)  # attendance, punctuality, ... (suggestion lookup)
    description = Column(Text, nullable=True)
    weight = Column(Float, nullable=False, default=0.0)  # percentage, 0–100
    direction = Column(String, nullable=False, default="higher_is_better")  # or lower_is_better
    active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
