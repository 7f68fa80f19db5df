from sqlalchemy import Column, Integer, Float, Date, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

class EmployeeScore(Base):
    __tablename__ = "employee_scores"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    criterion_id = Column(Integer, ForeignKey("evaluation_criteria.id"), nullable=False)
    period = Column(Date, nullable=False, index=True)  # first day of the month
    raw_value = Column(Float, nullable=False)
    normalized_score = Column(Float, nullable=True)  # written back by the ranking run
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("employee_id", "criterion_id", "period", name="uq_employee_criterion_period"),
    )
