from sqlalchemy import Column, Integer, String, Float, Date, DateTime, JSON, ForeignKey, UniqueConstraint, func
from app.database import Base

class EmployeeRanking(Base):
    __tablename__ = "employee_rankings"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    period = Column(Date, nullable=False, index=True)

    # Snapshot of the employee at ranking time
    employee_name = Column(String, nullable=False)
    department = Column(String, nullable=False, default="")
    position = Column(String, nullable=False, default="")

    total_score = Column(Float, nullable=False)
    rank_position = Column(Integer, nullable=False)
    previous_rank = Column(Integer, nullable=True)
    rank_variation = Column(Integer, nullable=True)

    criterion_scores = Column(JSON, nullable=False, default=list)
    strengths = Column(JSON, nullable=False, default=list)
    weaknesses = Column(JSON, nullable=False, default=list)
    suggestions = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("employee_id", "period", name="uq_employee_period_ranking"),
    )
