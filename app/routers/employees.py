from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List
from app.database import get_db
from app.models.employee import Employee
from app.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeResponse
from app.services.ranking import RankingService, get_ranking_service

router = APIRouter(prefix="/employees", tags=["employees"])

@router.get("", response_model=List[EmployeeResponse])
async def list_employees(
    active_only: bool = True,
    db: AsyncSession = Depends(get_db)
):
    query = select(Employee).order_by(Employee.id)
    if active_only:
        query = query.where(Employee.active.is_(True))
    result = await db.execute(query)
    return result.scalars().all()

@router.post("", response_model=EmployeeResponse)
async def create_employee(
    employee_in: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    employee = Employee(**employee_in.model_dump())
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    service.invalidate()
    return employee

@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    employee_in: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    service: RankingService = Depends(get_ranking_service)
):
    result = await db.execute(select(Employee).where(Employee.id == employee_id))
    employee = result.scalar_one_or_none()
    if not employee:
        raise HTTPException(404, "Employee not found")

    for field, value in employee_in.model_dump(exclude_unset=True).items():
        setattr(employee, field, value)
    await db.commit()
    await db.refresh(employee)
    service.invalidate()
    return employee
