from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    department: str = ""
    position: str = ""
    active: bool = True

class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    active: Optional[bool] = None

class EmployeeResponse(BaseModel):
    id: int
    name: str
    email: Optional[str]
    department: str
    position: str
    active: bool

    model_config = {"from_attributes": True}
