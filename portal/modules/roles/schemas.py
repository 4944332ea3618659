from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class RoleInfo(BaseModel):
    id: str
    role_name: str
    department_name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleSummary(BaseModel):
    id: str
    role_name: str


class RolesResponse(BaseModel):
    roles: List[RoleSummary]
