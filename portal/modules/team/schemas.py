from pydantic import BaseModel
from typing import Optional, List
from portal.modules.roles.schemas import RoleInfo


class TeamMember(BaseModel):
    id: str
    name: str
    email: str
    is_active: bool = True
    roles: Optional[RoleInfo] = None

    class Config:
        from_attributes = True


class TeamResponse(BaseModel):
    department: str
    members: List[TeamMember]
