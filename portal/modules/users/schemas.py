from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime
from portal.modules.roles.schemas import RoleInfo


class UserProfile(BaseModel):
    id: str
    auth_user_id: Optional[str] = None
    email: str
    name: str
    role_id: Optional[str] = None
    is_active: bool = True
    preferences: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    roles: Optional[RoleInfo] = None  # embedded via role_id; None when the user has no role

    class Config:
        from_attributes = True

    @property
    def department_name(self) -> Optional[str]:
        return self.roles.department_name if self.roles else None


class ProfileSummary(BaseModel):
    id: str
    name: str
    email: str
    is_active: bool = True
    role_id: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True
