from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from enum import Enum


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


PRIORITY_RANK = {"Low": 1, "Medium": 2, "High": 3, "Urgent": 4}


class ComplaintStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ComplaintCreate(BaseModel):
    department_name: str
    category: str
    priority: Priority = Priority.MEDIUM
    subject: str
    description: str
    is_anonymous: bool = False
    assigned_to: Optional[str] = None


class ComplaintResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    role_id: Optional[str] = None
    department_name: str
    category: str
    priority: Priority
    subject: str
    description: str
    attachments_urls: List[str] = []
    is_anonymous: bool = False
    status: ComplaintStatus = ComplaintStatus.OPEN
    assigned_to: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ComplaintEnvelope(BaseModel):
    complaint: ComplaintResponse


class ComplaintListResponse(BaseModel):
    complaints: List[ComplaintResponse]
