from fastapi import APIRouter, Depends, UploadFile, File, Form
from portal.config import settings
from portal.core.dependencies import get_current_user, get_user_client
from portal.core.exceptions import ValidationError
from portal.database.supabase_client import get_supabase
from portal.modules.complaints.schemas import (
    ComplaintCreate, ComplaintEnvelope, ComplaintListResponse, Priority
)
from portal.modules.complaints.service import ComplaintService
from portal.modules.users.schemas import UserProfile
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/complaints", tags=["complaints"])


def get_complaint_service(supabase: Client = Depends(get_supabase)) -> ComplaintService:
    return ComplaintService(supabase)


@router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    service: ComplaintService = Depends(get_complaint_service)
):
    """List all complaints, newest first"""
    return ComplaintListResponse(complaints=service.list_complaints())


@router.get("/mine", response_model=ComplaintListResponse)
async def list_my_complaints(
    sort: str = "created_at",
    user: UserProfile = Depends(get_current_user),
    service: ComplaintService = Depends(get_complaint_service)
):
    """Complaints filed by the caller; sort=priority puts Urgent first"""
    return ComplaintListResponse(complaints=service.list_user_complaints(user.id, sort=sort))


@router.post("", response_model=ComplaintEnvelope, status_code=201)
async def create_complaint(
    department: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    priority: str = Form(Priority.MEDIUM.value),
    subject: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    is_anonymous: bool = Form(False),
    assigned_to: Optional[str] = Form(None),
    attachments: Optional[List[UploadFile]] = File(None),
    user: UserProfile = Depends(get_current_user),
    user_client: Client = Depends(get_user_client),
    service: ComplaintService = Depends(get_complaint_service)
):
    """
    File a complaint with up to five image/video attachments.
    Files go to the public complaints bucket; the row is inserted with the
    caller's own token so the department policy decides whether it lands.
    """
    files = [f for f in attachments or [] if f.filename]
    # Reject before anything is uploaded
    if len(files) > settings.max_attachments:
        raise ValidationError(f"At most {settings.max_attachments} attachments are allowed")

    required = {
        "department": department,
        "category": category,
        "subject": subject,
        "description": description,
    }
    if not all(value and value.strip() for value in required.values()):
        raise ValidationError("department, category, subject, and description are required")

    try:
        priority_value = Priority(priority)
    except ValueError:
        raise ValidationError(f"priority must be one of: {', '.join(p.value for p in Priority)}")

    complaint_data = ComplaintCreate(
        department_name=department.strip(),
        category=category.strip(),
        priority=priority_value,
        subject=subject.strip(),
        description=description.strip(),
        is_anonymous=is_anonymous,
        assigned_to=assigned_to or None,
    )
    complaint = await service.create_complaint(complaint_data, user, user_client, files)
    return ComplaintEnvelope(complaint=complaint)
