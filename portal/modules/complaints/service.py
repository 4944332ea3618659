from supabase import Client
from portal.config import settings
from portal.core.exceptions import AuthError, PersistenceError, UpstreamError, ValidationError
from portal.database.schema import ensure_schema
from portal.modules.complaints.schemas import ComplaintCreate, ComplaintResponse, PRIORITY_RANK
from portal.modules.complaints.storage import AttachmentStorage, build_object_path
from portal.modules.users.schemas import UserProfile
from typing import List, Optional
from fastapi import UploadFile
import uuid
import logging

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "priority")


def is_policy_violation(error: Exception) -> bool:
    """True when PostgREST rejected a write because of a row-level-security policy"""
    if getattr(error, "code", None) == "42501":
        return True
    return "row-level security" in str(error).lower()


def redact_anonymous(complaint: ComplaintResponse) -> ComplaintResponse:
    """Drop the submitter of an anonymous complaint from public listings"""
    if not complaint.is_anonymous:
        return complaint
    return complaint.model_copy(update={"user_id": None, "role_id": None})


def sort_by_priority(complaints: List[ComplaintResponse]) -> List[ComplaintResponse]:
    """Urgent first; equal priorities newest first"""
    by_newest = sorted(complaints, key=lambda c: c.created_at.timestamp() if c.created_at else 0, reverse=True)
    return sorted(by_newest, key=lambda c: PRIORITY_RANK.get(c.priority.value, 0), reverse=True)


class ComplaintService:
    def __init__(self, supabase: Client, storage: Optional[AttachmentStorage] = None):
        self.supabase = supabase
        self.storage = storage or AttachmentStorage(supabase)

    def list_complaints(self) -> List[ComplaintResponse]:
        """All complaints, newest first; anonymous ones without their submitter"""
        ensure_schema(self.supabase)
        try:
            result = self.supabase.table("complaints")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [redact_anonymous(ComplaintResponse(**c)) for c in result.data or []]
        except Exception as e:
            raise PersistenceError(str(e))

    def list_user_complaints(self, user_id: str, sort: str = "created_at") -> List[ComplaintResponse]:
        """Complaints filed by user_id, newest first or by priority"""
        if sort not in SORT_FIELDS:
            raise ValidationError(f"sort must be one of: {', '.join(SORT_FIELDS)}")
        ensure_schema(self.supabase)
        try:
            result = self.supabase.table("complaints")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            complaints = [ComplaintResponse(**c) for c in result.data or []]
        except Exception as e:
            raise PersistenceError(str(e))

        if sort == "priority":
            return sort_by_priority(complaints)
        return complaints

    async def create_complaint(
        self,
        complaint_data: ComplaintCreate,
        user: UserProfile,
        user_client: Client,
        files: List[UploadFile]
    ) -> ComplaintResponse:
        """Upload attachments, then insert the row as the user so the department policy applies"""
        if len(files) > settings.max_attachments:
            raise ValidationError(f"At most {settings.max_attachments} attachments are allowed")

        ensure_schema(self.supabase)
        try:
            self.storage.ensure_bucket()
        except Exception as e:
            logger.error(f"Could not prepare storage bucket {self.storage.bucket_name}: {e}")
            raise UpstreamError(f"Failed to prepare attachment storage: {e}")

        # Generated up front: attachments are stored under it before the row exists
        complaint_id = str(uuid.uuid4())
        uploaded_paths: List[str] = []
        attachment_urls: List[str] = []
        try:
            for file in files:
                file_content = await file.read()
                path = build_object_path(complaint_id, file.filename)
                content_type = file.content_type or "application/octet-stream"
                attachment_urls.append(self.storage.upload_file(file_content, path, content_type))
                uploaded_paths.append(path)
                logger.info(f"Uploaded attachment {path}")
        except Exception as e:
            self.storage.delete_files(uploaded_paths)
            raise UpstreamError(f"Failed to upload attachment: {e}")

        insert_payload = {
            "id": complaint_id,
            "department_name": complaint_data.department_name,
            "category": complaint_data.category,
            "priority": complaint_data.priority.value,
            "subject": complaint_data.subject,
            "description": complaint_data.description,
            "is_anonymous": complaint_data.is_anonymous,
            "attachments_urls": attachment_urls,
            "role_id": user.role_id,
            "user_id": user.id,
            "assigned_to": complaint_data.assigned_to,
        }

        try:
            result = user_client.table("complaints").insert(insert_payload).execute()
        except Exception as e:
            # Cleanup: the row never landed, so its attachments are unreachable
            self.storage.delete_files(uploaded_paths)
            if is_policy_violation(e):
                logger.warning(f"Complaint insert by user {user.id} rejected by policy: {e}")
                raise AuthError(
                    "Complaints can only be filed for your own department",
                    status_code=403
                )
            logger.error(f"Complaint insert failed: {e}")
            raise PersistenceError(f"Failed to create complaint: {e}")

        if not result.data:
            self.storage.delete_files(uploaded_paths)
            raise PersistenceError("Failed to create complaint")

        logger.info(f"Complaint {complaint_id} filed by user {user.id} with {len(attachment_urls)} attachment(s)")
        return ComplaintResponse(**result.data[0])
