from supabase import Client
from portal.config import settings
from typing import List, Optional
import re
import time
import logging

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: Optional[str]) -> str:
    """Replace anything but letters, digits, '.', '_' and '-' with '_'"""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", filename or "")
    return cleaned or "attachment"


def build_object_path(complaint_id: str, filename: Optional[str], timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{complaint_id}/{timestamp_ms}_{sanitize_filename(filename)}"


class AttachmentStorage:
    """Complaint attachments in a public Supabase Storage bucket. Uses the admin client."""

    def __init__(self, supabase: Client, bucket_name: Optional[str] = None):
        self.supabase = supabase
        self.bucket_name = bucket_name or settings.complaints_bucket

    def ensure_bucket(self) -> None:
        """Create the bucket (public, size-capped) when it does not exist yet"""
        buckets = self.supabase.storage.list_buckets() or []
        if any(b.name == self.bucket_name for b in buckets):
            return
        self.supabase.storage.create_bucket(
            self.bucket_name,
            options={
                "public": True,
                "file_size_limit": settings.attachment_size_limit_bytes,
            },
        )
        logger.info(f"Created storage bucket {self.bucket_name!r}")

    def upload_file(self, file_content: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        """Upload file and return its public URL"""
        try:
            self.supabase.storage.from_(self.bucket_name).upload(
                path,
                file_content,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
        except Exception as e:
            logger.error(f"Failed to upload {path} to bucket {self.bucket_name}: {str(e)}")
            raise
        return self.supabase.storage.from_(self.bucket_name).get_public_url(path)

    def delete_files(self, paths: List[str]) -> bool:
        if not paths:
            return True
        try:
            self.supabase.storage.from_(self.bucket_name).remove(paths)
            return True
        except Exception as e:
            logger.error(f"Failed to delete {len(paths)} object(s) from bucket {self.bucket_name}: {str(e)}")
            return False
