from supabase import Client
from portal.core.exceptions import AuthError, UpstreamError, ValidationError
from portal.modules.auth.service import MIN_PASSWORD_LENGTH
from portal.modules.profile.schemas import THEMES
from portal.modules.users.schemas import UserProfile, ProfileSummary
from portal.modules.users.service import UserService
from typing import Optional
import logging

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)

    def update_name(self, user: UserProfile, name: Optional[str]) -> ProfileSummary:
        if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
            raise ValidationError("Valid name is required")
        return self.users.update_name(user.id, name.strip())

    def update_password(self, user: UserProfile, new_password: Optional[str]) -> None:
        """Change the password through the admin API, so no live session is needed"""
        if not user.auth_user_id:
            raise AuthError("Unauthorized")
        if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        try:
            self.supabase.auth.admin.update_user_by_id(user.auth_user_id, {"password": new_password})
        except Exception as e:
            logger.error(f"Password update failed for user {user.id}: {e}")
            raise UpstreamError(f"Failed to update password: {e}")
        logger.info(f"Password updated for user {user.id}")

    def update_preferences(self, user: UserProfile, theme: Optional[str]) -> ProfileSummary:
        """Set preferences.theme; every other stored preference key is kept"""
        if theme is None:
            raise ValidationError("No changes provided")
        if theme not in THEMES:
            raise ValidationError("Invalid theme")
        preferences = {**(user.preferences or {}), "theme": theme}
        return self.users.update_preferences(user.id, preferences)
