from supabase import Client
from portal.modules.users.schemas import UserProfile, ProfileSummary
from portal.core.exceptions import NotFoundError, PersistenceError
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone

# Profile row joined with its role (users.role_id -> roles.id)
PROFILE_SELECT = "*, roles(id, role_name, department_name)"
MEMBER_SELECT = "id, name, email, is_active, role_id, roles(id, role_name, department_name)"


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_profile(self, auth_user_id: str, email: str, name: str, role_id: Optional[str]) -> Dict[str, Any]:
        """Insert the profile row for a freshly created auth identity"""
        try:
            result = self.supabase.table("users").insert({
                "auth_user_id": auth_user_id,
                "email": email,
                "name": name,
                "role_id": role_id,
                "is_active": True
            }).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to create user profile: {e}")

        if not result.data:
            raise PersistenceError("Failed to create user profile")
        return result.data[0]

    def find_by_auth_user_id(self, auth_user_id: str) -> Optional[UserProfile]:
        """Profile (with role) for an auth identity, or None when no row matches"""
        try:
            result = self.supabase.table("users")\
                .select(PROFILE_SELECT)\
                .eq("auth_user_id", auth_user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise PersistenceError(str(e))

        if not result.data:
            return None
        return UserProfile(**result.data[0])

    def update_name(self, user_id: str, name: str) -> ProfileSummary:
        return self._update(user_id, {"name": name})

    def update_preferences(self, user_id: str, preferences: Dict[str, Any]) -> ProfileSummary:
        return self._update(user_id, {"preferences": preferences})

    def _update(self, user_id: str, patch: Dict[str, Any]) -> ProfileSummary:
        update_data = {**patch, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            raise PersistenceError(str(e))

        if not result.data:
            raise NotFoundError("User not found")
        return ProfileSummary(**result.data[0])

    def list_active_members(self, role_ids: List[str]) -> List[Dict[str, Any]]:
        """Active users holding any of role_ids, ordered by name"""
        if not role_ids:
            return []
        try:
            result = self.supabase.table("users")\
                .select(MEMBER_SELECT)\
                .in_("role_id", role_ids)\
                .eq("is_active", True)\
                .order("name")\
                .execute()
            return result.data or []
        except Exception as e:
            raise PersistenceError(str(e))
