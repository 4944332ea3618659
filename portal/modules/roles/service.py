from supabase import Client
from portal.modules.roles.schemas import RoleInfo, RoleSummary
from portal.core.exceptions import NotFoundError, PersistenceError
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: Exception) -> bool:
    """True when Postgres rejected a write because of a unique constraint"""
    if getattr(error, "code", None) == UNIQUE_VIOLATION:
        return True
    return "duplicate key" in str(error).lower()


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_or_create_role(self, role_name: str, department_name: str) -> str:
        """Return the id of the (role_name, department_name) role, creating it on first use.

        A concurrent signup may insert the same pair between our select and
        insert; the unique constraint then rejects ours and the row it
        created is returned instead.
        """
        try:
            role_id = self._find_role_id(role_name, department_name)
            if role_id:
                return role_id

            try:
                result = self.supabase.table("roles").insert({
                    "role_name": role_name,
                    "department_name": department_name
                }).execute()
            except Exception as e:
                if not is_unique_violation(e):
                    raise
                logger.info(f"Role {role_name!r} in {department_name!r} created concurrently, reusing it")
                role_id = self._find_role_id(role_name, department_name)
                if not role_id:
                    raise
                return role_id

            if not result.data:
                raise PersistenceError("Failed to create role")

            logger.info(f"Created role {role_name!r} in department {department_name!r}")
            return result.data[0]["id"]
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Error resolving role {role_name!r}/{department_name!r}: {e}")
            raise PersistenceError(f"Failed to resolve role: {e}")

    def _find_role_id(self, role_name: str, department_name: str) -> Optional[str]:
        existing = self.supabase.table("roles")\
            .select("id")\
            .eq("role_name", role_name)\
            .eq("department_name", department_name)\
            .limit(1)\
            .execute()
        if existing.data:
            return existing.data[0]["id"]
        return None

    def get_role(self, role_id: str) -> RoleInfo:
        try:
            result = self.supabase.table("roles")\
                .select("id, role_name, department_name, created_at")\
                .eq("id", role_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise PersistenceError(str(e))

        if not result.data:
            raise NotFoundError("Role not found for user")
        return RoleInfo(**result.data[0])

    def list_roles_by_department(self, department_name: str) -> List[RoleSummary]:
        try:
            result = self.supabase.table("roles")\
                .select("id, role_name")\
                .eq("department_name", department_name)\
                .order("role_name")\
                .execute()
            return [RoleSummary(**role) for role in result.data or []]
        except Exception as e:
            raise PersistenceError(str(e))

    def list_role_ids_by_department(self, department_name: str) -> List[str]:
        try:
            result = self.supabase.table("roles")\
                .select("id")\
                .eq("department_name", department_name)\
                .execute()
            return [r["id"] for r in result.data or []]
        except Exception as e:
            raise PersistenceError(str(e))
