from supabase import Client
from portal.core.exceptions import ValidationError
from portal.modules.roles.service import RoleService
from portal.modules.team.schemas import TeamMember, TeamResponse
from portal.modules.users.schemas import UserProfile
from portal.modules.users.service import UserService


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.roles = RoleService(supabase)
        self.users = UserService(supabase)

    def get_team(self, user: UserProfile) -> TeamResponse:
        """Active users whose role shares the caller's department, ordered by name"""
        if not user.role_id:
            raise ValidationError("User role not set")

        # 1. Department of the caller's role
        role = self.roles.get_role(user.role_id)
        # 2. Every role in that department
        role_ids = self.roles.list_role_ids_by_department(role.department_name)
        # 3. Active members holding one of those roles
        members = self.users.list_active_members(role_ids)

        return TeamResponse(
            department=role.department_name,
            members=[TeamMember(**m) for m in members]
        )
