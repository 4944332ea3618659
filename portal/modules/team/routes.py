from fastapi import APIRouter, Depends
from portal.core.dependencies import get_current_user
from portal.database.supabase_client import get_supabase
from portal.modules.team.schemas import TeamResponse
from portal.modules.team.service import TeamService
from portal.modules.users.schemas import UserProfile
from supabase import Client

router = APIRouter(prefix="/team", tags=["team"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


@router.get("", response_model=TeamResponse)
async def get_team(
    user: UserProfile = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """List everyone in the caller's department"""
    return service.get_team(user)
