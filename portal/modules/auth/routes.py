from fastapi import APIRouter, Depends, Request
from portal.config import settings
from portal.core.dependencies import get_auth_service, get_bearer_token
from portal.core.exceptions import AuthError
from portal.core.rate_limit import limiter
from portal.database.supabase_client import get_supabase
from portal.modules.auth.schemas import (
    SignUpRequest, SignInRequest, AuthResponse, MeResponse, MessageResponse
)
from portal.modules.auth.service import AuthService
from portal.modules.roles.schemas import RolesResponse
from portal.modules.roles.service import RoleService
from portal.database.schema import ensure_schema
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


@router.post("/signup", response_model=AuthResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def sign_up(
    request: Request,
    signup_data: SignUpRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user, assign their role and return a session token"""
    return service.sign_up(signup_data)


@router.post("/signin", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
async def sign_in(
    request: Request,
    signin_data: SignInRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.sign_in(signin_data)


@router.post("/signout", response_model=MessageResponse)
async def sign_out(
    token: Optional[str] = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout; the client discards its token"""
    service.sign_out(token)
    return MessageResponse(message="Signed out successfully")


@router.get("/me", response_model=MeResponse)
async def get_me(
    token: Optional[str] = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service)
):
    """Get current authenticated user with their role"""
    user = service.get_current_user(token)
    if user is None:
        raise AuthError("User not authenticated")
    return MeResponse(user=user)


@router.get("/roles/{department}", response_model=RolesResponse)
async def list_department_roles(
    department: str,
    service: RoleService = Depends(get_role_service),
    supabase: Client = Depends(get_supabase)
):
    """Roles already known for a department (used by the signup form)"""
    ensure_schema(supabase)
    return RolesResponse(roles=service.list_roles_by_department(department))
