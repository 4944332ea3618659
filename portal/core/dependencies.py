"""
Core dependencies for route protection.

get_current_user is the portal's auth middleware: every protected route
depends on it, and it re-verifies the bearer token with Supabase Auth on
every request (no token cache).
"""

from fastapi import Depends, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from portal.database.supabase_client import get_supabase, get_anon_client_factory, get_user_client_factory
from portal.modules.auth.service import AuthService
from portal.modules.users.schemas import UserProfile
from portal.core.exceptions import PortalError, AuthError
from supabase import Client
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is answered with 401 by get_current_user
security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    anon_client_factory: Callable[[], Client] = Depends(get_anon_client_factory)
) -> AuthService:
    return AuthService(supabase, anon_client_factory)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Extract JWT token from Authorization header, if any"""
    return credentials.credentials if credentials else None


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserProfile:
    """401 without a token, 403 for a bad token or a missing profile, 500 otherwise"""
    if not token:
        raise AuthError("Access token required", status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        profile = auth_service.authenticate(token)
    except PortalError:
        raise
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise PortalError(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Authentication error")

    request.state.user = profile
    request.state.access_token = token
    return profile


def get_user_client(
    user: UserProfile = Depends(get_current_user),
    token: Optional[str] = Depends(get_bearer_token),
    user_client_factory: Callable[[str], Client] = Depends(get_user_client_factory)
) -> Client:
    """Fresh client acting as the authenticated user; RLS policies apply to it"""
    return user_client_factory(token)
