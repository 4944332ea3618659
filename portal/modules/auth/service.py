from supabase import Client
from portal.modules.auth.schemas import SignUpRequest, SignInRequest, AuthResponse
from portal.modules.roles.service import RoleService
from portal.modules.users.schemas import UserProfile
from portal.modules.users.service import UserService
from portal.database.schema import ensure_schema
from portal.core.exceptions import (
    PortalError, ValidationError, AuthError, InvalidCredentials, ProfileNotFound,
    DuplicateEmail, PersistenceError, UpstreamError
)
from typing import Any, Callable, Optional
import logging

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

_DUPLICATE_MARKERS = ("already registered", "already been registered", "already exists", "email_exists")
_BAD_TOKEN_STATUSES = (401, 403)


def is_token_rejection(error: Exception) -> bool:
    """True when the auth API refused the user's token itself.

    A 401 for our own API key is a server misconfiguration, not a bad token.
    """
    if getattr(error, "status", None) not in _BAD_TOKEN_STATUSES:
        return False
    return "api key" not in str(error).lower()


class AuthService:
    def __init__(self, supabase: Client, anon_client_factory: Callable[[], Client]):
        self.supabase = supabase
        self.anon_client_factory = anon_client_factory
        self.users = UserService(supabase)
        self.roles = RoleService(supabase)

    def sign_up(self, signup_data: SignUpRequest) -> AuthResponse:
        """Create auth identity, role and profile, then sign in.

        Once the auth identity exists every later failure deletes it again
        before the error propagates, so a failed signup leaves nothing behind
        in auth.users.
        """
        email = str(signup_data.email).strip()
        password = signup_data.password
        name = signup_data.name.strip()
        role_name = signup_data.role_name.strip()
        department_name = signup_data.department_name.strip()

        if not all([email, password, name, role_name, department_name]):
            raise ValidationError("Email, password, name, roleName and departmentName are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        ensure_schema(self.supabase)
        role_id = self.roles.get_or_create_role(role_name, department_name)

        # Phase 1: the only step that needs undoing afterwards
        auth_user_id = self._create_auth_identity(email, password, name)

        # Phase 2: anything failing here rolls phase 1 back
        try:
            self.users.create_profile(auth_user_id, email, name, role_id)
            try:
                access_token = self._password_sign_in(email, password).session.access_token
            except InvalidCredentials as e:
                raise UpstreamError(f"Sign-in after signup failed: {e.detail}")
            profile = self.users.find_by_auth_user_id(auth_user_id)
            if profile is None:
                raise PersistenceError("User profile missing after signup")
        except Exception as e:
            logger.error(f"Signup for {email} failed after auth identity was created: {e}")
            self._rollback_auth_identity(auth_user_id)
            if isinstance(e, PortalError):
                raise
            raise PersistenceError(str(e))

        logger.info(f"User created successfully: {email}")
        return AuthResponse(
            message="User created successfully",
            user=profile,
            access_token=access_token
        )

    def sign_in(self, signin_data: SignInRequest) -> AuthResponse:
        """Check the password with Supabase Auth and load the profile"""
        ensure_schema(self.supabase)
        auth_response = self._password_sign_in(str(signin_data.email), signin_data.password)

        profile = self.users.find_by_auth_user_id(auth_response.user.id)
        if profile is None:
            raise ProfileNotFound()

        logger.info(f"User signed in: {profile.email}")
        return AuthResponse(
            message="Signed in successfully",
            user=profile,
            access_token=auth_response.session.access_token
        )

    def sign_out(self, token: Optional[str]) -> None:
        """Revoke the token's session server-side. Best effort: tokens expire on their own."""
        if not token:
            return
        try:
            self.supabase.auth.admin.sign_out(token)
        except Exception as e:
            logger.warning(f"Server-side sign out failed: {e}")

    def authenticate(self, token: str) -> UserProfile:
        """Resolve a bearer token to its profile row. Raises on anything short of success."""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            if is_token_rejection(e):
                raise AuthError("Invalid or expired token", status_code=403)
            raise UpstreamError(f"Token verification failed: {e}")

        if not user_response or not user_response.user:
            raise AuthError("Invalid or expired token", status_code=403)

        profile = self.users.find_by_auth_user_id(user_response.user.id)
        if profile is None:
            raise AuthError("User data not found", status_code=403)
        return profile

    def get_current_user(self, token: Optional[str]) -> Optional[UserProfile]:
        """Like authenticate, but any failure just means "not authenticated"."""
        if not token:
            return None
        try:
            return self.authenticate(token)
        except Exception as e:
            logger.debug(f"Could not resolve current user: {e}")
            return None

    def _create_auth_identity(self, email: str, password: str, name: str) -> str:
        try:
            auth_response = self.supabase.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"name": name}
            })
        except Exception as e:
            error_message = str(e)
            if any(marker in error_message.lower() for marker in _DUPLICATE_MARKERS):
                raise DuplicateEmail()
            logger.error(f"Auth signup error for {email}: {error_message}")
            raise UpstreamError(f"Registration failed: {error_message}")

        if not auth_response or not auth_response.user:
            raise UpstreamError("Registration failed: no user returned")
        return auth_response.user.id

    def _rollback_auth_identity(self, auth_user_id: str) -> None:
        try:
            self.supabase.auth.admin.delete_user(auth_user_id)
            logger.info(f"Rolled back auth identity {auth_user_id}")
        except Exception as e:
            # No retry: the identity stays orphaned and the original error wins
            logger.error(f"Failed to roll back auth identity {auth_user_id}: {e}")

    def _password_sign_in(self, email: str, password: str) -> Any:
        client = self.anon_client_factory()
        try:
            auth_response = client.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except Exception as e:
            error_message = str(e).lower()
            if "invalid" in error_message or "credentials" in error_message:
                raise InvalidCredentials()
            raise UpstreamError(f"Sign in failed: {e}")

        if not auth_response.user or not auth_response.session:
            raise InvalidCredentials()
        return auth_response
