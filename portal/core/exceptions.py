from fastapi import HTTPException, status


class PortalError(HTTPException):
    """Base for errors the API reports to the caller.
    The detail is shown to users as-is, so keep it readable."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred. Please try again.",
    ):
        super().__init__(status_code=status_code, detail=detail)


# ============== Input ==============


class ValidationError(PortalError):
    """Missing or malformed input."""

    def __init__(self, detail: str = "Invalid request."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ============== Authentication ==============


class AuthError(PortalError):
    """Bad credentials (401) or a token that cannot be used (403)."""

    def __init__(
        self,
        detail: str = "Authentication failed.",
        status_code: int = status.HTTP_401_UNAUTHORIZED,
    ):
        super().__init__(status_code=status_code, detail=detail)


class InvalidCredentials(AuthError):
    def __init__(self, detail: str = "Invalid email or password."):
        super().__init__(detail=detail)


class ProfileNotFound(AuthError):
    """Auth identity exists but has no profile row."""

    def __init__(self, detail: str = "User data not found."):
        super().__init__(detail=detail)


# ============== Resources ==============


class DuplicateEmail(PortalError):
    def __init__(self, detail: str = "An account with this email already exists."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class NotFoundError(PortalError):
    def __init__(self, detail: str = "The requested resource could not be found."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


# ============== Provider failures ==============


class PersistenceError(PortalError):
    """A database call to Supabase failed."""

    def __init__(self, detail: str = "Database operation failed."):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class UpstreamError(PortalError):
    """A Supabase Auth or Storage call failed."""

    def __init__(self, detail: str = "Upstream service call failed."):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
