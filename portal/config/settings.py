from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""  # Admin client; bypasses RLS
    supabase_anon_key: str = ""  # Sign-in and user-scoped clients (RLS applies)

    # Complaint attachments (Supabase Storage)
    complaints_bucket: str = "complaints"
    max_attachments: int = 5
    attachment_size_limit_mb: int = 20

    # App
    app_name: str = "employee-portal"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"  # signup / signin
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key and self.supabase_anon_key)

    @property
    def attachment_size_limit_bytes(self) -> int:
        return self.attachment_size_limit_mb * 1024 * 1024

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
