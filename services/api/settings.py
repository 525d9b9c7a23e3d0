# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List
from pathlib import Path

class Settings(BaseSettings):
    # Database settings
    # sqlite for local dev; set DB_URL=postgresql://... in prod
    db_url: str = "sqlite:///data/checklist.db"

    # Object storage settings
    # "local" keeps files on disk; "supabase" talks to Supabase Storage
    object_storage_backend: str = "local"
    storage_bucket: str = "Cards"
    local_storage_dir: str = "data/objects"
    supabase_url: str = ""
    supabase_service_role: str = ""

    # Auth settings
    jwt_secret: str = "dev-secret"
    jwt_ttl_seconds: int = 2592000  # 30d
    auth_cookie: str = "cl_token"
    auth_cookie_secure: bool = False
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Upload limits
    max_attachment_bytes: int = 10 * 1024 * 1024
    max_note_image_bytes: int = 8 * 1024 * 1024

    # Signed attachment URLs live this long (seconds)
    signed_url_ttl_seconds: int = 120

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:3001,http://localhost:8000"

    # Rate limits (requests per minute, per client IP and route)
    rate_limit_enabled: bool = True
    rate_limit_read: int = 100
    rate_limit_write: int = 60

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def resolved_db_url(self) -> str:
        """
        Heroku/Render style `postgres://` URLs are not accepted by SQLAlchemy;
        rewrite them to `postgresql://`.
        """
        url = self.db_url.strip()
        if url.startswith("postgres://"):
            return "postgresql://" + url[len("postgres://"):]
        return url

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
