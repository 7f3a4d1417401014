"""GhostGuard configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_LICENSE_SECRET = "change_me"


class GhostGuardSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GHOSTGUARD_")

    environment: str = "development"

    # Shared with agents: signs license assertions returned by /api/license/verify
    license_secret: str = INSECURE_LICENSE_SECRET
    # Bearer secret for the /admin/* surface. Empty disables the admin surface.
    admin_secret: str = ""

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/ghostguard.db"
    store_timeout: float = 10.0  # seconds, applied to every store session

    # API
    api_title: str = "GhostGuard Backend"
    api_version: str = "3.1.0"
    api_prefix: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    dashboard_origin: str | None = None
    log_level: str = "INFO"

    # Licensing
    license_prefix: str = "GG"

    # Live state
    online_window_seconds: float = 30.0
    command_queue_capacity: int = 200
    command_queue_trim: int = 50
    log_buffer_capacity: int = 300
    log_read_default: int = 200
    log_read_max: int = 500

    # Evidence storage
    blob_backend: str = "local"  # "local" | "supabase"
    blob_root: str = "./data/blobs"
    blob_public_base_url: str = "http://localhost:3000/blobs"
    supabase_url: str = ""
    supabase_service_key: str = ""
    evidence_bucket: str = "ban-evidence"

    # Unauthenticated DELETE /api/server/ban/{ban_id}, kept for old agents
    enable_legacy_unban: bool = True

    # Advertised agent release
    agent_version: str = "3.1.0"
    agent_download_url: str = "https://ghostguard.com/download"
    agent_release_notes: str = "Stability improvements & detection optimizations"

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins: the dashboard origin when set, otherwise any."""
        if self.dashboard_origin:
            return [self.dashboard_origin]
        return ["*"]

    def validate_for_production(self) -> None:
        """Raise if insecure secrets are used in non-development environments."""
        problems = []
        if self.license_secret == INSECURE_LICENSE_SECRET:
            problems.append("GHOSTGUARD_LICENSE_SECRET")
        if not self.admin_secret:
            problems.append("GHOSTGUARD_ADMIN_SECRET")

        if self.environment != "development" and problems:
            raise RuntimeError(
                f"Insecure configuration detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {', '.join(problems)}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if problems:
            warnings.warn(
                f"Using insecure defaults for {', '.join(problems)}; set them for production",
                UserWarning,
                stacklevel=2,
            )

        if self.blob_backend == "supabase" and not (self.supabase_url and self.supabase_service_key):
            warnings.warn(
                "GHOSTGUARD_BLOB_BACKEND=supabase without GHOSTGUARD_SUPABASE_URL / "
                "GHOSTGUARD_SUPABASE_SERVICE_KEY, evidence uploads will fail",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> GhostGuardSettings:
    settings = GhostGuardSettings()
    settings.validate_for_production()
    return settings
