"""Bridge configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class BridgeSettings(BaseSettings):
    environment: str = "development"
    app_title: str = "GHL Bridge"
    port: int = 3000
    log_level: str = "info"

    # Persistence (MONGODB_URI accepted for compatibility with older deployments)
    database_url: str = Field(
        default="sqlite+aiosqlite:///ghl_bridge.db",
        validation_alias=AliasChoices("DATABASE_URL", "MONGODB_URI"),
    )
    echo_sql: bool = False

    # HighLevel marketplace app
    ghl_api_domain: str = "https://services.leadconnectorhq.com"
    ghl_api_version: str = "2021-07-28"
    ghl_app_client_id: str = ""
    ghl_app_client_secret: str = ""
    ghl_app_sso_key: str = ""
    ghl_timeout_seconds: float = 30.0
    authorize_redirect_url: str = "https://app.gohighlevel.com/"
    default_location_id: str | None = None

    # Zenexa downstream backend
    zenexa_backend_url: str | None = None
    zenexa_timeout_seconds: float = 10.0

    # Webhook processing
    webhook_retry_attempts: int = Field(default=3, ge=1)
    webhook_retry_delay_seconds: float = Field(default=1.0, ge=0)

    model_config = {"env_file": ".env", "extra": "ignore", "populate_by_name": True}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def static_dir(self) -> Path:
        return self.base_dir / "static"

    @property
    def token_url(self) -> str:
        return f"{self.ghl_api_domain.rstrip('/')}/oauth/token"

    @property
    def zenexa_webhook_url(self) -> str | None:
        if not self.zenexa_backend_url:
            return None
        return f"{self.zenexa_backend_url.rstrip('/')}/api/webhook/ghl"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = BridgeSettings()
