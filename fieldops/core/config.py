"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. SECRET_KEY is required and validated at load time;
Firebase credentials are optional so the app can boot (and answer health
checks) before the document store is configured.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "fieldops"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Security (bearer tokens are HS256 JWTs with the user id in ``sub``)
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480
    token_issuer: str | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    write_rate_limit: str = "120/minute"

    # Firebase / Firestore: use key (env JSON string) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    firestore_timeout_seconds: float = 30.0

    # Workflow trigger dispatch
    trigger_workers: int = 2
    trigger_queue_size: int = 1000
    trigger_max_attempts: int = 3
    trigger_backoff_base_seconds: float = 0.5
    trigger_backoff_max_seconds: float = 30.0
    trigger_shutdown_timeout_seconds: float = 10.0
    webhook_timeout_seconds: float = 10.0

    # Invoices drafted by automation
    invoice_due_days: int = 30

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env and numeric bounds."""
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if self.trigger_workers < 1:
            raise ValueError("TRIGGER_WORKERS must be at least 1")
        if self.trigger_max_attempts < 1:
            raise ValueError("TRIGGER_MAX_ATTEMPTS must be at least 1")
        if self.telemetry_exporter not in ("console", "otlp", "none"):
            raise ValueError(
                f"Invalid telemetry_exporter '{self.telemetry_exporter}'. "
                "Must be one of: 'console', 'otlp', 'none'"
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
