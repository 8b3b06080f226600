"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Nuvemshop / Tiendanube
    ns_client_id: str = Field(
        default="",
        description="Nuvemshop app client ID",
    )
    ns_client_secret: str = Field(
        default="",
        description="Nuvemshop app client secret (also signs webhooks)",
    )
    ns_redirect_url: str = Field(
        default="",
        description="OAuth redirect URL; its origin is the public base for webhooks",
    )
    ns_api_base: str = Field(
        default="https://api.nuvemshop.com.br",
        description="Nuvemshop REST API base URL",
    )
    ns_api_version: str = Field(
        default="2025-03",
        description="Nuvemshop REST API version",
    )
    ns_user_agent: str = Field(
        default="GoAffPro Bridge (contact@example.com)",
        description="User-Agent required by the Nuvemshop API",
    )
    ns_script_id: int | None = Field(
        default=None,
        description="Storefront script ID to associate on install",
    )
    ns_token_url: str = Field(
        default="https://www.tiendanube.com/apps/authorize/token",
        description="OAuth authorization-code exchange endpoint",
    )

    # GoAffPro
    goaffpro_access_token: str = Field(
        default="",
        description="GoAffPro admin API access token",
    )
    goaffpro_api_base: str = Field(
        default="https://api.goaffpro.com",
        description="GoAffPro API base URL",
    )
    goaffpro_webhook_secret: str = Field(
        default="change-me",
        description="Shared secret expected in the GoAffPro webhook query string",
    )

    # Coupons
    default_coupon_percent: float = Field(
        default=10.0,
        description="Percentage discount for coupons created for new affiliates",
    )

    # Storage
    store_backend: str = Field(
        default="memory",
        description="Backend for tokens and attribution: memory or redis",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection string (store_backend=redis)",
    )
    attribution_ttl_hours: int = Field(
        default=720,
        description="Hours a captured attribution record stays joinable",
    )
    attribution_max_entries: int = Field(
        default=100_000,
        description="Upper bound on attribution records kept by the memory backend",
    )

    # API Settings
    api_title: str = Field(
        default="Affiliate Bridge",
        description="API title",
    )
    api_version: str = Field(
        default="0.1.0",
        description="API version",
    )
    admin_api_key: str = Field(
        default="",
        description="Bearer key for /admin endpoints (empty disables them)",
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (the capture script posts cross-origin)",
    )

    # Observability
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Enable JSON structured logging",
    )
    enable_tracing: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing export",
    )
    enable_metrics: bool = Field(
        default=True,
        description="Enable Prometheus metrics",
    )
    otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC endpoint for traces",
    )
    service_name: str = Field(
        default="affiliate-bridge",
        description="Service name for telemetry",
    )
    service_environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )

    @property
    def nuvemshop_oauth_configured(self) -> bool:
        return bool(self.ns_client_id and self.ns_client_secret and self.ns_redirect_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
