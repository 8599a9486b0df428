"""Hostguard configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Hostguard settings loaded from environment variables."""

    # Service identity
    instance_id: str = ""  # Auto-generated if not set
    service_host: str = "0.0.0.0"
    service_port: int = 8010

    # Naming strategy for record identifiers: none, prefix-provider,
    # prefix-host or hash. Parsed leniently once at startup.
    naming_strategy: str = "none"

    # Record store (reference lookups)
    record_store_url: str = "http://localhost:8000"
    record_store_token: str = ""  # Optional bearer token
    lookup_timeout: float = 5.0  # seconds

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    class Config:
        env_prefix = "HOSTGUARD_"


settings = Settings()
