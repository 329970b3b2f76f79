"""
unleash_proxy.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Read the platform-provided env var names as-is (NAIS_*, UNLEASH_*, OTEL_*, PORT).
- Hide the shared Unleash token from repr/logging.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    All values are read once at startup and never re-read.
    No env prefix: the platform injects these names directly.
    """

    model_config = SettingsConfigDict(case_sensitive=False)

    nais_app_name: str = "unleash-proxy"
    nais_cluster_name: str = ""
    # Constant labels on every Prometheus metric.
    nais_namespace: str = ""
    nais_pod_name: str = ""
    app_version: str = ""
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    port: int = 8080
    # Budget for draining in-flight requests before the clients are released.
    shutdown_timeout_seconds: int = 30

    # Upstream Unleash server shared by every per-caller client.
    unleash_server_api_url: str = "http://localhost:4242"
    unleash_server_api_token: str = Field(default="", repr=False)
    unleash_server_api_env: str = "development"
    unleash_refresh_interval_seconds: int = 15
    unleash_metrics_interval_seconds: int = 60
    # None waits for the first synchronization indefinitely.
    unleash_ready_timeout_seconds: float | None = None

    # Allow-list source: accessPolicy.inbound.rules in the NAIS manifest.
    nais_config_path: str = "nais.yaml"

    # Tracing and OTLP request metrics are enabled only when an OTLP endpoint is configured.
    otel_exporter_otlp_endpoint: str = ""
    otel_service_name: str = ""
    otel_service_version: str = "0.1.0"

    @property
    def unleash_api_url(self) -> str:
        return self.unleash_server_api_url.rstrip("/") + "/api"

    @property
    def service_name(self) -> str:
        return self.otel_service_name or self.nais_app_name

    @property
    def deployment_environment(self) -> str:
        return self.nais_cluster_name or self.unleash_server_api_env


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Configuration is consumed before the registry is initialized; nothing here is hot-reloaded.
