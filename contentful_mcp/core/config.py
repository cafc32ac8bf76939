from functools import lru_cache

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

from ..external.retry import RetryPolicy


class Settings(BaseSettings):
    model_config = ConfigDict(env_prefix="", extra="ignore")
    app_name: str = Field(default="Contentful MCP Server")
    app_version: str = Field(default="1.0.0")

    # Default tenant (stdio bootstrap, façade fallback)
    contentful_management_access_token: str | None = None
    space_id: str | None = None
    environment_id: str = "master"
    contentful_host: str = "api.contentful.com"

    # Logging
    log_level: str = "INFO"
    log_colors: bool = False

    # Outbound calls
    http_timeout_seconds: float = Field(default=30.0, description="Contentful request timeout (seconds)")
    retry_max_attempts: int = 4
    retry_base_delay_ms: float = 100
    retry_max_delay_ms: float = 1600
    retry_jitter_ratio: float = 0.2

    # HTTP façade
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma separated CORS origins",
    )

    @property
    def allowed_origin_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            base_delay_ms=self.retry_base_delay_ms,
            max_delay_ms=self.retry_max_delay_ms,
            jitter_ratio=self.retry_jitter_ratio,
        )

    def default_tenant(self) -> dict[str, str | None]:
        return {
            "CONTENTFUL_MANAGEMENT_ACCESS_TOKEN": self.contentful_management_access_token,
            "SPACE_ID": self.space_id,
            "ENVIRONMENT_ID": self.environment_id,
            "CONTENTFUL_HOST": self.contentful_host,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
