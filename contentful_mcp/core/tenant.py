"""Tenant credentials and the immutable per-session tenant context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..external.errors import ClassifiedError
from .logging_config import get_tenant_logger


DEFAULT_CONTENTFUL_HOST = "api.contentful.com"
DEFAULT_ENVIRONMENT_ID = "master"


@dataclass(frozen=True, slots=True)
class TenantContext:
    access_token: str = field(repr=False)
    space_id: str
    environment_id: str = DEFAULT_ENVIRONMENT_ID
    host: str = DEFAULT_CONTENTFUL_HOST
    logger: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.logger is None:
            object.__setattr__(
                self,
                "logger",
                get_tenant_logger(
                    self.access_token,
                    space_id=self.space_id,
                    environment_id=self.environment_id,
                ),
            )

    @property
    def base_url(self) -> str:
        host = self.host
        if host.startswith(("http://", "https://")):
            return host.rstrip("/")
        return f"https://{host}"


class TenantCredentials(BaseModel):
    """Wire shape of tenant credentials (env names as field aliases)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="CONTENTFUL_MANAGEMENT_ACCESS_TOKEN", min_length=10)
    space_id: str = Field(alias="SPACE_ID", min_length=1)
    environment_id: str = Field(default=DEFAULT_ENVIRONMENT_ID, alias="ENVIRONMENT_ID")
    host: str = Field(default=DEFAULT_CONTENTFUL_HOST, alias="CONTENTFUL_HOST")

    def to_context(self, logger: Any = None) -> TenantContext:
        return TenantContext(
            access_token=self.access_token,
            space_id=self.space_id,
            environment_id=self.environment_id,
            host=self.host,
            logger=logger,
        )


def validate_tenant_credentials(raw: Mapping[str, Any]) -> TenantCredentials:
    try:
        return TenantCredentials.model_validate(dict(raw))
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ClassifiedError(
            kind="bad_request",
            message=f"Invalid tenant credentials: {details}",
            cause=exc,
        ) from exc
