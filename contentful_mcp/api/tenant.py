from __future__ import annotations

from typing import Any, Mapping, Optional

from ..core.config import Settings
from ..core.tenant import TenantCredentials, validate_tenant_credentials


def resolve_tenant(
    settings: Settings,
    *,
    tenant: Optional[Mapping[str, Any]] = None,
    token: Optional[str] = None,
    space_id: Optional[str] = None,
    environment_id: Optional[str] = None,
) -> TenantCredentials:
    """Credentials for one request.

    An explicit ``tenant`` mapping wins; otherwise individual overrides are
    layered on top of the configured default tenant.
    """
    if tenant is not None:
        return validate_tenant_credentials(tenant)

    raw = settings.default_tenant()
    if token:
        raw["CONTENTFUL_MANAGEMENT_ACCESS_TOKEN"] = token
    if space_id:
        raw["SPACE_ID"] = space_id
    if environment_id:
        raw["ENVIRONMENT_ID"] = environment_id
    return validate_tenant_credentials(raw)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value:
        return None
    return value.strip()
