"""Read-only configuration store.

The store is what the rest of adolinks reads settings through. It is
built once from loaded Settings (see ``ConfigManager.build_store``) and
never changes afterwards, so a resolution pass sees consistent values.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from adolinks.config.settings import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    Settings,
    normalize_tenant_id,
)
from adolinks.integrations.credentials import SensitiveString, TenantOverride


class ConfigurationStore:
    """Read-only view of the Azure DevOps settings and tenant overrides.

    Args:
        settings: Loaded settings
        tenant_overrides: Overrides keyed by tenant id (any form; ids are
            normalized on both sides of the lookup)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        tenant_overrides: Mapping[str, TenantOverride] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._tenant_overrides: Mapping[str, TenantOverride] = MappingProxyType(
            {normalize_tenant_id(k): v for k, v in (tenant_overrides or {}).items()}
        )

    @property
    def is_enabled(self) -> bool:
        return self._settings.enabled

    @property
    def base_url(self) -> str | None:
        """Configured base URL with surrounding slashes removed."""
        value = self._settings.base_url.strip().strip("/")
        return value or None

    @property
    def personal_access_token(self) -> SensitiveString | None:
        return SensitiveString.from_optional(self._settings.personal_access_token)

    @property
    def release_note_prefix(self) -> str | None:
        return self._settings.release_note_prefix or None

    @property
    def max_concurrency(self) -> int:
        return self._settings.max_concurrency or DEFAULT_MAX_CONCURRENCY

    @property
    def timeout_seconds(self) -> float:
        return self._settings.timeout_seconds or DEFAULT_TIMEOUT_SECONDS

    @property
    def tenant_overrides(self) -> Mapping[str, TenantOverride]:
        return self._tenant_overrides

    def get_tenant_override(self, tenant_id: str) -> TenantOverride | None:
        """Look up the overrides configured for a tenant."""
        return self._tenant_overrides.get(normalize_tenant_id(tenant_id))


__all__ = ["ConfigurationStore"]
