"""Settings dataclass for adolinks configuration.

This module defines the Settings dataclass that holds the global Azure
DevOps connection settings, and the naming scheme of per-tenant override
keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

# Per-tenant override keys: ADO_OVERRIDE_<TENANT>_<FIELD>
OVERRIDE_KEY_PREFIX = "ADO_OVERRIDE_"
OVERRIDE_FIELDS = ("BASE_URL", "PERSONAL_ACCESS_TOKEN", "IS_OVERRIDING")

DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass
class Settings:
    """Configuration settings for adolinks.

    All settings have defaults and can be loaded from the configuration
    files (~/.adolinks-config, .adolinks) or the environment.

    Attributes:
        enabled: Whether work item links are resolved at all
        base_url: Azure DevOps organization/collection URL the token is for
        personal_access_token: Token sent as Basic auth password
        release_note_prefix: Comment prefix marking a release note
        max_concurrency: Work items resolved at the same time (1-16)
        timeout_seconds: Per-request timeout
    """

    enabled: bool = False
    base_url: str = ""
    personal_access_token: str = ""
    release_note_prefix: str = ""
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    # Config key to attribute mapping
    _key_mapping: dict[str, str] = field(
        default_factory=lambda: {
            "ADO_ENABLED": "enabled",
            "ADO_BASE_URL": "base_url",
            "ADO_PERSONAL_ACCESS_TOKEN": "personal_access_token",
            "ADO_RELEASE_NOTE_PREFIX": "release_note_prefix",
            "ADO_MAX_CONCURRENCY": "max_concurrency",
            "ADO_TIMEOUT_SECONDS": "timeout_seconds",
        },
        repr=False,
    )

    def __repr__(self) -> str:
        token = "<REDACTED>" if self.personal_access_token else "''"
        return (
            f"Settings(enabled={self.enabled!r}, base_url={self.base_url!r}, "
            f"personal_access_token={token}, "
            f"release_note_prefix={self.release_note_prefix!r}, "
            f"max_concurrency={self.max_concurrency!r}, "
            f"timeout_seconds={self.timeout_seconds!r})"
        )

    def get_attribute_for_key(self, key: str) -> str | None:
        """Get the attribute name for a config key.

        Args:
            key: Configuration key (e.g., "ADO_BASE_URL")

        Returns:
            Attribute name or None if key is unknown
        """
        return self._key_mapping.get(key)

    def get_key_for_attribute(self, attr: str) -> str | None:
        """Get the config key for an attribute name."""
        for key, value in self._key_mapping.items():
            if value == attr:
                return key
        return None

    @classmethod
    def get_config_keys(cls) -> list[str]:
        """Get list of all valid configuration keys."""
        temp = cls()
        return list(temp._key_mapping.keys())


def normalize_tenant_id(tenant_id: str) -> str:
    """Turn a tenant id into the form used in override keys.

    Examples:
        >>> normalize_tenant_id("Spaces-1")
        'SPACES_1'
    """
    return re.sub(r"[^A-Za-z0-9]", "_", tenant_id.strip()).upper()


def override_key(tenant_id: str, field_name: str) -> str:
    """Config key of one override field for a tenant."""
    return f"{OVERRIDE_KEY_PREFIX}{normalize_tenant_id(tenant_id)}_{field_name}"


# Default configuration file path
CONFIG_FILE = Path.home() / ".adolinks-config"
