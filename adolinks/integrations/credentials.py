"""Personal Access Token handling.

A token is only ever sent to the organization it was configured for. The
resolver checks that the configured base URL is a URI prefix of the
organization being called before handing the token out; if nothing
matches it returns None and the request is not made with a credential.

Tenant overrides let a single tenant (a space or team of the host) point
at its own Azure DevOps organization with its own token. They are supplied
by an injected lookup so this module stays independent of where overrides
are stored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

from adolinks.utils.env_utils import mask_value

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


class SensitiveString:
    """A secret whose text form is masked.

    ``str()``, ``repr()`` and f-strings show a masked value, so the token
    cannot leak through logging or error messages by accident. The raw
    text is only available through ``value``.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        self._value = value

    @property
    def value(self) -> str:
        return self._value

    def __bool__(self) -> bool:
        return bool(self._value.strip())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SensitiveString):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return mask_value(self._value)

    def __repr__(self) -> str:
        return f"SensitiveString({mask_value(self._value)!r})"

    @classmethod
    def from_optional(cls, value: str | None) -> SensitiveString | None:
        """Wrap a raw value, treating None and blank strings as absent."""
        if value is None or not value.strip():
            return None
        return cls(value.strip())


@dataclass(frozen=True)
class OverrideSetting:
    """One tenant-scoped replacement of the global connection settings.

    Attributes:
        base_url: Azure DevOps organization/collection URL the token is for
        personal_access_token: Token for that organization
        is_overriding: Whether this setting is active
    """

    base_url: str | None = None
    personal_access_token: SensitiveString | None = None
    is_overriding: bool = False


@dataclass(frozen=True)
class TenantOverride:
    """All override settings configured for one tenant."""

    tenant_id: str
    settings: tuple[OverrideSetting, ...] = ()


TenantOverrideLookup = Callable[[str], TenantOverride | None]


class GlobalCredentialSource(Protocol):
    """Read-only view of the global connection settings."""

    @property
    def base_url(self) -> str | None: ...

    @property
    def personal_access_token(self) -> SensitiveString | None: ...


def _split_url(url: str) -> tuple[str, str, int, list[str]] | None:
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        return None
    if port is None:
        port = _DEFAULT_PORTS[scheme]
    segments = [s.lower() for s in parts.path.split("/") if s]
    return scheme, parts.hostname.lower(), port, segments


def is_base_of(base_url: str | None, url: str | None) -> bool:
    """Check whether ``base_url`` is a URI prefix of ``url``.

    Scheme, host and port must be equal and the path segments of
    ``base_url`` must be the leading path segments of ``url``. Comparison
    is case-insensitive and ignores trailing slashes, so
    ``https://dev.azure.com/contoso`` covers ``https://dev.azure.com/contoso/Web``
    but not ``https://dev.azure.com/contoso-labs``.

    Args:
        base_url: Configured base URL
        url: URL about to be called

    Returns:
        False for blank or unparseable input
    """
    if not base_url or not url:
        return False
    base = _split_url(base_url)
    target = _split_url(url)
    if base is None or target is None:
        return False
    base_scheme, base_host, base_port, base_segments = base
    scheme, host, port, segments = target
    return (
        base_scheme == scheme
        and base_host == host
        and base_port == port
        and segments[: len(base_segments)] == base_segments
    )


class CredentialResolver:
    """Chooses the Personal Access Token for an organization URL.

    Args:
        source: Global base URL and token
        override_lookup: Returns the overrides configured for a tenant
    """

    def __init__(
        self,
        source: GlobalCredentialSource,
        override_lookup: TenantOverrideLookup | None = None,
    ) -> None:
        self._source = source
        self._override_lookup = override_lookup

    def resolve(self, organization_url: str, tenant_id: str | None = None) -> SensitiveString | None:
        """Resolve the token to use for ``organization_url``.

        An active tenant override whose base URL covers the organization
        wins. Otherwise the global token is used when the global base URL
        covers the organization.

        Args:
            organization_url: Organization (collection) URL being called
            tenant_id: Tenant the request is made for, if any

        Returns:
            The token, or None when no configured base URL covers the
            organization
        """
        if tenant_id and self._override_lookup is not None:
            tenant_override = self._override_lookup(tenant_id)
            if tenant_override is not None:
                for setting in tenant_override.settings:
                    if (
                        setting.is_overriding
                        and setting.personal_access_token
                        and is_base_of(setting.base_url, organization_url)
                    ):
                        logger.debug(
                            "Using tenant override token for %s (tenant %s)",
                            organization_url,
                            tenant_id,
                        )
                        return setting.personal_access_token

        token = self._source.personal_access_token
        if token and is_base_of(self._source.base_url, organization_url):
            return token

        logger.debug("No configured base URL covers %s", organization_url)
        return None


__all__ = [
    "CredentialResolver",
    "GlobalCredentialSource",
    "OverrideSetting",
    "SensitiveString",
    "TenantOverride",
    "TenantOverrideLookup",
    "is_base_of",
]
