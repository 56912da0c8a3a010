"""Azure DevOps URL parsing.

Turns the browser URL a build server records for a build, or the base URL
configured by an administrator, into the organization/project URLs the
REST API is addressed through. Everything here is pure string handling.

Examples:
    >>> urls = parse_browser_url(
    ...     "https://dev.azure.com/contoso/Backend/_build/results?buildId=24"
    ... )
    >>> urls.organization_url, urls.project_url, urls.build_id
    ('https://dev.azure.com/contoso', 'https://dev.azure.com/contoso/Backend', 24)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from adolinks.utils.errors import InvalidBrowserUrlError

# <scheme>://<host>/<collection>/<project>/_build...
# Group 1 is the project URL, group 2 the organization (collection) URL.
_BUILD_URL_PATTERN = re.compile(r"^\s*((https?://.+?)/+[^/]+)/+_build\b")

# <scheme>://<host>[/<segment>[/<segment>]]...
_BASE_URL_PATTERN = re.compile(
    r"^\s*(?P<root>https?://[^/?#]+)(?P<path>/[^?#]*)?(?:[?#].*)?$",
    re.IGNORECASE,
)

# Hosted organizations on the legacy domain carry the organization in the host name
_LEGACY_HOST_SUFFIX = ".visualstudio.com"

BUILD_ID_PARAMETER = "buildId"


@dataclass(frozen=True)
class AdoUrl:
    """An Azure DevOps organization (or on-premises collection)."""

    organization_url: str


@dataclass(frozen=True)
class AdoProjectUrls(AdoUrl):
    """An organization plus, optionally, one of its projects.

    ``project_url`` is ``None`` only for configured base URLs that name an
    organization without a project.
    """

    project_url: str | None = None

    def __post_init__(self) -> None:
        if self.project_url is not None and not self.project_url.startswith(
            self.organization_url.rstrip("/") + "/"
        ):
            raise ValueError(
                f"Project URL {self.project_url!r} is not within "
                f"organization URL {self.organization_url!r}"
            )


@dataclass(frozen=True)
class AdoBuildUrls(AdoProjectUrls):
    """URLs identifying one build of a project.

    Attributes:
        build_id: Positive build number within the project
        build_summary_url: Browser URL of the build results page
    """

    build_id: int = 0
    build_summary_url: str = ""

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.project_url is None:
            raise ValueError("Build URLs require a project URL")
        if self.build_id <= 0:
            raise ValueError(f"Build id must be positive, got {self.build_id}")

    @classmethod
    def create(cls, project_urls: AdoProjectUrls, build_id: int) -> AdoBuildUrls:
        """Create build URLs for a known project, e.g. for a permissions probe."""
        if project_urls.project_url is None:
            raise ValueError("Build URLs require a project URL")
        return cls(
            organization_url=project_urls.organization_url,
            project_url=project_urls.project_url,
            build_id=build_id,
            build_summary_url=(
                f"{project_urls.project_url}/_build/results?"
                f"{urlencode({BUILD_ID_PARAMETER: build_id, 'view': 'results'})}"
            ),
        )


def _parse_build_id(query: str) -> int:
    """Extract a positive ``buildId`` from a query string (key is case-insensitive)."""
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key.lower() == BUILD_ID_PARAMETER.lower():
            value = value.strip()
            if not value.isdigit():
                raise ValueError(f"buildId is not numeric: {value!r}")
            build_id = int(value)
            if build_id <= 0:
                raise ValueError("buildId must be positive")
            return build_id
    raise ValueError("buildId query parameter is missing")


def _build_summary_url(browser_url: str) -> str:
    """Return the browser URL with its ``view`` query parameter set to ``results``."""
    parts = urlsplit(browser_url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    if any(k == "view" for k, _ in query):
        query = [(k, "results" if k == "view" else v) for k, v in query]
    else:
        query.append(("view", "results"))
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_browser_url(browser_url: str) -> AdoBuildUrls:
    """Parse the browser URL of a build into organization/project/build URLs.

    Args:
        browser_url: e.g. ``http://host/DefaultCollection/Deployable/_build/results?buildId=24``

    Returns:
        AdoBuildUrls for the build

    Raises:
        InvalidBrowserUrlError: If the URL does not match
            ``<scheme>://<host>/<collection>/<project>/_build...?buildId=<n>``
    """
    if not browser_url:
        raise InvalidBrowserUrlError(browser_url or "")

    match = _BUILD_URL_PATTERN.match(browser_url)
    if not match:
        raise InvalidBrowserUrlError(browser_url)

    stripped = browser_url.strip()
    try:
        build_id = _parse_build_id(urlsplit(stripped).query)
        return AdoBuildUrls(
            organization_url=match.group(2),
            project_url=match.group(1),
            build_id=build_id,
            build_summary_url=_build_summary_url(stripped),
        )
    except ValueError as e:
        raise InvalidBrowserUrlError(browser_url) from e


def parse_organization_and_project_urls(base_url: str) -> AdoProjectUrls:
    """Parse a configured base URL into organization and optional project URLs.

    Accepted shapes (trailing slashes ignored):
        - ``https://dev.azure.com/<org>`` / ``http://host/<collection>``
        - ``https://dev.azure.com/<org>/<project>`` / ``http://host/<collection>/<project>``
        - ``https://<org>.visualstudio.com[/<project>]``

    Segments after the project, and a second segment starting with ``_``
    (such as ``_build``), do not name a project.

    Args:
        base_url: The configured Azure DevOps base URL

    Returns:
        AdoProjectUrls whose ``project_url`` is None when no project is named

    Raises:
        InvalidBrowserUrlError: If the URL has no organization/collection
    """
    match = _BASE_URL_PATTERN.match((base_url or "").strip())
    if not match:
        raise InvalidBrowserUrlError(base_url or "", "Unrecognized Azure DevOps base URL.")

    root = match.group("root")
    segments = [s for s in (match.group("path") or "").split("/") if s]

    if root.lower().endswith(_LEGACY_HOST_SUFFIX):
        organization_url = root
    else:
        if not segments:
            raise InvalidBrowserUrlError(
                base_url,
                "Unrecognized Azure DevOps base URL. "
                "Expected the organization or collection, e.g. https://dev.azure.com/<org>.",
            )
        organization_url = f"{root}/{segments.pop(0)}"

    project_url = None
    if segments and not segments[0].startswith("_"):
        project_url = f"{organization_url}/{segments[0]}"

    return AdoProjectUrls(organization_url=organization_url, project_url=project_url)


__all__ = [
    "AdoUrl",
    "AdoProjectUrls",
    "AdoBuildUrls",
    "BUILD_ID_PARAMETER",
    "parse_browser_url",
    "parse_organization_and_project_urls",
]
