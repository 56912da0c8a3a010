"""Azure DevOps integration for adolinks.

This package contains:
- urls: Build browser URL and base URL parsing
- html: Plain-text conversion of comment bodies
- http_client: Async JSON client built on httpx
- credentials: Personal Access Token resolution and tenant overrides
- results: Success/Failure/Disabled outcome types
- api_client: Work item, comment and project requests
"""

from adolinks.integrations.results import Disabled, Failure, MapResult, Result, Success
from adolinks.integrations.urls import (
    AdoBuildUrls,
    AdoProjectUrls,
    AdoUrl,
    parse_browser_url,
    parse_organization_and_project_urls,
)
from adolinks.integrations.html import strip_html
from adolinks.integrations.credentials import (
    CredentialResolver,
    OverrideSetting,
    SensitiveString,
    TenantOverride,
    is_base_of,
)
from adolinks.integrations.http_client import (
    SIGNIN_PAGE,
    HttpJsonClient,
    HttpJsonResponse,
    describe_failure,
)
from adolinks.integrations.api_client import AdoApiClient, WorkItemRef

__all__ = [
    # Results
    "Success",
    "Failure",
    "Disabled",
    "Result",
    "MapResult",
    # URLs
    "AdoUrl",
    "AdoProjectUrls",
    "AdoBuildUrls",
    "parse_browser_url",
    "parse_organization_and_project_urls",
    # HTML
    "strip_html",
    # Credentials
    "CredentialResolver",
    "OverrideSetting",
    "SensitiveString",
    "TenantOverride",
    "is_base_of",
    # HTTP
    "SIGNIN_PAGE",
    "HttpJsonClient",
    "HttpJsonResponse",
    "describe_failure",
    # API client
    "AdoApiClient",
    "WorkItemRef",
]
