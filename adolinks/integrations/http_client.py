"""HTTP JSON client for the Azure DevOps REST API.

All requests go through one shared ``httpx.AsyncClient`` so that the
per-work-item fan-out reuses pooled connections. The client never raises
for remote conditions: every request yields an ``HttpJsonResponse`` whose
status code is either the HTTP status or one of the pseudo statuses below.

Pseudo statuses:
    SIGNIN_PAGE: The server answered with an HTML sign-in page instead of
        JSON, which is how Azure DevOps Server reports a rejected token.
    TRANSPORT_ERROR: No response was received (DNS, TLS, timeout, ...).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from adolinks.integrations.credentials import SensitiveString

logger = logging.getLogger(__name__)

SIGNIN_PAGE = -203
TRANSPORT_ERROR = -1

HTTP_NON_AUTHORITATIVE_INFORMATION = 203
HTTP_NOT_FOUND = 404

DEFAULT_TIMEOUT_SECONDS = 30.0

_PAT_SCOPE_HINT = (
    "Please confirm the Personal Access Token configured in the Azure DevOps "
    "issue tracker settings has the Build (Read) and Work Items (Read) scopes."
)
_PAT_SCOPE_HINT_TESTING = (
    "Please confirm the Personal Access Token you are testing has the "
    "Build (Read) and Work Items (Read) scopes."
)


@dataclass(frozen=True)
class HttpJsonResponse:
    """Outcome of a single GET request.

    Attributes:
        status_code: HTTP status, SIGNIN_PAGE or TRANSPORT_ERROR
        body: Parsed JSON object, or None when the body is not a JSON object
        reason: HTTP reason phrase
        transport_error: Description of the transport failure, if any
    """

    status_code: int
    body: dict[str, Any] | None = None
    reason: str = ""
    transport_error: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_not_found(self) -> bool:
        return self.status_code == HTTP_NOT_FOUND

    @property
    def is_signin_page(self) -> bool:
        return self.status_code == SIGNIN_PAGE


def _is_signin_page(response: httpx.Response) -> bool:
    """Detect servers that report auth failure with an HTML sign-in page.

    The request asks for JSON, so an HTML body is only returned when the
    server ignored the Accept header: either as a 203 or after a redirect
    to a sign-in path.
    """
    content_type = response.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != "text/html":
        return False
    return (
        response.status_code == HTTP_NON_AUTHORITATIVE_INFORMATION
        or "signin" in response.url.path.lower()
    )


def _parse_json_or_none(response: httpx.Response) -> dict[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def describe_failure(response: HttpJsonResponse, testing: bool = False) -> str:
    """Build a human-readable description of a failed request.

    Args:
        response: The failed response
        testing: True when the caller is testing connection settings, which
            changes the wording of the token scope hint

    Returns:
        Description such as ``401 (Unauthorized): <remote message> <hint>``.
        Never contains the token.
    """
    if response.transport_error is not None:
        return response.transport_error

    hint = _PAT_SCOPE_HINT_TESTING if testing else _PAT_SCOPE_HINT

    if response.is_signin_page:
        return (
            "Authentication required: Azure DevOps redirected the request to a "
            f"sign-in page. {hint}"
        )

    description = f"{response.status_code} ({response.reason or 'Unknown'})"
    message = response.body.get("message") if response.body else None
    if isinstance(message, str) and message.strip():
        description = f"{description}: {message.strip()}"
    return f"{description} {hint}"


class HttpJsonClient:
    """Async JSON GET client with optional Basic authentication.

    Use as an async context manager so the pooled connections are released:

        async with HttpJsonClient(timeout_seconds=10) as client:
            response = await client.get(url, token)

    Args:
        timeout_seconds: Default per-request timeout
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> HttpJsonClient:
        await self._get_http_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the shared HTTP client. Safe to call multiple times."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            async with self._client_lock:
                if self._http_client is None:
                    self._http_client = httpx.AsyncClient(
                        timeout=httpx.Timeout(self._timeout_seconds),
                        follow_redirects=True,
                        headers={"Accept": "application/json"},
                        transport=self._transport,
                    )
        return self._http_client

    async def get(
        self,
        url: str,
        password: SensitiveString | None = None,
        timeout_seconds: float | None = None,
    ) -> HttpJsonResponse:
        """GET a JSON document.

        Args:
            url: Absolute request URL
            password: Personal Access Token sent as the Basic auth password
                with an empty user name; omitted when None or blank
            timeout_seconds: Per-request timeout override

        Returns:
            HttpJsonResponse; transport failures are reported with
            status TRANSPORT_ERROR rather than raised
        """
        kwargs: dict[str, Any] = {}
        if password:
            kwargs["auth"] = httpx.BasicAuth("", password.value)
        if timeout_seconds is not None:
            kwargs["timeout"] = httpx.Timeout(timeout_seconds)

        http_client = await self._get_http_client()
        try:
            response = await http_client.get(url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            description = str(e) or type(e).__name__
            logger.debug("GET %s failed: %s", url, description)
            return HttpJsonResponse(
                status_code=TRANSPORT_ERROR,
                transport_error=f"Unable to reach Azure DevOps: {description}",
            )

        logger.debug("GET %s -> %s", url, response.status_code)

        if _is_signin_page(response):
            return HttpJsonResponse(status_code=SIGNIN_PAGE, reason="Sign-in page")

        return HttpJsonResponse(
            status_code=response.status_code,
            body=_parse_json_or_none(response),
            reason=response.reason_phrase,
        )


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "HTTP_NOT_FOUND",
    "SIGNIN_PAGE",
    "TRANSPORT_ERROR",
    "HttpJsonClient",
    "HttpJsonResponse",
    "describe_failure",
]
