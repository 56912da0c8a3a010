"""Connectivity check for Azure DevOps settings.

Tests a base URL and token before (or after) they are saved: the token
must be able to read build work items and work items in at least one
project. Probes use build 1 and work item 1; a 404 for either still
proves the token has the required scopes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from adolinks.config.store import ConfigurationStore
from adolinks.integrations.api_client import AdoApiClient
from adolinks.integrations.credentials import SensitiveString, is_base_of
from adolinks.integrations.results import Failure
from adolinks.integrations.urls import (
    AdoBuildUrls,
    AdoProjectUrls,
    parse_organization_and_project_urls,
)

logger = logging.getLogger(__name__)

PROBE_BUILD_ID = 1
PROBE_WORK_ITEM_ID = 1


class MessageCategory(str, Enum):
    """Severity of a connectivity check message."""

    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


@dataclass(frozen=True)
class ConnectivityCheckMessage:
    category: MessageCategory
    message: str


@dataclass
class ConnectivityCheckResponse:
    """Messages produced by a connectivity check, in the order they occurred."""

    messages: list[ConnectivityCheckMessage] = field(default_factory=list)

    def add_message(self, category: MessageCategory, message: str) -> None:
        self.messages.append(ConnectivityCheckMessage(category, message))

    @property
    def succeeded(self) -> bool:
        """True when the check passed: there are messages and all are informational."""
        return bool(self.messages) and all(
            m.category == MessageCategory.INFO for m in self.messages
        )


class ConnectivityCheck:
    """Tests Azure DevOps connection settings.

    Args:
        store: Configuration store, for the saved token and enabled flag
        api_client: Client used for the probes
    """

    def __init__(self, store: ConfigurationStore, api_client: AdoApiClient) -> None:
        self._store = store
        self._api_client = api_client

    async def execute(self, request: Mapping[str, Any]) -> ConnectivityCheckResponse:
        """Run the check.

        Args:
            request: ``{"BaseUrl": ..., "PersonalAccessToken": ...}``. A blank
                token means "use the saved token", which is what happens
                when settings are tested after being saved. The saved token
                is only used when the saved base URL covers ``BaseUrl``.

        Returns:
            On success a single Info message (plus a note when the
            integration is disabled). Otherwise Error and Warning messages
            explaining what failed.
        """
        response = ConnectivityCheckResponse()
        try:
            base_url = str(request.get("BaseUrl") or "").strip()
            token = SensitiveString.from_optional(request.get("PersonalAccessToken"))

            if not base_url:
                response.add_message(
                    MessageCategory.ERROR, "Please provide a value for Azure DevOps Base Url."
                )
                return response

            urls = parse_organization_and_project_urls(base_url)
            # The saved token only goes to the organization it was saved for
            target_url = urls.project_url or urls.organization_url
            if token is None and is_base_of(self._store.base_url, target_url):
                token = self._store.personal_access_token

            if token is None:
                response.add_message(
                    MessageCategory.ERROR, "Please provide a value for Personal Access Token."
                )
                return response

            if urls.project_url is not None:
                project_urls = [urls]
            else:
                projects = await self._api_client.get_project_list(urls, token, testing=True)
                if isinstance(projects, Failure):
                    response.add_message(MessageCategory.ERROR, projects.error_string)
                    return response

                if not projects.value:
                    response.add_message(
                        MessageCategory.ERROR,
                        "Successfully connected, but unable to find any projects to test permissions.",
                    )
                    return response

                project_urls = [
                    AdoProjectUrls(
                        organization_url=urls.organization_url,
                        project_url=f"{urls.organization_url}/{quote(project, safe='')}",
                    )
                    for project in projects.value
                ]

            for project in project_urls:
                if await self._probe_project(project, token, response):
                    # Earlier projects' warnings no longer matter
                    response = ConnectivityCheckResponse()
                    response.add_message(
                        MessageCategory.INFO, "The Azure DevOps connection was tested successfully"
                    )
                    if not self._store.is_enabled:
                        response.add_message(
                            MessageCategory.INFO,
                            "The Azure DevOps Issue Tracker is not enabled, so its "
                            "functionality will not currently be available",
                        )
                    return response

            return response
        except Exception as e:
            logger.warning("Azure DevOps connectivity check failed: %s", e)
            response.add_message(MessageCategory.ERROR, str(e) or type(e).__name__)
            return response

    async def _probe_project(
        self,
        project_urls: AdoProjectUrls,
        token: SensitiveString,
        response: ConnectivityCheckResponse,
    ) -> bool:
        """Probe one project; on failure add a Warning and return False."""
        build_probe = await self._api_client.get_build_work_items_refs(
            AdoBuildUrls.create(project_urls, PROBE_BUILD_ID), token, testing=True
        )
        if isinstance(build_probe, Failure):
            response.add_message(MessageCategory.WARNING, build_probe.error_string)
            return False

        work_item_probe = await self._api_client.get_work_item(
            project_urls, PROBE_WORK_ITEM_ID, token, testing=True
        )
        if isinstance(work_item_probe, Failure):
            response.add_message(MessageCategory.WARNING, work_item_probe.error_string)
            return False

        return True


__all__ = [
    "ConnectivityCheck",
    "ConnectivityCheckMessage",
    "ConnectivityCheckResponse",
    "MessageCategory",
]
