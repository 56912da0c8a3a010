"""Host entry point: build information to work item links.

The host calls ``WorkItemLinkMapper.map`` for each package version that
has build information. Builds that did not come from Azure DevOps, or
that carry no build URL, have no work items to look up and map to an
empty list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from adolinks.config.store import ConfigurationStore
from adolinks.integrations.api_client import AdoApiClient
from adolinks.integrations.results import Disabled, Failure, MapResult, Success
from adolinks.integrations.urls import parse_browser_url
from adolinks.workitems.links import WORK_ITEM_SOURCE, WorkItemLink

logger = logging.getLogger(__name__)

AZURE_DEVOPS_BUILD_ENVIRONMENT = "Azure DevOps"


@dataclass(frozen=True)
class BuildInformation:
    """Build information recorded by the host for a package version.

    Attributes:
        build_environment: Build server that produced the package
        build_url: Browser URL of the build
        build_number: Build number as shown by the build server
        package_id: Package the build information belongs to, for messages
        version: Package version, for messages
    """

    build_environment: str | None = None
    build_url: str | None = None
    build_number: str | None = None
    package_id: str | None = None
    version: str | None = None

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.package_id, self.version) if p]
        return " ".join(parts) if parts else "(unknown package)"


class WorkItemLinkMapper:
    """Maps build information to Azure DevOps work item links.

    Args:
        store: Configuration store
        api_client: Client used to resolve the build's work items
    """

    def __init__(self, store: ConfigurationStore, api_client: AdoApiClient) -> None:
        self._store = store
        self._api_client = api_client

    @property
    def comment_parser(self) -> str:
        """Source tag of the links this mapper produces."""
        return WORK_ITEM_SOURCE

    @property
    def is_enabled(self) -> bool:
        return self._store.is_enabled

    async def map(
        self,
        build_information: BuildInformation | None,
        tenant_id: str | None = None,
    ) -> MapResult[list[WorkItemLink]]:
        """Resolve the work item links of a build.

        Args:
            build_information: Build information of the package version
            tenant_id: Tenant whose overrides apply, if any

        Returns:
            Disabled when the integration is turned off; Success with an
            empty list when there is nothing to look up; otherwise the
            links, or a Failure describing why they could not be resolved
        """
        if not self.is_enabled:
            logger.debug("Azure DevOps Issue Tracker is disabled in Settings.")
            return Disabled()

        if build_information is None:
            logger.debug(
                "No build information was found, so there are no Azure DevOps "
                "work items to look up. Consider adding a Push Build Information "
                "step to your build process."
            )
            return Success([])

        if build_information.build_environment != AZURE_DEVOPS_BUILD_ENVIRONMENT:
            logger.debug(
                "The build environment for package %s was '%s' rather than '%s', so the "
                "build URL will not be checked for Azure DevOps work item associations.",
                build_information.display_name,
                build_information.build_environment,
                AZURE_DEVOPS_BUILD_ENVIRONMENT,
            )
            return Success([])

        if not build_information.build_url or not build_information.build_url.strip():
            logger.info(
                "No build URL was found in the build information for package %s, so it "
                "will not be checked for Azure DevOps work item associations.",
                build_information.display_name,
            )
            return Success([])

        try:
            build_urls = parse_browser_url(build_information.build_url)
            return await self._api_client.get_build_work_item_links(build_urls, tenant_id)
        except Exception as e:
            logger.warning(
                "Unable to resolve Azure DevOps work items for package %s: %s",
                build_information.display_name,
                e,
            )
            return Failure.of(str(e))


__all__ = [
    "AZURE_DEVOPS_BUILD_ENVIRONMENT",
    "BuildInformation",
    "WorkItemLinkMapper",
]
