"""Azure DevOps REST API client.

Fetches the work items associated with a build and turns them into
``WorkItemLink`` objects. Remote conditions (non-2xx, transport errors,
payloads that cannot be interpreted) are returned as ``Failure`` values;
the only exception raised on purpose is ``ConfigurationError`` when no
Personal Access Token is configured for the build's organization.

Endpoints (REST API version 4.1):
    GET {project}/_apis/build/builds/{id}/workitems
    GET {project}/_apis/wit/workitems/{id}
    GET {project}/_apis/wit/workitems/{id}/comments
    GET {organization}/_apis/projects
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from adolinks import AZURE_DEVOPS_API_VERSION
from adolinks.integrations.credentials import (
    CredentialResolver,
    GlobalCredentialSource,
    SensitiveString,
    TenantOverrideLookup,
)
from adolinks.integrations.html import strip_html
from adolinks.integrations.http_client import HttpJsonClient, describe_failure
from adolinks.integrations.results import Failure, Result, Success
from adolinks.integrations.urls import AdoBuildUrls, AdoProjectUrls, AdoUrl
from adolinks.utils.errors import ConfigurationError
from adolinks.workitems.links import WorkItemDetail, WorkItemLink, assemble_work_item_link
from adolinks.workitems.release_notes import extract_release_note

logger = logging.getLogger(__name__)

# The comments endpoint was still in preview at API version 4.1
COMMENTS_API_VERSION = "4.1-preview.2"

DEFAULT_MAX_CONCURRENCY = 8
MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 16


@dataclass(frozen=True)
class WorkItemRef:
    """A work item referenced by a build."""

    id: int
    url: str


class AdoClientSettings(GlobalCredentialSource, Protocol):
    """Settings the API client reads from the configuration store."""

    @property
    def release_note_prefix(self) -> str | None: ...


def _to_int(value: Any) -> int:
    """Convert a JSON id or count, which may arrive as text, to int."""
    if isinstance(value, bool) or value is None:
        raise TypeError(f"Expected an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Expected an integer, got {value!r}")
        return int(value)
    return int(value)


class AdoApiClient:
    """Client for the Azure DevOps build and work item APIs.

    Every request method accepts an explicit ``personal_access_token``
    (used by the connectivity check to test a token that is not saved yet)
    and a ``testing`` flag that changes the wording of failure hints. When
    no token is passed, the token is resolved for the organization being
    called and omitted if none is configured for it.

    Args:
        http_client: Shared JSON client
        settings: Configuration store
        override_lookup: Tenant override lookup used by credential resolution
        max_concurrency: Upper bound on work items resolved at the same time
    """

    def __init__(
        self,
        http_client: HttpJsonClient,
        settings: AdoClientSettings,
        override_lookup: TenantOverrideLookup | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if not MIN_CONCURRENCY <= max_concurrency <= MAX_CONCURRENCY:
            raise ValueError(
                f"max_concurrency must be between {MIN_CONCURRENCY} and "
                f"{MAX_CONCURRENCY}, got {max_concurrency}"
            )
        self._client = http_client
        self._settings = settings
        self._resolver = CredentialResolver(settings, override_lookup)
        self._max_concurrency = max_concurrency

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    def _token_for(
        self, ado_url: AdoUrl, personal_access_token: SensitiveString | None
    ) -> SensitiveString | None:
        if personal_access_token is not None:
            return personal_access_token
        return self._resolver.resolve(ado_url.organization_url)

    async def get_build_work_items_refs(
        self,
        build_urls: AdoBuildUrls,
        personal_access_token: SensitiveString | None = None,
        testing: bool = False,
    ) -> Result[list[WorkItemRef]]:
        """Fetch the work item references associated with a build.

        Returns:
            Success with the refs in API order (empty when the build is not
            found), or Failure
        """
        url = (
            f"{build_urls.project_url}/_apis/build/builds/{build_urls.build_id}"
            f"/workitems?api-version={AZURE_DEVOPS_API_VERSION}"
        )
        response = await self._client.get(url, self._token_for(build_urls, personal_access_token))
        if response.is_not_found:
            return Success([])
        if not response.is_success:
            return Failure.of(
                "Error while fetching work item references from Azure DevOps: "
                f"{describe_failure(response, testing)}"
            )

        try:
            if response.body is None:
                raise ValueError("Response is not a JSON object")
            values = response.body.get("value") or []
            refs = [WorkItemRef(id=_to_int(el["id"]), url=str(el.get("url") or "")) for el in values]
        except (AttributeError, KeyError, TypeError, ValueError):
            return Failure.of("Unable to interpret work item references from Azure DevOps.")
        return Success(refs)

    async def get_work_item(
        self,
        project_urls: AdoProjectUrls,
        work_item_id: int,
        personal_access_token: SensitiveString | None = None,
        testing: bool = False,
    ) -> Result[WorkItemDetail]:
        """Fetch a work item's title and comment count.

        A work item that no longer exists (404) is described by its own id
        rather than treated as an error.
        """
        url = (
            f"{project_urls.project_url}/_apis/wit/workitems/{work_item_id}"
            f"?api-version={AZURE_DEVOPS_API_VERSION}"
        )
        response = await self._client.get(
            url, self._token_for(project_urls, personal_access_token)
        )
        if response.is_not_found:
            return Success(WorkItemDetail(title=str(work_item_id), comment_count=0))
        if not response.is_success:
            return Failure.of(
                "Error while fetching work item details from Azure DevOps: "
                f"{describe_failure(response, testing)}"
            )

        fields = response.body.get("fields") if response.body else None
        if not isinstance(fields, dict):
            return Failure.of(
                "Unable to interpret work item details from Azure DevOps. "
                "`fields` element is missing."
            )

        try:
            title = fields.get("System.Title")
            comment_count = fields.get("System.CommentCount")
            detail = WorkItemDetail(
                title="" if title is None else str(title),
                comment_count=None if comment_count is None else _to_int(comment_count),
            )
        except (TypeError, ValueError):
            return Failure.of("Unable to interpret work item details from Azure DevOps.")
        return Success(detail)

    async def get_work_item_comments(
        self,
        project_urls: AdoProjectUrls,
        work_item_id: int,
        personal_access_token: SensitiveString | None = None,
    ) -> Result[list[str]]:
        """Fetch up to 200 comments of a work item as plain text.

        Comment bodies are HTML; they are converted to text, trimmed and
        blank comments are dropped.
        """
        url = (
            f"{project_urls.project_url}/_apis/wit/workitems/{work_item_id}"
            f"/comments?api-version={COMMENTS_API_VERSION}"
        )
        response = await self._client.get(
            url, self._token_for(project_urls, personal_access_token)
        )
        if response.is_not_found:
            return Success([])
        if not response.is_success:
            return Failure.of(
                "Error while fetching work item comments from Azure DevOps: "
                f"{describe_failure(response)}"
            )

        try:
            if response.body is None:
                raise ValueError("Response is not a JSON object")
            comments_html = [
                str(c["text"]) for c in response.body.get("comments") or [] if c.get("text") is not None
            ]
        except (AttributeError, KeyError, TypeError, ValueError):
            return Failure.of("Unable to interpret work item comments from Azure DevOps.")

        comments = [strip_html(html).strip() for html in comments_html]
        return Success([c for c in comments if c])

    async def get_project_list(
        self,
        ado_url: AdoUrl,
        personal_access_token: SensitiveString | None = None,
        testing: bool = False,
    ) -> Result[list[str]]:
        """Fetch the names of the projects in an organization."""
        url = f"{ado_url.organization_url}/_apis/projects?api-version={AZURE_DEVOPS_API_VERSION}"
        response = await self._client.get(url, self._token_for(ado_url, personal_access_token))
        if not response.is_success:
            return Failure.of(
                "Error while fetching project list from Azure DevOps: "
                f"{describe_failure(response, testing)}"
            )

        try:
            values = (response.body or {}).get("value") or []
            names = [str(p["name"]) for p in values if p.get("name") is not None]
        except (AttributeError, KeyError, TypeError):
            return Failure.of("Unable to interpret project list from Azure DevOps.")
        return Success(names)

    async def get_release_note(
        self,
        project_urls: AdoProjectUrls,
        work_item_id: int,
        comment_count: int | None = None,
        personal_access_token: SensitiveString | None = None,
    ) -> str | None:
        """Read the release note of a work item from its comments.

        No request is made when no prefix is configured or the work item
        has no comments. A failed comment fetch is logged and treated as
        "no release note".
        """
        prefix = self._settings.release_note_prefix
        if not prefix or not prefix.strip() or not comment_count:
            return None

        comments = await self.get_work_item_comments(
            project_urls, work_item_id, personal_access_token
        )
        if isinstance(comments, Failure):
            logger.warning(
                "Error retrieving Azure DevOps comments for work item %s. Error: %s",
                work_item_id,
                comments.error_string,
            )
            return None

        return extract_release_note(comments.value, prefix)

    async def get_work_item_link(
        self,
        project_urls: AdoProjectUrls,
        work_item_id: int,
        personal_access_token: SensitiveString | None = None,
    ) -> Result[WorkItemLink]:
        """Resolve one work item into a link.

        If the work item detail cannot be fetched the link is still
        produced, described by the work item id, and no comments are
        fetched.
        """
        detail_result = await self.get_work_item(
            project_urls, work_item_id, personal_access_token
        )
        detail: WorkItemDetail | None = None
        release_note: str | None = None
        if isinstance(detail_result, Failure):
            logger.warning(
                "Error retrieving Azure DevOps work item %s. Error: %s",
                work_item_id,
                detail_result.error_string,
            )
        else:
            detail = detail_result.value
            release_note = await self.get_release_note(
                project_urls, work_item_id, detail.comment_count, personal_access_token
            )

        return Success(assemble_work_item_link(project_urls, work_item_id, detail, release_note))

    async def get_build_work_item_links(
        self, build_urls: AdoBuildUrls, tenant_id: str | None = None
    ) -> Result[list[WorkItemLink]]:
        """Resolve all work items associated with a build into links.

        Work items are resolved concurrently, at most ``max_concurrency`` at
        a time; the links keep the order of the build's work item refs.
        Work items that fail to resolve are left out with a warning.

        Args:
            build_urls: The build
            tenant_id: Tenant whose overrides apply, if any

        Returns:
            Success with the links, or the Failure of the refs request

        Raises:
            ConfigurationError: If no token is configured for the build's
                organization
        """
        token = self._resolver.resolve(build_urls.organization_url, tenant_id)
        if token is None:
            raise ConfigurationError(
                "No Azure DevOps Personal Access Token is configured for "
                f"{build_urls.organization_url}. Check that the Azure DevOps base URL "
                "covers this organization."
            )

        refs = await self.get_build_work_items_refs(build_urls, token)
        if isinstance(refs, Failure):
            return refs

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def resolve(ref: WorkItemRef) -> Result[WorkItemLink]:
            async with semaphore:
                return await self.get_work_item_link(build_urls, ref.id, token)

        results: Sequence[Result[WorkItemLink]] = await asyncio.gather(
            *(resolve(ref) for ref in refs.value)
        )

        links: list[WorkItemLink] = []
        for ref, result in zip(refs.value, results):
            if isinstance(result, Failure):
                logger.warning(
                    "Skipping Azure DevOps work item %s. Error: %s", ref.id, result.error_string
                )
                continue
            links.append(result.value)
        return Success(links)


__all__ = [
    "COMMENTS_API_VERSION",
    "DEFAULT_MAX_CONCURRENCY",
    "MAX_CONCURRENCY",
    "MIN_CONCURRENCY",
    "AdoApiClient",
    "AdoClientSettings",
    "WorkItemRef",
]
