"""Work item links handed to the host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adolinks.integrations.urls import AdoProjectUrls

# Tags links so the host can tell trackers apart when merging them
WORK_ITEM_SOURCE = "Azure DevOps"


@dataclass(frozen=True)
class WorkItemDetail:
    """The parts of a work item needed to describe it.

    Attributes:
        title: ``System.Title``, empty when absent
        comment_count: ``System.CommentCount``; None when absent. Absent
            and zero both mean the comments are not fetched.
    """

    title: str
    comment_count: int | None = None


@dataclass(frozen=True)
class WorkItemLink:
    """A work item associated with a build.

    Attributes:
        id: Work item id as text
        link_url: Browser URL of the work item's edit page
        description: Release note, else title, else the id
        source: Always WORK_ITEM_SOURCE
    """

    id: str
    link_url: str
    description: str
    source: str = WORK_ITEM_SOURCE


def work_item_browser_url(project_urls: AdoProjectUrls, work_item_id: int) -> str:
    """Browser URL of a work item's edit page within its project."""
    return f"{project_urls.project_url}/_workitems?_a=edit&id={work_item_id}"


def assemble_work_item_link(
    project_urls: AdoProjectUrls,
    work_item_id: int,
    detail: WorkItemDetail | None,
    release_note: str | None,
) -> WorkItemLink:
    """Build the link for a work item.

    Args:
        project_urls: Project the work item belongs to
        work_item_id: Work item id
        detail: Fetched title/comment count, or None if the fetch failed
        release_note: Extracted release note, if any

    Returns:
        The link; the description falls back from release note to title
        to the id, skipping blank values
    """
    if release_note and release_note.strip():
        description = release_note
    elif detail is not None and detail.title and detail.title.strip():
        description = detail.title
    else:
        description = str(work_item_id)

    return WorkItemLink(
        id=str(work_item_id),
        link_url=work_item_browser_url(project_urls, work_item_id),
        description=description,
    )


__all__ = [
    "WORK_ITEM_SOURCE",
    "WorkItemDetail",
    "WorkItemLink",
    "assemble_work_item_link",
    "work_item_browser_url",
]
