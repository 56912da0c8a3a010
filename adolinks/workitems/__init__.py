"""Work item link assembly for adolinks.

This package contains:
- links: The WorkItemDetail and WorkItemLink entities and link assembly
- release_notes: Release note extraction from comments
- mapper: Host entry point turning build information into links

``mapper`` depends on the API client, which depends on ``links``; import it
as ``adolinks.workitems.mapper``.
"""

from adolinks.workitems.links import (
    WORK_ITEM_SOURCE,
    WorkItemDetail,
    WorkItemLink,
    assemble_work_item_link,
    work_item_browser_url,
)
from adolinks.workitems.release_notes import extract_release_note

__all__ = [
    "WORK_ITEM_SOURCE",
    "WorkItemDetail",
    "WorkItemLink",
    "assemble_work_item_link",
    "extract_release_note",
    "work_item_browser_url",
]
