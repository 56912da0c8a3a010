"""Release note extraction from work item comments."""

from __future__ import annotations

import re
from collections.abc import Sequence


def extract_release_note(comments: Sequence[str | None], prefix: str | None) -> str | None:
    """Find the release note among a work item's comments.

    A release note is a comment whose plain text starts with ``prefix``
    (case-insensitive, matched literally). When several comments match,
    the last one in API order wins, so a later comment replaces an earlier
    note.

    Args:
        comments: Plain-text comments, oldest first
        prefix: Configured release note prefix, e.g. ``= Changelog =``

    Returns:
        The matching comment with the prefix removed and trimmed, or None
        when no prefix is configured or no comment matches
    """
    if not prefix or not prefix.strip():
        return None

    pattern = re.compile("^" + re.escape(prefix), re.IGNORECASE)
    for comment in reversed(comments):
        if comment and pattern.match(comment):
            return pattern.sub("", comment, count=1).strip()
    return None


__all__ = ["extract_release_note"]
