"""Plain-text conversion of Azure DevOps rich-text fields.

Work item comments are stored as HTML fragments. Release notes are matched
against the visible text, so markup is dropped, entities are decoded and
block-level elements become line breaks.
"""

from __future__ import annotations

from html.parser import HTMLParser
from io import StringIO

# Elements whose boundaries read as a line break in the rendered comment
_BLOCK_TAGS = frozenset(
    {"br", "p", "div", "li", "ul", "ol", "tr", "table", "h1", "h2", "h3", "h4", "h5", "h6"}
)

# Elements whose content is never visible
_HIDDEN_TAGS = frozenset({"script", "style", "head", "title"})


class _HTMLStripper(HTMLParser):
    """HTML tag stripper for Azure DevOps comment bodies."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.text = StringIO()
        self._hidden_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _HIDDEN_TAGS:
            self._hidden_depth += 1
        elif tag in _BLOCK_TAGS:
            self._newline()

    def handle_endtag(self, tag: str) -> None:
        if tag in _HIDDEN_TAGS:
            self._hidden_depth = max(0, self._hidden_depth - 1)
        elif tag in _BLOCK_TAGS:
            self._newline()

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _BLOCK_TAGS:
            self._newline()

    def handle_data(self, data: str) -> None:
        if not self._hidden_depth:
            # &nbsp; decodes to U+00A0; comments treat it as an ordinary space
            self.text.write(data.replace("\xa0", " "))

    def _newline(self) -> None:
        value = self.text.getvalue()
        if value and not value.endswith("\n"):
            self.text.write("\n")

    def get_data(self) -> str:
        return self.text.getvalue()


def strip_html(html: str | None) -> str:
    """Convert an HTML fragment to plain text.

    Leading block tags do not produce blank lines, so a comment such as
    ``<div>= Changelog = text</div>`` still starts with its prefix.

    Args:
        html: HTML fragment, possibly plain text or empty

    Returns:
        The visible text, trimmed
    """
    if not html:
        return ""
    stripper = _HTMLStripper()
    stripper.feed(html)
    stripper.close()
    return stripper.get_data().strip()


__all__ = ["strip_html"]
