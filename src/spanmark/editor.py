"""
RichText - a formatted fragment plus its selection.

Ties the core together for a host: read the tree into spans, change one tag
over the selection, render new markup, install it and put the selection back.
Installing the content and restoring the selection happen together, after
rendering and parsing have succeeded, so the tree is never left half updated.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .config import get_config
from .dom import Element, text_content
from .extract import extract
from .formats import html as _html  # noqa: F401 - ensure html format is registered
from .formats import xml as _xml  # noqa: F401 - ensure xml format is registered
from .formats.base import FormatStrategy, registry
from .mutate import apply_span
from .positions import enclosing_elements
from .render import render
from .selection import SelectionPort, TreeSelection
from .spans import FormattingMap, SelectionRange, Span

logger = logging.getLogger(__name__)


def get_format(name: str | None = None) -> FormatStrategy:
    """Look up a markup format by name, defaulting to the configured one."""
    name = name or get_config().markup.default_format
    strategy = registry.get_by_name(name)
    if strategy is None:
        raise ValueError(f"Unknown markup format: {name}")
    return strategy


class RichText:
    """A formatted text fragment owned by a host."""

    def __init__(
        self,
        root: Element,
        selection: SelectionPort | None = None,
        markup_format: str | FormatStrategy | None = None,
    ):
        self.root = root
        self.format = markup_format if isinstance(markup_format, FormatStrategy) else get_format(markup_format)
        self.selection = selection if selection is not None else TreeSelection(root)

    @classmethod
    def from_markup(
        cls,
        markup: str,
        selection: SelectionPort | None = None,
        markup_format: str | FormatStrategy | None = None,
    ) -> RichText:
        strategy = markup_format if isinstance(markup_format, FormatStrategy) else get_format(markup_format)
        return cls(strategy.parse(markup), selection=selection, markup_format=strategy)

    def text(self) -> str:
        return text_content(self.root)

    def formatting(self) -> FormattingMap:
        return extract(self.root)

    def markup(self) -> str:
        return self.format.serialize(self.root)

    def set_formatting(self, formatting: Mapping[str, list[Span]], text: str | None = None) -> RichText:
        """Replace the content with text (default: current text) formatted by spans."""
        if text is None:
            text = self.text()
        self._install(render(formatting, text, leading_space_marker=self.format.leading_space_marker))
        return self

    def _install(self, markup: str) -> None:
        fresh = self.format.parse(markup)
        # keep the root object so ports holding it stay valid
        self.root.children = fresh.children

    def text_selection(self) -> SelectionRange | None:
        return self.selection.capture_selection()

    def select(self, start: int, length: int) -> RichText:
        self.selection.apply_selection(SelectionRange.from_length(start, length))
        return self

    def selected_elements(self, selection: SelectionRange | None = None) -> list[Element]:
        """Elements that completely contain the selection, outermost first."""
        if selection is None:
            selection = self.text_selection()
        if selection is None:
            return []
        return enclosing_elements(self.root, selection.start, selection.end)

    def apply_tag(
        self,
        tag: str,
        attrs: Mapping[str, str] | None = None,
        remove: bool = False,
        selection: SelectionRange | None = None,
    ) -> SelectionRange | None:
        """
        Wrap the selection in tag (or strip tag from it) and re-render.

        Returns the selection that was acted on, or None when there was no
        selection to act on (nothing changes in that case).
        """
        if selection is None:
            selection = self.text_selection()
        if selection is None:
            logger.debug("No selection captured, <%s> not applied", tag)
            return None

        text = self.text()
        if selection.end > len(text):
            raise ValueError(f"Selection {selection.start}:{selection.end} outside text of length {len(text)}")

        tag = self.format.normalize_tag(tag)
        formatting = self.formatting()
        apply_span(formatting, selection, tag, attrs, remove)
        markup = render(formatting, text, leading_space_marker=self.format.leading_space_marker)

        self._install(markup)
        new_length = min(selection.length, len(self.text()) - selection.start)
        self.selection.apply_selection(SelectionRange.from_length(selection.start, new_length))
        return selection
