"""
Interval extraction: document tree -> formatting map.

Walks the tree depth-first keeping a character cursor and, per tag name, the
stack of elements currently open. Every text run is credited to each open tag
with the attributes of its innermost open element, so a nested element with
different attributes splits the enclosing span instead of overlapping it.
A run that touches the previous span of its tag with identical attributes
extends that span, so same-attribute runs come out merged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .dom import Element, Text
from .spans import FormattingMap, Span, attrs_equal

logger = logging.getLogger(__name__)


def extract(root: Element) -> FormattingMap:
    """Collect the spans of every element below root."""
    result: FormattingMap = {}
    cursor = _walk(root, result, {}, 0)
    logger.debug(
        "Extracted %d spans across %d tags from %d chars",
        sum(len(spans) for spans in result.values()), len(result), cursor,
    )
    return result


def _walk(
    parent: Element,
    result: FormattingMap,
    open_elements: dict[str, list[Element]],
    cursor: int,
) -> int:
    for node in parent.children:
        if isinstance(node, Text):
            end = cursor + len(node.content)
            if end > cursor:
                for tag, stack in open_elements.items():
                    if stack:
                        _mark(result[tag], stack[-1].attrs, cursor, end)
            cursor = end
            continue

        start = cursor
        result.setdefault(node.tag, [])
        stack = open_elements.setdefault(node.tag, [])
        stack.append(node)
        cursor = _walk(node, result, open_elements, cursor)
        stack.pop()

        # an empty element still marks its position unless an enclosing one covers it
        if cursor == start and not stack:
            _mark(result[node.tag], node.attrs, start, start)
    return cursor


def _mark(spans: list[Span], attrs: Mapping[str, str], start: int, end: int) -> None:
    prev = spans[-1] if spans else None
    if prev is not None and prev.end == start and attrs_equal(prev.attrs, attrs):
        prev.end = end
    else:
        spans.append(Span(start, end, dict(attrs)))
