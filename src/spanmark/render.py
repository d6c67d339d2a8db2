"""
Interval rendering: formatting map + text -> nested markup string.

Spans of different tags may overlap arbitrarily; markup must nest. The sweep
keeps a stack of open tags. When a span has to close while spans of other
tags are open above it, those are closed too and then reopened right after
(or finalized, if they end at the same position).

Example, U=[3:7) and S=[4:11) over "texttexttex":

    tex<u>t<s>tex</s></u><s>ttex</s>
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from html import escape

from .config import get_config
from .spans import Span, check_normalized

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Opener:
    """A span waiting to be opened or currently open."""
    tag: str
    end: int
    attrs: dict[str, str]
    order: int  # discovery order, used as tie-break


def format_attrs(attrs: Mapping[str, str]) -> str:
    """Serialize attributes as space separated name="value" pairs (no escaping)."""
    return " ".join(f'{name}="{value}"' for name, value in attrs.items())


def open_tag(tag: str, attrs: Mapping[str, str]) -> str:
    if attrs:
        return f"<{tag} {format_attrs(attrs)}>"
    return f"<{tag}>"


def close_tag(tag: str) -> str:
    return f"</{tag}>"


def render(
    formatting: Mapping[str, list[Span]],
    text: str,
    leading_space_marker: str | None = None,
    check: bool | None = None,
) -> str:
    """
    Build minimal, properly nested markup for text formatted by spans.

    Args:
        formatting: Spans per tag name; each list must be normalized
        text: The literal text the spans index into
        leading_space_marker: Replacement for a leading space (config default)
        check: Validate span lists first (config default)

    Returns:
        Markup string

    Raises:
        NormalizationError: a span list overlaps, is unordered, has unmerged
            touching spans or runs past the end of text
    """
    cfg = get_config()
    if check is None:
        check = cfg.validation.check_normalized
    if leading_space_marker is None:
        leading_space_marker = cfg.render.leading_space_marker

    if check:
        for tag, spans in formatting.items():
            check_normalized(tag, spans, len(text))

    openers: dict[int, list[_Opener]] = {}
    order = 0
    for tag, spans in formatting.items():
        for span in spans:
            openers.setdefault(span.start, []).append(_Opener(tag, span.end, span.attrs, order))
            order += 1

    out: list[str] = []
    stack: list[_Opener] = []
    pending: dict[int, _Opener] = {}  # order -> open span, insertion ordered

    def close_due(i: int) -> None:
        for entry in [e for e in pending.values() if e.end == i]:
            if entry.order not in pending:
                continue  # finalized while closing an earlier one
            displaced: list[_Opener] = []
            while True:
                top = stack.pop()
                out.append(close_tag(top.tag))
                if top is entry:
                    del pending[entry.order]
                    break
                displaced.append(top)
            while displaced:
                top = displaced.pop()
                if top.end == i:
                    del pending[top.order]
                else:
                    stack.append(top)
                    out.append(open_tag(top.tag, top.attrs))

    escape_text = cfg.render.escape_text
    for i in range(len(text) + 1):
        # close before opening so a tag ending here never leaves an empty reopened pair
        close_due(i)

        if i in openers:
            for entry in sorted(openers[i], key=lambda e: (-e.end, e.order)):
                stack.append(entry)
                pending[entry.order] = entry
                out.append(open_tag(entry.tag, entry.attrs))
            # zero-length spans open and close on the spot
            close_due(i)

        if i < len(text):
            out.append(escape(text[i], quote=False) if escape_text else text[i])

    markup = "".join(out)
    if markup.startswith(" "):
        markup = leading_space_marker + markup[1:]

    logger.debug("Rendered %d spans over %d chars into %d chars of markup", order, len(text), len(markup))
    return markup
