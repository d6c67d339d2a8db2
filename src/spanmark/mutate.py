"""
Interval mutation: apply or remove one tag over a selected range.

The existing spans of the tag are walked left to right together with the
selection. At every boundary (a span or the selection starting or ending)
the attributes wanted from that position on are decided:

- inside the selection: the requested attributes, or nothing when removing
- otherwise inside an existing span: that span's own attributes
- otherwise: nothing

The span being built is closed whenever the wanted attributes change and a new
one is opened when something is wanted again. Runs with equal attributes are
therefore merged and the output stays normalized.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .config import get_config
from .spans import FormattingMap, SelectionRange, Span, attrs_equal, check_normalized

logger = logging.getLogger(__name__)


def apply_span(
    formatting: FormattingMap,
    selection: SelectionRange,
    tag: str,
    attrs: Mapping[str, str] | None = None,
    remove: bool = False,
    check: bool | None = None,
) -> list[Span]:
    """
    Format (or unformat) the selection with tag, rewriting formatting[tag].

    The selection always wins: inside it the requested attributes replace
    whatever the tag had, outside it existing spans are kept, split where the
    selection cuts them.

    Args:
        formatting: Spans per tag; only the entry for tag is touched
        selection: Range to format; an empty range changes nothing
        tag: Tag name to apply
        attrs: Attributes for the new span
        remove: Strip the tag from the range instead

    Returns:
        The new span list for tag

    Raises:
        NormalizationError: the existing list for tag is not normalized
    """
    if check is None:
        check = get_config().validation.check_normalized
    requested = dict(attrs or {})
    existing = formatting.get(tag)

    if selection.is_empty:
        logger.debug("Empty selection at %d, <%s> unchanged", selection.start, tag)
        return existing if existing is not None else []

    if check and existing:
        check_normalized(tag, existing)

    if not existing:
        if remove:
            return existing if existing is not None else []
        result = [Span(selection.start, selection.end, requested)]
    else:
        result = _sweep(existing, selection, requested, remove)

    formatting[tag] = result
    logger.debug(
        "%s <%s> over %d:%d: %d -> %d spans",
        "Removed" if remove else "Applied", tag, selection.start, selection.end,
        len(existing or []), len(result),
    )
    return result


def _sweep(
    occurrences: list[Span],
    selection: SelectionRange,
    requested: dict[str, str],
    remove: bool,
) -> list[Span]:
    boundaries = {selection.start, selection.end}
    for span in occurrences:
        boundaries.add(span.start)
        boundaries.add(span.end)

    result: list[Span] = []
    current: Span | None = None
    remaining = iter(occurrences)
    occ = next(remaining, None)

    for i in sorted(boundaries):
        while occ is not None and occ.end <= i:
            occ = next(remaining, None)

        if selection.start <= i < selection.end:
            wanted = None if remove else requested
        elif occ is not None and occ.start <= i:
            wanted = occ.attrs
        else:
            wanted = None

        if current is not None and (wanted is None or not attrs_equal(current.attrs, wanted)):
            current.end = i
            result.append(current)
            current = None
        if current is None and wanted is not None:
            current = Span(i, i, dict(wanted))

    # the last boundary lies past every span and the selection, so nothing is left open
    return result
