"""
Formatting spans and the formatting map.

A span is one occurrence of a tag over the half-open character range
[start, end) with a fixed attribute set. A formatting map groups the spans
of every tag name.

Key invariants for a normalized span list (one tag name):
- spans are ordered by start and never overlap
- touching spans always differ in attributes (equal ones are merged)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass
class Span:
    """A formatting interval. ``end`` stays mutable while extraction is in progress."""
    start: int
    end: int
    attrs: dict[str, str] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return self.end - self.start


FormattingMap = dict[str, list[Span]]


@dataclass(frozen=True)
class SelectionRange:
    """A selected range in flat offsets."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f"Selection start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"Selection end must be >= start, got {self.start}:{self.end}")

    @classmethod
    def from_length(cls, start: int, length: int) -> SelectionRange:
        return cls(start, start + length)

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class NormalizationError(ValueError):
    """A span list breaks the ordering, overlap or merge invariant."""

    def __init__(self, tag: str, message: str):
        super().__init__(f"<{tag}> spans are not normalized: {message}")
        self.tag = tag


def attrs_equal(a: Mapping[str, str], b: Mapping[str, str]) -> bool:
    """Exact attribute match: same keys, same values, order ignored."""
    if a.keys() != b.keys():
        return False
    return all(a[key] == b[key] for key in a)


def check_normalized(tag: str, spans: list[Span], text_length: int | None = None) -> None:
    """Raise NormalizationError unless spans form a normalized list."""
    prev: Span | None = None
    for span in spans:
        if span.start < 0 or span.end < span.start:
            raise NormalizationError(tag, f"invalid span {span.start}:{span.end}")
        if text_length is not None and span.end > text_length:
            raise NormalizationError(
                tag, f"span {span.start}:{span.end} extends past end of text ({text_length})"
            )
        if prev is not None:
            if span.start < prev.end:
                raise NormalizationError(
                    tag, f"span {span.start}:{span.end} overlaps {prev.start}:{prev.end}"
                )
            if span.start == prev.end and attrs_equal(span.attrs, prev.attrs):
                raise NormalizationError(
                    tag, f"touching spans at {span.start} have equal attributes"
                )
        prev = span


def formatting_to_dict(formatting: Mapping[str, list[Span]]) -> dict[str, list[dict]]:
    """JSON-ready form: {tag: [{"start", "end", "attrs"}]}."""
    return {
        tag: [{"start": s.start, "end": s.end, "attrs": dict(s.attrs)} for s in spans]
        for tag, spans in formatting.items()
    }


def formatting_from_dict(data: Mapping) -> FormattingMap:
    """Inverse of formatting_to_dict. Raises ValueError on malformed input."""
    if not isinstance(data, Mapping):
        raise ValueError(f"Formatting must be an object, got {type(data).__name__}")

    result: FormattingMap = {}
    for tag, entries in data.items():
        if not isinstance(entries, list):
            raise ValueError(f"Spans for <{tag}> must be a list")
        spans = []
        for entry in entries:
            try:
                start = int(entry["start"])
                end = int(entry["end"])
                attrs = {str(k): str(v) for k, v in dict(entry.get("attrs") or {}).items()}
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Malformed span for <{tag}>: {entry!r}") from e
            spans.append(Span(start, end, attrs))
        result[str(tag)] = spans
    return result
