"""
Selection ports: where the active selection lives.

The core never reaches for a global selection. Callers hand it a port that
can report the selection as flat offsets and move it after re-rendering.
A port that cannot tell (nothing selected, selection outside the managed
tree) reports None and the caller does nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .dom import Element, contains
from .positions import PositionMapper, TreePositionMapper, TreeRange
from .spans import SelectionRange


class SelectionPort(ABC):
    """Reads and writes the active selection as flat offsets."""

    @abstractmethod
    def capture_selection(self) -> SelectionRange | None:
        """Current selection, or None if there is none to act on."""
        ...

    @abstractmethod
    def apply_selection(self, selection: SelectionRange) -> None:
        """Move the active selection."""
        ...


class StaticSelection(SelectionPort):
    """Selection stored directly as offsets."""

    def __init__(self, selection: SelectionRange | None = None):
        self.selection = selection

    def capture_selection(self) -> SelectionRange | None:
        return self.selection

    def apply_selection(self, selection: SelectionRange) -> None:
        self.selection = selection


class TreeSelection(SelectionPort):
    """
    Selection stored as tree boundaries, like a browser range.

    The boundaries refer to nodes, so after the tree is rebuilt they go stale
    until apply_selection() maps the offsets onto the new nodes. The root
    element itself stays the same object across rebuilds.
    """

    def __init__(self, root: Element, mapper: PositionMapper | None = None):
        self.root = root
        self.mapper = mapper or TreePositionMapper(root)
        self.range: TreeRange | None = None

    def capture_selection(self) -> SelectionRange | None:
        if self.range is None:
            return None
        # Don't capture a selection that leaves the managed tree
        if not (contains(self.root, self.range.start.node) and contains(self.root, self.range.end.node)):
            return None
        start = self.mapper.offset_of(self.range.start)
        end = self.mapper.offset_of(self.range.end)
        # a backwards selection (focus before anchor) is the same range
        return SelectionRange(min(start, end), max(start, end))

    def apply_selection(self, selection: SelectionRange) -> None:
        self.range = self.mapper.range_of(selection.start, selection.length)

    def select(self, tree_range: TreeRange | None) -> None:
        """Set the selection from tree boundaries (e.g. from a UI event)."""
        self.range = tree_range
