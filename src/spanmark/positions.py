"""
Position mapping between tree positions and flat character offsets.

A tree position is a boundary in the style of a DOM range: inside a Text node
the offset counts characters, inside an Element it counts children. Flat
offsets count only text, in the same document order the extractor uses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .dom import Element, Node, Text, text_nodes


@dataclass(frozen=True, eq=False)
class TreePosition:
    """A boundary point inside the tree."""
    node: Node
    offset: int

    def __eq__(self, other):
        if not isinstance(other, TreePosition):
            return NotImplemented
        return self.node is other.node and self.offset == other.offset

    def __hash__(self):
        return hash((id(self.node), self.offset))


@dataclass(frozen=True)
class TreeRange:
    """A pair of boundary points."""
    start: TreePosition
    end: TreePosition


class PositionMapper(ABC):
    """Converts between tree positions and flat offsets."""

    @abstractmethod
    def offset_of(self, position: TreePosition) -> int:
        """Flat offset of a tree position."""
        ...

    @abstractmethod
    def range_of(self, start: int, length: int) -> TreeRange:
        """Tree range covering length characters from start."""
        ...


class TreePositionMapper(PositionMapper):
    """Position mapper over a spanmark.dom tree."""

    def __init__(self, root: Element):
        self.root = root

    def offset_of(self, position: TreePosition) -> int:
        found, offset = self._locate(self.root, position, 0)
        if not found:
            raise ValueError("Position is outside the mapped tree")
        return offset

    def _locate(self, node: Node, position: TreePosition, cursor: int) -> tuple[bool, int]:
        if node is position.node:
            if isinstance(node, Text):
                if not 0 <= position.offset <= len(node.content):
                    raise ValueError(f"Offset {position.offset} out of range for text node")
                return True, cursor + position.offset
            if not 0 <= position.offset <= len(node.children):
                raise ValueError(f"Child index {position.offset} out of range for <{node.tag}>")
            return True, cursor + sum(c.text_length for c in node.children[:position.offset])

        if isinstance(node, Text):
            return False, cursor + len(node.content)

        for child in node.children:
            found, cursor = self._locate(child, position, cursor)
            if found:
                return True, cursor
        return False, cursor

    def range_of(self, start: int, length: int) -> TreeRange:
        total = self.root.text_length
        if start < 0 or length < 0 or start + length > total:
            raise ValueError(f"Range {start}+{length} outside text of length {total}")
        return TreeRange(self._boundary(start), self._boundary(start + length))

    def _boundary(self, offset: int) -> TreePosition:
        # Between two text nodes the boundary sits at the end of the earlier one
        for node, node_start in text_nodes(self.root):
            if offset <= node_start + len(node.content):
                return TreePosition(node, offset - node_start)
        return TreePosition(self.root, len(self.root.children))


def enclosing_elements(root: Element, start: int, end: int) -> list[Element]:
    """
    Elements whose text fully contains [start, end), outermost first.

    Root itself is not included.
    """
    found: list[Element] = []

    def walk(parent: Element, cursor: int) -> None:
        for child in parent.children:
            length = child.text_length
            if isinstance(child, Element):
                if cursor <= start and cursor + length >= end:
                    found.append(child)
                walk(child, cursor)
            cursor += length

    walk(root, 0)
    return found
