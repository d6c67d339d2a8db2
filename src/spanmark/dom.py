"""
DOM - Document tree for Spanmark

Ordered tree of Text and Element nodes. Text nodes carry the characters of the
flat offset space; elements carry a tag name and attributes and contribute zero
length. The host owns the tree; the core only reads it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass
class Text:
    """A run of literal characters."""
    content: str = ""

    @property
    def text_length(self) -> int:
        return len(self.content)


@dataclass
class Element:
    """A tagged node with attributes and owned children."""
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    @property
    def text_length(self) -> int:
        """Number of characters under this element."""
        return sum(child.text_length for child in self.children)

    def depth_first(self) -> Iterator[Node]:
        """Traverse tree depth-first, yielding self then children."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.depth_first()
            else:
                yield child

    def add_child(self, child: Node) -> Node:
        """Add a child node and return it for chaining."""
        self.children.append(child)
        return child


Node = Text | Element


def text_content(node: Node) -> str:
    """Concatenate all text in document order."""
    if isinstance(node, Text):
        return node.content
    return "".join(child.content for child in node.depth_first() if isinstance(child, Text))


def text_nodes(root: Element) -> Iterator[tuple[Text, int]]:
    """Yield (text node, flat offset of its first character) in document order."""
    offset = 0
    for node in root.depth_first():
        if isinstance(node, Text):
            yield node, offset
            offset += len(node.content)


def contains(root: Element, target: Node) -> bool:
    """True if target is root or lives anywhere below it."""
    return any(node is target for node in root.depth_first())
