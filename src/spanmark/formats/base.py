"""
Base markup format interface and registry.

Each format strategy turns a markup fragment into a document tree and back.
The registry manages format detection and selection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from html import escape

from ..config import get_config
from ..dom import Element, Node, Text
from ..render import open_tag


class MarkupError(ValueError):
    """Markup that the format cannot parse."""


class FormatStrategy(ABC):
    """Base class for markup format handlers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name."""
        ...

    @property
    @abstractmethod
    def extensions(self) -> list[str]:
        """File extensions this format handles (e.g., ['.html', '.htm'])."""
        ...

    @property
    def leading_space_marker(self) -> str:
        """What the renderer puts in place of a leading space."""
        return get_config().render.leading_space_marker

    def detect(self, content: str) -> bool:
        """
        Magic detection: returns True if content looks like this format.
        Default implementation returns False (rely on extension only).
        """
        return False

    def normalize_tag(self, tag: str) -> str:
        """Canonical spelling of a tag name in this format."""
        return tag

    @abstractmethod
    def parse(self, content: str) -> Element:
        """
        Parse a markup fragment into a tree.
        Returns a container element whose children are the fragment's nodes.
        """
        ...

    def serialize(self, root: Element) -> str:
        """
        Serialize the children of root back to markup.

        Default implementation: escaped text, attributes as written by the renderer.
        """
        return "".join(self._serialize_node(child) for child in root.children)

    def _serialize_node(self, node: Node) -> str:
        if isinstance(node, Text):
            return escape(node.content, quote=False)
        inner = "".join(self._serialize_node(child) for child in node.children)
        return f"{open_tag(node.tag, node.attrs)}{inner}</{node.tag}>"


@dataclass
class FormatMatch:
    """Result of format detection."""
    strategy: FormatStrategy
    confidence: float  # 0.0 to 1.0


class FormatRegistry:
    """Registry of format strategies with detection and selection."""

    def __init__(self):
        self._strategies: list[FormatStrategy] = []
        self._by_extension: dict[str, FormatStrategy] = {}
        self._by_name: dict[str, FormatStrategy] = {}

    def register(self, strategy: FormatStrategy) -> None:
        """Register a format strategy."""
        self._strategies.append(strategy)
        self._by_name[strategy.name] = strategy
        for ext in strategy.extensions:
            # First registered wins for extension conflicts
            if ext not in self._by_extension:
                self._by_extension[ext] = strategy

    def get_by_name(self, name: str) -> FormatStrategy | None:
        """Get strategy by name (for --type override)."""
        return self._by_name.get(name)

    def get_by_extension(self, ext: str) -> FormatStrategy | None:
        """Get strategy by file extension."""
        # Normalize extension
        if not ext.startswith('.'):
            ext = '.' + ext
        return self._by_extension.get(ext.lower())

    def detect(self, content: str, filename: str | None = None) -> FormatMatch | None:
        """
        Detect the best format for content.

        Priority:
        1. Extension match (high confidence)
        2. Magic detection (medium confidence)
        """
        if filename:
            ext = self._get_extension(filename)
            if ext and ext in self._by_extension:
                return FormatMatch(
                    strategy=self._by_extension[ext],
                    confidence=1.0
                )

        for strategy in self._strategies:
            if strategy.detect(content):
                return FormatMatch(
                    strategy=strategy,
                    confidence=0.8
                )

        # Return None to let caller decide fallback
        return None

    def _get_extension(self, filename: str) -> str | None:
        """Extract lowercase extension from filename."""
        if '.' in filename:
            return '.' + filename.rsplit('.', 1)[-1].lower()
        return None


# Global registry instance
registry = FormatRegistry()
