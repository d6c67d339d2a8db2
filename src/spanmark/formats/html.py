"""
HTML fragment format.

Parses inline HTML such as ``a <b>bold</b> <a href="x">link</a>`` with the
standard library tokenizer. Whitespace is kept exactly, character references
are decoded and tag names are lower-cased. Stray end tags are ignored;
unclosed elements are closed at the end of input.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser

from ..dom import Element, Text
from .base import FormatStrategy, registry

# Elements that never have content
VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}

TAG_PATTERN = re.compile(r"</?[a-zA-Z][\w-]*(\s[^<>]*)?/?>")


class _TreeBuilder(HTMLParser):
    """Builds a spanmark.dom tree from parser callbacks."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Element("div")
        self.stack: list[Element] = [self.root]

    def handle_starttag(self, tag, attrs):
        element = Element(tag, {name: value or "" for name, value in attrs})
        self.stack[-1].add_child(element)
        if tag not in VOID_TAGS:
            self.stack.append(element)

    def handle_startendtag(self, tag, attrs):
        self.stack[-1].add_child(Element(tag, {name: value or "" for name, value in attrs}))

    def handle_endtag(self, tag):
        # Pop until we find the matching tag; ignore end tags with no opener
        for depth in range(len(self.stack) - 1, 0, -1):
            if self.stack[depth].tag == tag:
                del self.stack[depth:]
                return

    def handle_data(self, data):
        parent = self.stack[-1]
        if parent.children and isinstance(parent.children[-1], Text):
            parent.children[-1].content += data
        else:
            parent.add_child(Text(data))


class HTMLStrategy(FormatStrategy):
    """Inline HTML fragments."""

    @property
    def name(self) -> str:
        return "html"

    @property
    def extensions(self) -> list[str]:
        return [".html", ".htm", ".xhtml"]

    def detect(self, content: str) -> bool:
        if content.lstrip().startswith("<?xml"):
            return False
        return bool(TAG_PATTERN.search(content))

    def normalize_tag(self, tag: str) -> str:
        return tag.lower()

    def parse(self, content: str) -> Element:
        builder = _TreeBuilder()
        builder.feed(content)
        builder.close()
        return builder.root


registry.register(HTMLStrategy())
