"""
XML fragment format.

Inline XML markup such as DITA paragraph content (``<b>``, ``<i>``, ``<u>``,
``<xref href="...">``). Parsed with lxml; tag case is preserved and namespace
prefixes are dropped to the local name. Comments and processing instructions
are skipped but their tail text is kept.
"""

from __future__ import annotations

from lxml import etree as ET  # type: ignore

from ..dom import Element, Text
from .base import FormatStrategy, MarkupError, registry

# Container the fragment is wrapped in for parsing
WRAPPER = "spanmark-fragment"


class XMLStrategy(FormatStrategy):
    """Well-formed inline XML fragments."""

    @property
    def name(self) -> str:
        return "xml"

    @property
    def extensions(self) -> list[str]:
        return [".xml", ".dita"]

    @property
    def leading_space_marker(self) -> str:
        # XML has no &nbsp; entity
        return "&#160;"

    def detect(self, content: str) -> bool:
        return content.lstrip().startswith("<?xml")

    def parse(self, content: str) -> Element:
        if content.lstrip().startswith("<?xml"):
            content = content.split("?>", 1)[1]
        parser = ET.XMLParser(resolve_entities=False, remove_blank_text=False)
        try:
            wrapper = ET.fromstring(f"<{WRAPPER}>{content}</{WRAPPER}>", parser)
        except ET.XMLSyntaxError as e:
            raise MarkupError(f"Invalid XML fragment: {e}") from e

        root = Element("div")
        _convert_children(wrapper, root)
        return root

    def serialize(self, root: Element) -> str:
        wrapper = ET.Element(WRAPPER)
        _build_children(root, wrapper)
        markup = ET.tostring(wrapper, encoding="unicode")
        # strip the wrapper tags (an empty wrapper serializes as <spanmark-fragment/>)
        if markup.endswith("/>"):
            return ""
        return markup[len(WRAPPER) + 2:-(len(WRAPPER) + 3)]


def _append_text(parent: Element, text: str | None) -> None:
    if not text:
        return
    if parent.children and isinstance(parent.children[-1], Text):
        parent.children[-1].content += text
    else:
        parent.add_child(Text(text))


def _convert_children(source, target: Element) -> None:
    _append_text(target, source.text)
    for child in source:
        if isinstance(child.tag, str):
            element = Element(ET.QName(child).localname, {
                ET.QName(name).localname: value for name, value in child.attrib.items()
            })
            target.add_child(element)
            _convert_children(child, element)
        _append_text(target, child.tail)


def _build_children(source: Element, target) -> None:
    last = None
    for node in source.children:
        if isinstance(node, Text):
            if last is None:
                target.text = (target.text or "") + node.content
            else:
                last.tail = (last.tail or "") + node.content
            continue
        last = ET.SubElement(target, node.tag, dict(node.attrs))
        _build_children(node, last)


registry.register(XMLStrategy())
