"""
Typed markup tree for structure-preserving translation.

HTML is parsed with BeautifulSoup and converted into a small tree of
Element / Text / Comment / Raw nodes. Translatable content is collected
as slots (text nodes and whitelisted attributes) in document order, the
slots are written in place, and the tree is serialized back by
``emit``. Only slot contents change; tags, untouched attributes and
nesting come out exactly as the emitter wrote them before.

Elements like <script> and <pre> are opaque: their contents are kept as
one Raw node and never visited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Comment as SoupComment
from bs4.element import Doctype, NavigableString, PageElement, PreformattedString, Tag

from subme.errors import MarkupParseError

OPAQUE_TAGS = frozenset({"script", "style", "noscript", "pre", "textarea"})

# Whitespace-only text is kept verbatim everywhere, not just inside <pre>.
PRESERVE_WHITESPACE_TAGS = frozenset({"[document]", "pre", "textarea"})


# =============================================================================
# Nodes
# =============================================================================


@dataclass
class Text:
    text: str


@dataclass
class Comment:
    text: str


@dataclass
class Raw:
    """Markup emitted verbatim (doctype, CDATA, opaque element bodies)."""

    markup: str


@dataclass
class Element:
    tag: str
    attrs: list[tuple[str, str]] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    void: bool = False
    opaque: bool = False

    def get_attribute(self, name: str) -> str | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    def set_attribute(self, name: str, value: str) -> None:
        for i, (key, _) in enumerate(self.attrs):
            if key == name:
                self.attrs[i] = (key, value)
                return
        self.attrs.append((name, value))


Node = Union[Element, Text, Comment, Raw]


@dataclass
class Document:
    """Root of a parsed fragment or document."""

    children: list[Node] = field(default_factory=list)


# =============================================================================
# Parsing
# =============================================================================


def _convert(node: PageElement) -> Node:
    if isinstance(node, Tag):
        attrs = []
        for key, value in node.attrs.items():
            if isinstance(value, list):
                value = " ".join(value)
            attrs.append((key, "" if value is None else str(value)))

        tag = node.name
        if tag.lower() in OPAQUE_TAGS:
            body = node.decode_contents()
            return Element(tag=tag, attrs=attrs, children=[Raw(body)] if body else [], opaque=True)

        return Element(
            tag=tag,
            attrs=attrs,
            children=[_convert(child) for child in node.children],
            void=node.is_empty_element,
        )

    if isinstance(node, SoupComment):
        return Comment(str(node))
    if isinstance(node, Doctype):
        return Raw(f"{Doctype.PREFIX}{node}>")
    if isinstance(node, PreformattedString):
        return Raw(node.output_ready(formatter=None))
    if isinstance(node, NavigableString):
        return Text(str(node))

    raise MarkupParseError(f"Unsupported node type: {type(node).__name__}")


def parse_markup(markup: str) -> Document:
    """Parse HTML into a typed tree. Raises MarkupParseError."""
    if not isinstance(markup, str):
        raise MarkupParseError(f"Expected markup string, got {type(markup).__name__}")

    try:
        soup = BeautifulSoup(
            markup,
            "html.parser",
            multi_valued_attributes=None,
            preserve_whitespace_tags=PRESERVE_WHITESPACE_TAGS,
        )
    except (ParserRejectedMarkup, AssertionError) as e:
        raise MarkupParseError(f"Could not parse markup: {e}") from e

    return Document(children=[_convert(child) for child in soup.children])


# =============================================================================
# Emitting
# =============================================================================


def _escape_text(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attribute(value: str) -> str:
    return _escape_text(value).replace('"', "&quot;")


class MarkupEmitter:
    """Serializes a Document back to an HTML string."""

    def emit(self, document: Document) -> str:
        parts: list[str] = []
        for node in document.children:
            self._emit_node(node, parts)
        return "".join(parts)

    def _emit_node(self, node: Node, parts: list[str]) -> None:
        if isinstance(node, Text):
            parts.append(_escape_text(node.text))
        elif isinstance(node, Comment):
            parts.append(f"<!--{node.text}-->")
        elif isinstance(node, Raw):
            parts.append(node.markup)
        else:
            self._emit_element(node, parts)

    def _emit_element(self, element: Element, parts: list[str]) -> None:
        attrs = "".join(f' {key}="{_escape_attribute(value)}"' for key, value in element.attrs)
        if element.void:
            parts.append(f"<{element.tag}{attrs}/>")
            return

        parts.append(f"<{element.tag}{attrs}>")
        for child in element.children:
            self._emit_node(child, parts)
        parts.append(f"</{element.tag}>")


def emit(document: Document) -> str:
    return MarkupEmitter().emit(document)


# =============================================================================
# Translatable slots
# =============================================================================


@dataclass
class TextSlot:
    """A text node to translate. Surrounding whitespace is kept on write."""

    node: Text
    path: tuple[int, ...]

    @property
    def text(self) -> str:
        return self.node.text.strip()

    def write(self, value: str) -> None:
        original = self.node.text
        leading = original[: len(original) - len(original.lstrip())]
        trailing = original[len(original.rstrip()):]
        self.node.text = f"{leading}{value}{trailing}"


@dataclass
class AttributeSlot:
    """One whitelisted attribute of one element."""

    element: Element
    name: str
    path: tuple[int, ...]

    @property
    def text(self) -> str:
        return self.element.get_attribute(self.name) or ""

    def write(self, value: str) -> None:
        self.element.set_attribute(self.name, value)


Slot = Union[TextSlot, AttributeSlot]


class SlotCollector:
    """
    Depth-first visitor that records translatable slots.

    Text slots come first in document order, then attribute slots
    element by element, attributes in whitelist order.
    """

    def __init__(self, attributes: list[str] | None = None):
        self.attributes = list(attributes or [])

    def collect(self, document: Document) -> list[Slot]:
        text_slots: list[Slot] = []
        attribute_slots: list[Slot] = []
        self._visit(document.children, (), text_slots, attribute_slots)
        return text_slots + attribute_slots

    def _visit(
        self,
        nodes: list[Node],
        path: tuple[int, ...],
        text_slots: list[Slot],
        attribute_slots: list[Slot],
    ) -> None:
        for i, node in enumerate(nodes):
            node_path = path + (i,)
            if isinstance(node, Text):
                if node.text.strip():
                    text_slots.append(TextSlot(node=node, path=node_path))
            elif isinstance(node, Element):
                for name in self.attributes:
                    if node.get_attribute(name):
                        attribute_slots.append(AttributeSlot(element=node, name=name, path=node_path))
                if not node.opaque:
                    self._visit(node.children, node_path, text_slots, attribute_slots)
