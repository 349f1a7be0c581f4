"""Generic element tree reader for registry documents.

The reader is a purely syntactic layer: it turns raw markup into a tree of
``ElementNode`` objects (tag, attributes, ordered children) and knows nothing
about what the tags mean.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field
from xml.sax.saxutils import escape, quoteattr


class DocumentParseError(Exception):
    """Raised when the input is not well-formed markup."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        """Initialize DocumentParseError.

        Args:
        ----
            message: Description of the structural problem.
            line: 1-based line of the error, if known.
            column: 0-based column of the error, if known.

        """
        self.line = line
        self.column = column
        super().__init__(message)


@dataclass(frozen=True)
class ElementNode:
    """A single element of the generic document tree."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: tuple[ElementNode | str, ...] = ()

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return an attribute value."""
        return self.attributes.get(name, default)

    @property
    def elements(self) -> tuple[ElementNode, ...]:
        """Child elements, without text runs."""
        return tuple(c for c in self.children if isinstance(c, ElementNode))

    @property
    def text(self) -> str:
        """Concatenated text of the whole subtree."""
        parts: list[str] = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text)
        return "".join(parts)

    def find(self, tag: str) -> ElementNode | None:
        """Return the first direct child element with the given tag."""
        for child in self.elements:
            if child.tag == tag:
                return child
        return None

    def findall(self, tag: str) -> list[ElementNode]:
        """Return all direct child elements with the given tag."""
        return [c for c in self.elements if c.tag == tag]

    def iter_elements(self) -> Iterator[ElementNode]:
        """Iterate over this element and all descendants, depth first."""
        yield self
        for child in self.elements:
            yield from child.iter_elements()

    def to_xml(self) -> str:
        """Serialize the subtree back to markup."""
        attrs = "".join(f" {k}={quoteattr(v)}" for k, v in self.attributes.items())
        if not self.children:
            return f"<{self.tag}{attrs}/>"
        inner = "".join(
            escape(c) if isinstance(c, str) else c.to_xml() for c in self.children
        )
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


def _is_formatting(text: str) -> bool:
    return not text.strip() and "\n" in text


def _convert(element: ET.Element) -> ElementNode:
    raw: list[ElementNode | str] = []
    if element.text:
        raw.append(element.text)
    for child in element:
        raw.append(_convert(child))
        if child.tail:
            raw.append(child.tail)

    # Indentation between elements is dropped; text in mixed content is kept verbatim.
    has_content_text = any(isinstance(c, str) and c.strip() for c in raw)
    if has_content_text:
        children = tuple(raw)
    else:
        children = tuple(c for c in raw if not (isinstance(c, str) and _is_formatting(c)))

    return ElementNode(tag=element.tag, attributes=dict(element.attrib), children=children)


def read_document(data: bytes | str) -> ElementNode:
    """Parse a registry document into an element tree.

    Args:
    ----
        data: The complete document, as bytes or text.

    Returns:
    -------
        The root element of the document.

    Raises:
    ------
        DocumentParseError: If the markup is malformed.

    """
    if isinstance(data, str):
        # expat is always fed UTF-8 bytes
        data = data.encode("utf-8")

    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        line, column = getattr(e, "position", (None, None))
        raise DocumentParseError(str(e), line, column) from e

    return _convert(root)
