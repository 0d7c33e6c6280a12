#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

xml_tree.py

Small typed XML tree used for manifests and QTI documents.

Namespaces are dropped from tag and attribute names: Canvas, Moodle and
other exporters disagree on which IMS namespace version they declare, and
the package structure is the same either way.

SECURITY: Uses defusedxml to protect against XXE attacks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union
from xml.etree import ElementTree as ET

# SECURITY: Use defusedxml to protect against XXE attacks
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from canvasimscp.errors import Failure, FailureReason


def local_name(name: str) -> str:
    """'{http://...}resource' -> 'resource'"""
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name


@dataclass
class Element:
    """One XML element: tag, attributes, ordered children, raw text."""
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Element"] = field(default_factory=list)
    text: str = ""
    tail: str = ""

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def first_child(self, tag: str) -> Optional["Element"]:
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def children_named(self, tag: str) -> List["Element"]:
        return [child for child in self.children if child.tag == tag]

    def iter(self, tag: Optional[str] = None) -> Iterator["Element"]:
        """Depth-first walk in document order, including self."""
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            yield from child.iter(tag)

    def find(self, tag: str) -> Optional["Element"]:
        """First descendant (not self) with this tag."""
        for child in self.children:
            for elem in child.iter(tag):
                return elem
        return None

    def text_content(self) -> str:
        """All text inside this element, tags removed."""
        parts = [self.text]
        for child in self.children:
            parts.append(child.text_content())
            parts.append(child.tail)
        return "".join(parts)


def _convert(node: ET.Element, preserve_whitespace: bool) -> Element:
    text = node.text or ""
    tail = node.tail or ""
    if not preserve_whitespace:
        text = text.strip()
        tail = tail.strip()

    return Element(
        tag=local_name(node.tag),
        attributes={local_name(k): v for k, v in node.attrib.items()},
        children=[_convert(child, preserve_whitespace) for child in node],
        text=text,
        tail=tail,
    )


def parse_xml(
    data: Union[bytes, str],
    preserve_whitespace: bool = True,
    encoding: str = "UTF-8",
) -> Union[Element, Failure]:
    """
    Parse an XML document into an Element tree.

    Whitespace in text nodes is kept as-is by default; question text may
    carry markdown where indentation and line breaks matter.

    Returns:
        Root Element, or Failure(XML_FORMAT_ERROR) with the parser's message
    """
    if isinstance(data, str):
        data = data.encode(encoding)

    if not data or not data.strip():
        return Failure(FailureReason.XML_FORMAT_ERROR, "Empty XML document")

    try:
        parser = DefusedET.XMLParser(encoding=encoding)
        parser.feed(data)
        root = parser.close()
    except ET.ParseError as e:
        return Failure(FailureReason.XML_FORMAT_ERROR, str(e))
    except DefusedXmlException as e:
        return Failure(FailureReason.XML_FORMAT_ERROR, f"Forbidden XML construct: {e}")

    return _convert(root, preserve_whitespace)
