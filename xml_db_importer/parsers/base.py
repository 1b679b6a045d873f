"""
Base utilities for XML parsing.

Provides:
- XML sanitization for exports containing control characters
- Decoding raw documents by their declared encoding
- Direct-text extraction from elements
- Local tag names without namespaces
"""
from __future__ import annotations
import codecs
import re
from lxml import etree

DECLARED_ENCODING_RE = re.compile(rb"""^\s*<\?xml[^>]*?encoding\s*=\s*['"]([A-Za-z0-9._-]+)['"]""")
XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")


def sanitize_xml(xml_text: str) -> str:
    """
    Remove invalid XML characters and fix stray ampersands.

    Some exporters emit control characters or references to them
    (``&#4;``) which are not legal XML 1.0. This cleans those up so
    the document can be parsed.
    """
    if not xml_text:
        return xml_text

    # Numeric references to control chars, except tab, newline, CR
    xml_text = re.sub(r"&#([0-8]|1[0-2]|1[4-9]|2[0-9]|3[01]);", "", xml_text)
    xml_text = re.sub(r"&#x0*([0-8bBcCeEfF]|1[0-9a-fA-F]);", "", xml_text)

    # XML 1.0 only allows #x9 | #xA | #xD | [#x20-#xD7FF] | [#xE000-#xFFFD] | [#x10000-#x10FFFF]
    xml_text = "".join(
        c for c in xml_text
        if c in "\t\n\r"
        or 0x20 <= ord(c) <= 0xD7FF
        or 0xE000 <= ord(c) <= 0xFFFD
        or 0x10000 <= ord(c) <= 0x10FFFF
    )

    # Unescaped ampersands (but not valid entities)
    xml_text = re.sub(r"&(?!(amp|lt|gt|apos|quot|#\d+|#x[\da-fA-F]+);)", "&amp;", xml_text)

    return xml_text


def decode_xml(data: bytes) -> str:
    """
    Decode raw XML bytes using the encoding the document declares.

    Falls back to UTF-8 (BOM allowed) when there is no declaration.
    Decoding is strict: UnicodeDecodeError or LookupError (unknown
    encoding name) propagate to the caller.
    """
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return data.decode("utf-16")

    m = DECLARED_ENCODING_RE.match(data)
    encoding = m.group(1).decode("ascii") if m else "utf-8"
    if codecs.lookup(encoding).name == "utf-8":
        encoding = "utf-8-sig"
    return data.decode(encoding)


def strip_xml_declaration(xml_text: str) -> str:
    """Drop the <?xml ...?> declaration so lxml can parse the decoded text."""
    return XML_DECLARATION_RE.sub("", xml_text, count=1)


def local_name(element: etree._Element) -> str:
    """Tag name without any namespace."""
    return etree.QName(element).localname


def direct_text(element: etree._Element) -> str:
    """
    Text held directly by ``element``.

    Text nodes of nested children are not included; text between or
    after children is. Missing text gives an empty string.
    """
    return "".join(element.xpath("text()"))
