"""
Reads the source XML document as record groups.

Layout expected:

    <dataset>
        <Person>                    <- record group (table)
            <ID_Person>1</ID_Person> <- field (column)
            <Name>Ana</Name>
        </Person>
        ...
    </dataset>
"""
from __future__ import annotations
from pathlib import Path
from typing import Iterator, Optional, Union
from lxml import etree
from loguru import logger

from .base import decode_xml, direct_text, local_name, sanitize_xml, strip_xml_declaration
from ..errors import NotFoundError, ParseError
from ..record_types import Field, RecordGroup


def _elements(parent: etree._Element) -> Iterator[etree._Element]:
    # Skips comments and processing instructions
    return parent.iterchildren(tag=etree.Element)


class XmlDocumentReader:
    """
    Loads an XML file and walks it as record groups.

    Usage:
        reader = XmlDocumentReader("dataset.xml")
        for group in reader.groups():
            print(group.name, group.columns())

    The file is checked and parsed by ``load()`` (called on first use), so
    NotFoundError and ParseError are raised before anything is yielded.
    """

    def __init__(self, path: Union[str, Path], sanitize: bool = False):
        self.path = Path(path)
        self.sanitize = sanitize
        self._root: Optional[etree._Element] = None

    def load(self) -> etree._Element:
        """
        Check the file exists and parse it.

        Raises:
            NotFoundError: If the file does not exist
            ParseError: If the document is not well-formed XML
        """
        if self._root is not None:
            return self._root

        if not self.path.is_file():
            raise NotFoundError(self.path)

        parser = etree.XMLParser(recover=False, resolve_entities=False)
        try:
            if self.sanitize:
                root = etree.fromstring(self._sanitized_text(), parser)
            else:
                root = etree.parse(str(self.path), parser).getroot()
        except etree.XMLSyntaxError as e:
            messages = [entry.message for entry in e.error_log] or [str(e)]
            raise ParseError(self.path, messages) from e

        logger.info(f"Loaded XML document {self.path}")
        self._root = root
        return root

    def _sanitized_text(self) -> str:
        try:
            text = decode_xml(self.path.read_bytes())
        except (UnicodeDecodeError, LookupError) as e:
            raise ParseError(self.path, [f"Cannot decode document: {e}"]) from e
        return strip_xml_declaration(sanitize_xml(text))

    def groups(self) -> Iterator[RecordGroup]:
        """Yield record groups in document order."""
        root = self.load()
        for element in _elements(root):
            yield RecordGroup(
                name=local_name(element),
                fields=[
                    Field(name=local_name(child), value=direct_text(child))
                    for child in _elements(element)
                ],
            )

    def __iter__(self) -> Iterator[RecordGroup]:
        return self.groups()
