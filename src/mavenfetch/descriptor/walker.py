"""Path-tracking SAX handler shared by the descriptor parsers."""
from __future__ import annotations

import os
import xml.sax
import xml.sax.handler
from typing import IO, List, Optional, Sequence, Union

from mavenfetch.exceptions import DescriptorParseError


def _local_name(qname: str) -> str:
    """Drop a namespace prefix from a qualified element name."""
    return qname.rsplit(":", 1)[-1]


class PathMatchingHandler(xml.sax.handler.ContentHandler):
    """Track the open element path and hand each element's text to ``on_text``.

    Subclasses decide what to capture with ``is_matched`` (the current path is
    exactly the given one) and ``is_parent_matched`` (the current element is a
    direct child of the given path). Text is reported once per element, after
    SAX has delivered every chunk of it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._path: List[str] = []
        self._text: List[List[str]] = []

    def startElement(self, name, attrs):  # noqa: N802 - SAX API
        self._path.append(_local_name(name))
        self._text.append([])

    def endElement(self, name):  # noqa: N802 - SAX API
        chunks = self._text.pop()
        self.on_text("".join(chunks).strip())
        self.on_end()
        self._path.pop()

    def characters(self, content):
        if self._text:
            self._text[-1].append(content)

    def on_text(self, text: str) -> None:
        """Called with the stripped text of the element about to close."""

    def on_end(self) -> None:
        """Called when an element closes, while it is still the current path."""

    def is_matched(self, path: Sequence[str]) -> bool:
        """True when the open element path is exactly ``path``."""
        return len(path) == len(self._path) and all(a == b for a, b in zip(path, self._path))

    def is_parent_matched(self, path: Sequence[str]) -> bool:
        """True when the open element is a direct child of ``path``."""
        return len(path) == len(self._path) - 1 and all(a == b for a, b in zip(path, self._path))

    def current_name(self) -> Optional[str]:
        """Name of the innermost open element."""
        return self._path[-1] if self._path else None


def parse_stream(source: Union[IO[bytes], str, bytes, os.PathLike], handler: PathMatchingHandler, what: str) -> None:
    """Run ``handler`` over an XML stream, path or byte string.

    Raises:
        DescriptorParseError: if the document is not well-formed.
    """
    try:
        if isinstance(source, bytes):
            xml.sax.parseString(source, handler)
        elif isinstance(source, os.PathLike):
            xml.sax.parse(os.fspath(source), handler)
        else:
            xml.sax.parse(source, handler)
    except xml.sax.SAXException as exc:
        raise DescriptorParseError(f"Malformed {what}: {exc}") from exc
