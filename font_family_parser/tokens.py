"""
Pull-style token stream for font-family markup.

The parser never sees a tree: it asks a TokenStream for one token at a
time and inspects the current element's name and attributes. This keeps
the traversal in parser.py independent of the markup library and lets
tests drive it with any TokenStream implementation.

XmlTokenStream is the stock implementation on top of
``lxml.etree.XMLPullParser``:
- The source is read in chunks and fed to lxml only when the buffered
  events run out, so large documents are never read ahead of need.
- Entity resolution and network access are disabled.
- ``lxml.etree.XMLSyntaxError`` is re-raised as StreamSyntaxError.
- Each element is cleared once its end tag has been reported, and earlier
  siblings are detached from the parent, so the tree lxml builds behind the
  events does not grow with the document.
- A document without a root element whose content is only prolog markup
  (declaration, comments, processing instructions) ends with END_DOCUMENT
  instead of an lxml "Start tag expected" error.

Token protocol:
- ``next()`` advances and returns the new TokenType.
- After END_DOCUMENT has been returned once, a further ``next()`` raises
  StreamSyntaxError; a traversal that runs off the end of a truncated
  stream fails instead of spinning.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from collections import deque
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from lxml import etree

from font_family_parser.exceptions import StreamSyntaxError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

_PULL_EVENTS = ("start", "end", "comment", "pi")

_UTF8_BOM = b"\xef\xbb\xbf"

_PROLOG_MARKUP = re.compile(rb"<\?.*?\?>|<!--.*?-->|<!DOCTYPE[^>]*>", re.DOTALL)


def _is_markup_only(prolog: bytes) -> bool:
    """True if *prolog* holds nothing but declarations, comments and PIs."""
    if prolog.startswith(_UTF8_BOM):
        prolog = prolog[len(_UTF8_BOM):]
    return not _PROLOG_MARKUP.sub(b"", prolog).strip()


class TokenType(Enum):
    """Classification of the token the stream is positioned on."""
    START_TAG = "start_tag"
    END_TAG = "end_tag"
    END_DOCUMENT = "end_document"
    OTHER = "other"


class TokenStream(ABC):
    """Abstract pull tokenizer consumed by the font-family parser."""

    @abstractmethod
    def next(self) -> TokenType:
        """Advance to the next token and return its type.

        Raises:
            StreamSyntaxError: If the markup is invalid or the stream has
                already reported END_DOCUMENT.
        """

    @property
    @abstractmethod
    def event_type(self) -> TokenType | None:
        """Type of the current token; ``None`` before the first ``next()``."""

    @property
    @abstractmethod
    def name(self) -> str | None:
        """Local name of the current element, ``None`` for non-element tokens."""

    @property
    @abstractmethod
    def attributes(self) -> dict[str, str]:
        """Attributes of the current start tag, keyed as ``{namespace}local``."""

    @property
    def line_number(self) -> int | None:
        return None

    @property
    def depth(self) -> int | None:
        """Nesting depth of the current element; ``None`` if not tracked."""
        return None

    def require(self, event_type: TokenType, name: str | None = None) -> None:
        """Assert the stream is on a token of *event_type* (and *name*, if given).

        Raises:
            StreamSyntaxError: On a kind or name mismatch.
        """
        if self.event_type is not event_type or (name is not None and self.name != name):
            expected = event_type.name if name is None else f"{event_type.name} <{name}>"
            found = "nothing" if self.event_type is None else self.event_type.name
            if self.name is not None:
                found = f"{found} <{self.name}>"
            raise StreamSyntaxError(f"Expected {expected}, found {found}", self.line_number)


class XmlTokenStream(TokenStream):
    """TokenStream over an XML byte source, backed by lxml's pull parser.

    Args:
        source: Binary file-like object positioned at the start of the document.
        chunk_size: Number of bytes fed to lxml per read.
        owns_source: If True, ``close()`` also closes *source*.
    """

    def __init__(
        self,
        source: BinaryIO,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        owns_source: bool = False,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._source = source
        self._chunk_size = chunk_size
        self._owns_source = owns_source
        self._parser = etree.XMLPullParser(
            events=_PULL_EVENTS,
            resolve_entities=False,
            no_network=True,
        )
        self._pending: deque[tuple[str, etree._Element]] = deque()
        self._source_done = False
        self._has_content = False
        self._blank_prefix = b""
        # Bytes fed before the first start event; dropped once one is seen.
        self._seen_start = False
        self._prolog = b""

        self._event_type: TokenType | None = None
        self._name: str | None = None
        self._attributes: dict[str, str] = {}
        self._line_number: int | None = None
        self._depth = 0
        self._leaving_element = False

    # -----------------------------------------------------------------
    # Constructors
    # -----------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> XmlTokenStream:
        return cls(io.BytesIO(data), chunk_size=chunk_size)

    @classmethod
    def from_string(cls, text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> XmlTokenStream:
        """Tokenize an in-memory document; *text* is encoded as UTF-8."""
        return cls.from_bytes(text.encode("utf-8"), chunk_size=chunk_size)

    @classmethod
    def from_file(cls, path: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> XmlTokenStream:
        """Open *path* for reading; the file is closed by ``close()``."""
        path = Path(path)
        logger.debug("Opening token stream on %s", path)
        return cls(open(path, "rb"), chunk_size=chunk_size, owns_source=True)

    def close(self) -> None:
        if self._owns_source:
            self._source.close()

    def __enter__(self) -> XmlTokenStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -----------------------------------------------------------------
    # TokenStream
    # -----------------------------------------------------------------

    @property
    def event_type(self) -> TokenType | None:
        return self._event_type

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def attributes(self) -> dict[str, str]:
        return dict(self._attributes)

    @property
    def line_number(self) -> int | None:
        return self._line_number

    @property
    def depth(self) -> int:
        """Nesting depth of the current element (1 for the root element)."""
        return self._depth

    def next(self) -> TokenType:
        if self._event_type is TokenType.END_DOCUMENT:
            raise StreamSyntaxError("Read past end of document", self._line_number)
        if self._leaving_element:
            self._depth -= 1
            self._leaving_element = False

        self._fill()
        if not self._pending:
            self._set_current(TokenType.END_DOCUMENT)
            return TokenType.END_DOCUMENT

        event, element = self._pending.popleft()
        if event == "start":
            self._depth += 1
            self._set_current(
                TokenType.START_TAG,
                name=etree.QName(element).localname,
                attributes=dict(element.attrib),
                line_number=element.sourceline,
            )
        elif event == "end":
            self._leaving_element = True
            self._set_current(
                TokenType.END_TAG,
                name=etree.QName(element).localname,
                line_number=element.sourceline,
            )
            self._release(element)
        else:
            self._set_current(TokenType.OTHER, line_number=element.sourceline)
        return self._event_type

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _set_current(
        self,
        event_type: TokenType,
        name: str | None = None,
        attributes: dict[str, str] | None = None,
        line_number: int | None = None,
    ) -> None:
        self._event_type = event_type
        self._name = name
        self._attributes = attributes or {}
        if line_number is not None:
            self._line_number = line_number

    @staticmethod
    def _release(element: etree._Element) -> None:
        """Drop a finished element's content and its already-reported siblings."""
        element.clear()
        parent = element.getparent()
        if parent is not None:
            while element.getprevious() is not None:
                del parent[0]

    def _feed(self, data: bytes) -> None:
        if not self._seen_start:
            self._prolog += data
        self._parser.feed(data)

    def _fill(self) -> None:
        """Feed the pull parser until an event is buffered or the source ends."""
        while not self._pending and not self._source_done:
            chunk = self._source.read(self._chunk_size)
            try:
                if not chunk:
                    self._source_done = True
                    # Without a root element, a blank or prolog-only source
                    # ends the token stream; lxml would reject it.
                    if self._has_content and (
                        self._seen_start or not _is_markup_only(self._prolog)
                    ):
                        self._parser.close()
                elif self._has_content:
                    self._feed(chunk)
                elif chunk.strip():
                    self._has_content = True
                    self._feed(self._blank_prefix + chunk)
                    self._blank_prefix = b""
                else:
                    self._blank_prefix += chunk
            except etree.XMLSyntaxError as exc:
                raise StreamSyntaxError(
                    f"Invalid markup: {exc.msg or exc}", getattr(exc, "lineno", None)
                ) from exc
            events = list(self._parser.read_events())
            if not self._seen_start and any(event == "start" for event, _ in events):
                self._seen_start = True
                self._prolog = b""
            self._pending.extend(events)
