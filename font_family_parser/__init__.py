"""
font-family-parser: parse font-family resource XML into typed entries.

Public API surface:

- ``parse(stream, resources)`` -- the core parser. Takes any
  ``TokenStream`` plus a ``Resources`` attribute resolver and returns a
  ``ProviderEntry``, a ``FileListEntry`` or ``None``.

- ``parse_file(path, config=None)`` -- convenience wrapper: tokenizes an
  XML file with lxml and resolves attributes against the resource table
  of a ``ParserConfig``.

- ``parse_string(text, config=None)`` -- same, for an in-memory document.

- ``load_config(path)`` / ``save_config(config, path)`` -- YAML I/O for
  ``ParserConfig``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from font_family_parser.config import ParserConfig, load_config, save_config
from font_family_parser.entries import (
    FamilyResourceEntry,
    FileListEntry,
    FontFileEntry,
    ProviderEntry,
)
from font_family_parser.exceptions import (
    ConfigValidationError,
    FontFamilyParserError,
    MalformedDocumentError,
    StreamSyntaxError,
)
from font_family_parser.parser import parse
from font_family_parser.resources import Resources, ResourceTable
from font_family_parser.tokens import TokenStream, TokenType, XmlTokenStream

__all__ = [
    "parse",
    "parse_file",
    "parse_string",
    "load_config",
    "save_config",
    "ParserConfig",
    "Resources",
    "ResourceTable",
    "TokenStream",
    "TokenType",
    "XmlTokenStream",
    "FamilyResourceEntry",
    "FileListEntry",
    "FontFileEntry",
    "ProviderEntry",
    "FontFamilyParserError",
    "MalformedDocumentError",
    "StreamSyntaxError",
    "ConfigValidationError",
]

logger = logging.getLogger(__name__)


def _describe(entry: FamilyResourceEntry | None) -> str:
    if entry is None:
        return "no entry"
    if isinstance(entry, ProviderEntry):
        return f"provider {entry.authority}"
    return f"{len(entry.files)} font file(s)"


def parse_file(
    path: str | Path,
    config: ParserConfig | None = None,
) -> FamilyResourceEntry | None:
    """Parse a font-family XML file.

    Args:
        path: Path to the XML document.
        config: Tokenizer and resolver settings plus the resource table.
            Defaults to ``ParserConfig()`` (no resources, so every
            ``@font/...`` reference is unresolved).

    Returns:
        A ProviderEntry or FileListEntry, or None.

    Raises:
        FileNotFoundError: If *path* does not exist.
        MalformedDocumentError: If the document has no start tag.
        StreamSyntaxError: If the XML is not well-formed.

    Examples::

        config = font_family_parser.load_config("fonts.yaml")
        entry = font_family_parser.parse_file("res/font/roboto.xml", config)
        if isinstance(entry, font_family_parser.FileListEntry):
            for font in entry.files:
                print(font.file_name, font.weight, font.italic)
    """
    config = config or ParserConfig()
    resources = Resources.from_config(config)
    with XmlTokenStream.from_file(path, chunk_size=config.tokenizer.chunk_size) as stream:
        entry = parse(stream, resources)
    logger.info("parse_file() -- %s: %s", path, _describe(entry))
    return entry


def parse_string(
    text: str,
    config: ParserConfig | None = None,
) -> FamilyResourceEntry | None:
    """Parse a font-family document held in memory. See ``parse_file()``."""
    config = config or ParserConfig()
    resources = Resources.from_config(config)
    stream = XmlTokenStream.from_string(text, chunk_size=config.tokenizer.chunk_size)
    entry = parse(stream, resources)
    logger.info("parse_string() -- %d chars: %s", len(text), _describe(entry))
    return entry
