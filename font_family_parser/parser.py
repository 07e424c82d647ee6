"""
Font-family descriptor parser.

Reads a ``<font-family>`` document from a TokenStream and returns one of:
- ProviderEntry: all three fontProvider* attributes are present on the root.
- FileListEntry: the root lists one or more ``<font>`` children.
- None: an unknown root element, or a family with no usable content.

Traversal (one call, no state kept between calls):
1. Seek the first start tag. A stream without one raises
   MalformedDocumentError; nothing else the document can do is an error.
2. Dispatch on the root's name. Anything but ``font-family`` is skipped.
3. Read the provider attributes. If complete, the rest of the family
   (``<font>`` children included) is skipped and the provider wins.
4. Otherwise scan the children: ``<font>`` becomes a FontFileEntry,
   every other element is skipped whole.

Skipping is depth-tracked (see ``skip()``), so unknown content of any
depth is stepped over without knowing its schema. TypedArrays are always
released through ``with`` blocks. StreamSyntaxError raised by the stream
propagates unchanged.
"""

from __future__ import annotations

import logging

from font_family_parser.entries import (
    NORMAL_WEIGHT,
    FamilyResourceEntry,
    FileListEntry,
    FontFileEntry,
    ProviderEntry,
)
from font_family_parser.exceptions import MalformedDocumentError
from font_family_parser.resources import Resources
from font_family_parser.styleable_registry import FONT_FAMILY, FONT_FAMILY_FONT
from font_family_parser.tokens import TokenStream, TokenType

logger = logging.getLogger(__name__)

FAMILY_TAG = "font-family"
FONT_TAG = "font"

ITALIC = 1


def parse(stream: TokenStream, resources: Resources) -> FamilyResourceEntry | None:
    """Parse one font-family document.

    Args:
        stream: Token stream positioned before the document.
        resources: Attribute resolver for the document's elements.

    Returns:
        A ProviderEntry or FileListEntry, or None if the document holds
        no usable family.

    Raises:
        MalformedDocumentError: If the stream ends before any start tag.
        StreamSyntaxError: Propagated from the stream on invalid markup.
    """
    event = stream.next()
    while event is not TokenType.START_TAG and event is not TokenType.END_DOCUMENT:
        event = stream.next()

    if event is not TokenType.START_TAG:
        raise MalformedDocumentError("No start tag found")
    return _read_families(stream, resources)


def skip(stream: TokenStream) -> None:
    """Consume the subtree of the element whose start tag is current.

    Leaves the stream on that element's own end tag.
    """
    depth = 1
    while depth > 0:
        event = stream.next()
        if event is TokenType.START_TAG:
            depth += 1
        elif event is TokenType.END_TAG:
            depth -= 1


def _read_families(stream: TokenStream, resources: Resources) -> FamilyResourceEntry | None:
    stream.require(TokenType.START_TAG)
    if stream.name == FAMILY_TAG:
        return _read_family(stream, resources)
    logger.debug("Skipping unknown root element <%s>", stream.name)
    skip(stream)
    return None


def _read_family(stream: TokenStream, resources: Resources) -> FamilyResourceEntry | None:
    with resources.obtain_attributes(stream.attributes, FONT_FAMILY) as array:
        authority = array.get_string("fontProviderAuthority")
        provider_package = array.get_string("fontProviderPackage")
        query = array.get_string("fontProviderQuery")

    if authority and provider_package and query:
        skip(stream)
        logger.debug("Read provider family from %s", authority)
        return ProviderEntry(authority, provider_package, query)

    fonts: list[FontFileEntry] = []
    while stream.next() is not TokenType.END_TAG:
        if stream.event_type is not TokenType.START_TAG:
            continue
        if stream.name == FONT_TAG:
            fonts.append(_read_font(stream, resources))
        else:
            logger.debug("Skipping <%s> inside <%s>", stream.name, FAMILY_TAG)
            skip(stream)

    if not fonts:
        logger.debug("<%s> has no <%s> entries", FAMILY_TAG, FONT_TAG)
        return None
    logger.debug("Read file family with %d fonts", len(fonts))
    return FileListEntry(tuple(fonts))


def _read_font(stream: TokenStream, resources: Resources) -> FontFileEntry:
    with resources.obtain_attributes(stream.attributes, FONT_FAMILY_FONT) as array:
        weight = array.get_int("fontWeight", NORMAL_WEIGHT)
        is_italic = array.get_int("fontStyle", 0) == ITALIC
        filename = array.get_string("font")
        resource_id = array.get_resource_id("font", 0)
    skip(stream)
    return FontFileEntry(filename, weight, is_italic, resource_id)
