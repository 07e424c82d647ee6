"""
Custom exception hierarchy for font-family-parser.

Why a custom hierarchy:
- Callers can tell a document with no root element (MalformedDocumentError)
  apart from markup that is lexically broken (StreamSyntaxError) without
  matching on generic ValueError/RuntimeError messages.
- Everything else a font-family document can get wrong (unknown tags,
  missing attributes, empty font lists) is absorbed by the parser and is
  deliberately *not* represented here.
"""


class FontFamilyParserError(Exception):
    """Base exception for all font-family-parser errors."""


class MalformedDocumentError(FontFamilyParserError):
    """Raised when the token stream ends before any start tag is seen."""


class StreamSyntaxError(FontFamilyParserError):
    """Raised by the token stream when the underlying markup is invalid.

    Also covers misuse of the stream protocol:
    - ``require()`` called while positioned on the wrong kind of token.
    - ``next()`` called again after the end of the document was reported.

    The parser never catches or rewraps this error.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class ConfigValidationError(FontFamilyParserError):
    """Raised when a parser config file cannot be turned into a ParserConfig.

    Schema-level problems (wrong types, duplicate resource ids) surface as
    ``pydantic.ValidationError`` instead; this covers what the schema
    cannot express, such as an empty file.
    """
