"""
Result records produced by the font-family parser.

A parse yields exactly one of two shapes, or ``None`` when the document
holds nothing usable:

- ProviderEntry: the family is served by a downloadable-font provider.
- FileListEntry: the family enumerates local font files (FontFileEntry).

Why frozen dataclasses instead of a shared base class:
- ``FamilyResourceEntry`` is a closed union; callers dispatch with
  ``isinstance`` or ``match`` and the type checker knows both arms.
- Records are built once per parse and never mutated, so structural
  equality makes repeated parses of the same document compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass

NORMAL_WEIGHT = 400


@dataclass(frozen=True)
class ProviderEntry:
    """A ``<font-family>`` that points at an external font provider.

    Attributes:
        authority: Content authority of the provider (``fontProviderAuthority``).
        package_name: Package of the provider app (``fontProviderPackage``).
        query: Provider-specific font query (``fontProviderQuery``).
    """
    authority: str
    package_name: str
    query: str


@dataclass(frozen=True)
class FontFileEntry:
    """One ``<font>`` element of a file-based family.

    ``file_name`` is passed through as resolved, including ``None`` when
    the ``font`` attribute is missing or does not resolve.
    """
    file_name: str | None
    weight: int = NORMAL_WEIGHT
    italic: bool = False
    resource_id: int = 0


@dataclass(frozen=True)
class FileListEntry:
    """A ``<font-family>`` that lists local font files in document order."""
    files: tuple[FontFileEntry, ...]

    def __post_init__(self) -> None:
        # Lists and other iterables are normalized to a tuple.
        object.__setattr__(self, "files", tuple(self.files))
        if not self.files:
            raise ValueError("FileListEntry requires at least one FontFileEntry")


FamilyResourceEntry = ProviderEntry | FileListEntry
