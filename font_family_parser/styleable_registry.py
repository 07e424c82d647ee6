"""
Styleable loader for font-family-parser.

Loads styleable YAML files from font_family_parser/styleables/ and
provides structured access via Pydantic models. Each styleable defines:
- name: unique identifier (e.g., "FontFamily")
- description: free-form note
- attrs: the attributes the attribute resolver may read for one element,
  each with a value format, an optional default and optional enum names

Why YAML instead of hardcoded:
- The attribute schema is data, not logic; the parser only names the
  attributes it reads.
- Enum names (``fontStyle="italic"``) and defaults are editable in one
  place without touching the resolver.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

# Directory containing styleable YAML files (sibling package)
_STYLEABLES_DIR = Path(__file__).parent / "styleables"

# Registry of built-in styleables, filled on first use
_STYLEABLES: dict[str, Styleable] = {}

FONT_FAMILY = "FontFamily"
FONT_FAMILY_FONT = "FontFamilyFont"


class AttrSpec(BaseModel):
    """Schema entry for one attribute of a styleable."""
    name: str
    format: Literal["string", "integer", "enum", "reference"] = "string"
    default: int | str | None = None
    enum: dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_enum_has_values(self) -> AttrSpec:
        if self.format == "enum" and not self.enum:
            raise ValueError(f"Attribute '{self.name}' has format 'enum' but no enum values")
        return self


class Styleable(BaseModel):
    """A named attribute schema, e.g. the attributes of ``<font>``."""
    name: str
    description: str = ""
    attrs: list[AttrSpec]

    @model_validator(mode="after")
    def _check_unique_attr_names(self) -> Styleable:
        seen: set[str] = set()
        for attr in self.attrs:
            if attr.name in seen:
                raise ValueError(f"Styleable '{self.name}' declares '{attr.name}' twice")
            seen.add(attr.name)
        return self

    def attr(self, name: str) -> AttrSpec:
        """Return the schema entry for *name*.

        Raises:
            KeyError: If *name* is not an attribute of this styleable.
        """
        for attr in self.attrs:
            if attr.name == name:
                return attr
        raise KeyError(f"'{name}' is not an attribute of styleable {self.name}")

    @property
    def attr_names(self) -> list[str]:
        return [attr.name for attr in self.attrs]


def load_styleable(path: Path) -> Styleable:
    """Load a single styleable YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return Styleable.model_validate(raw)


def load_all_styleables(styleables_dir: Path | None = None) -> dict[str, Styleable]:
    """Load all styleable YAML files in a directory.

    Args:
        styleables_dir: Directory to scan for .yaml files. Defaults to
            the built-in styleables/ directory.

    Returns:
        Mapping of styleable name -> Styleable. Files that fail to load
        are logged and left out.
    """
    styleables_dir = styleables_dir or _STYLEABLES_DIR
    styleables: dict[str, Styleable] = {}
    for yaml_path in sorted(styleables_dir.glob("*.yaml")):
        try:
            styleable = load_styleable(yaml_path)
        except Exception as e:
            logger.warning("Failed to load styleable from %s: %s", yaml_path, e)
            continue
        if styleable.name in styleables:
            logger.warning(
                "Duplicate styleable '%s' in %s ignored", styleable.name, yaml_path
            )
            continue
        styleables[styleable.name] = styleable
        logger.debug("Loaded styleable: %s from %s", styleable.name, yaml_path)
    logger.debug("Loaded %d styleables", len(styleables))
    return styleables


def get_styleable(name: str) -> Styleable:
    """Return a built-in styleable by name.

    Raises:
        KeyError: If no bundled YAML file defines *name*.
    """
    if not _STYLEABLES:
        _STYLEABLES.update(load_all_styleables())
    try:
        return _STYLEABLES[name]
    except KeyError:
        raise KeyError(
            f"Unknown styleable '{name}'. Available: {sorted(_STYLEABLES)}"
        ) from None
