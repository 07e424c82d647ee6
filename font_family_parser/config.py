"""
Configuration models and YAML I/O for font-family-parser.

This module defines the Pydantic models that map 1:1 to a parser config
YAML file, plus helpers for loading and saving it.

Key models:
- ParserConfig: Top-level config (tokenizer + resolver + resources).
- TokenizerConfig: How the XML source is fed to the pull tokenizer.
- ResolverConfig: Which attribute namespaces are honoured, and the
  default package for resource references.
- ResourceEntry: One row of the resource table that ``@type/name``
  references resolve against.

Key functions:
- load_config(path) -> ParserConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Why Pydantic + YAML:
- Pydantic gives strict validation, type coercion (hex resource ids)
  and clear error messages.
- YAML is human-editable; resource tables are usually generated once and
  then hand-tweaked.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from font_family_parser.exceptions import ConfigValidationError
from font_family_parser.tokens import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

ANDROID_NAMESPACE = "http://schemas.android.com/apk/res/android"
APP_NAMESPACE = "http://schemas.android.com/apk/res-auto"

# Earlier namespaces win when an element carries the same attribute twice.
# "" matches attributes written without a prefix.
DEFAULT_NAMESPACES = [ANDROID_NAMESPACE, APP_NAMESPACE, ""]


class TokenizerConfig(BaseModel):
    """Settings for the XML pull tokenizer."""

    chunk_size: int = Field(
        DEFAULT_CHUNK_SIZE, gt=0, description="Bytes read from the source per feed"
    )


class ResolverConfig(BaseModel):
    """Settings for attribute resolution."""

    package: str | None = Field(
        None,
        description=(
            "Package of the resource table. References naming another "
            "package (@pkg:type/name) do not resolve."
        ),
    )
    namespaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NAMESPACES),
        description="Attribute namespaces read by the resolver, highest priority first",
    )


class ResourceEntry(BaseModel):
    """A resource that ``@type/name`` references resolve to."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Opaque resource identifier")
    type: str = Field(..., description="Resource type, e.g. 'font'")
    name: str = Field(..., description="Resource name, e.g. 'roboto_regular'")
    value: str | None = Field(
        None, description="Resolved value, e.g. 'res/font/roboto_regular.ttf'"
    )

    @field_validator("id", mode="before")
    @classmethod
    def _parse_hex_id(cls, value: object) -> object:
        """Accept ids written as hex strings (``"0x7f080000"``)."""
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text, 16) if text.lower().startswith("0x") else int(text)
            except ValueError:
                raise ValueError(f"Resource id is not an integer: {value!r}") from None
        return value


class ParserConfig(BaseModel):
    """Top-level configuration for font-family-parser."""

    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    resources: list[ResourceEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_resources(self) -> ParserConfig:
        """Validate that resource ids and (type, name) pairs are unique."""
        ids: set[int] = set()
        keys: set[tuple[str, str]] = set()
        for entry in self.resources:
            if entry.id in ids:
                raise ValueError(f"Duplicate resource id 0x{entry.id:08x}")
            if (entry.type, entry.name) in keys:
                raise ValueError(f"Duplicate resource @{entry.type}/{entry.name}")
            ids.add(entry.id)
            keys.add((entry.type, entry.name))
        return self


def load_config(path: str | Path) -> ParserConfig:
    """Load and validate a parser config YAML file into a ParserConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return ParserConfig.model_validate(raw)


def save_config(config: ParserConfig, path: str | Path) -> None:
    """Serialize a ParserConfig to YAML.

    Writes a human-readable YAML file with a header comment.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# font-family-parser configuration\n")
        f.write("# Resource ids are plain integers; hex strings are accepted on load.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
