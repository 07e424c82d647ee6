"""
Attribute resolution for font-family elements.

The parser does not read raw attribute strings itself. For each element it
asks a Resources object for a TypedArray: a typed, schema-checked view of
that one element's attributes, resolved against a ResourceTable.

Resolution rules:
- Attributes are matched by local name. The namespace must be one of the
  configured namespaces; when an element carries the same attribute in
  several of them, the earliest namespace in the list wins.
- ``@[package:]type/name`` is a resource reference. A resolved reference
  reads as the entry's value (strings, integers) or the entry's id
  (resource ids). Unresolved references and ``@null`` read as absent.
- Integers are decimal or ``0x`` hex, or one of the styleable's enum
  names. Anything else falls back to the caller's default.

Scoped release:
- A TypedArray must be recycled as soon as the element's attributes have
  been read. It is a context manager, so ``with resources.obtain_attributes(...)``
  releases it on every exit path. Reads after ``recycle()`` raise
  RuntimeError.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence

from font_family_parser.config import DEFAULT_NAMESPACES, ParserConfig, ResourceEntry
from font_family_parser.styleable_registry import Styleable, get_styleable

logger = logging.getLogger(__name__)

_NULL_REFERENCE = "@null"

_REFERENCE_PATTERN = re.compile(
    r"^@\+?(?:(?P<package>[A-Za-z0-9_.]+):)?(?P<type>[A-Za-z0-9_]+)/(?P<name>[A-Za-z0-9_.]+)$"
)

_INTEGER_PATTERN = re.compile(r"^(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]+)|(?P<dec>[0-9]+))$")


def _split_clark(key: str) -> tuple[str, str]:
    """Split ``{namespace}local`` into ``(namespace, local)``."""
    if key.startswith("{"):
        namespace, _, local = key[1:].partition("}")
        return namespace, local
    return "", key


def _parse_int(text: str) -> int:
    """Parse a decimal or ``0x`` hex integer with an optional sign.

    Raises:
        ValueError: If *text* is anything else.
    """
    match = _INTEGER_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Not an integer: {text!r}")
    sign = -1 if match.group("sign") == "-" else 1
    if match.group("hex") is not None:
        return sign * int(match.group("hex"), 16)
    return sign * int(match.group("dec"))


class ResourceTable:
    """Read-only index of resources by ``(type, name)`` and by id.

    Args:
        entries: Resource rows; ids and ``(type, name)`` pairs should be unique.
        package: Package the table belongs to. References that name a
            different package do not resolve. ``None`` accepts any package.
    """

    def __init__(self, entries: Iterable[ResourceEntry] = (), package: str | None = None) -> None:
        self.package = package
        self._by_key: dict[tuple[str, str], ResourceEntry] = {}
        self._by_id: dict[int, ResourceEntry] = {}
        for entry in entries:
            self._by_key[(entry.type, entry.name)] = entry
            self._by_id[entry.id] = entry

    def __len__(self) -> int:
        return len(self._by_id)

    def lookup(self, res_type: str, name: str) -> ResourceEntry | None:
        return self._by_key.get((res_type, name))

    def get(self, resource_id: int) -> ResourceEntry | None:
        return self._by_id.get(resource_id)

    def resolve(self, reference: str) -> ResourceEntry | None:
        """Resolve a ``@[package:]type/name`` string; ``None`` if it does not resolve."""
        if reference == _NULL_REFERENCE:
            return None
        match = _REFERENCE_PATTERN.match(reference)
        if match is None:
            logger.debug("Not a resource reference: %r", reference)
            return None
        package = match.group("package")
        if package is not None and self.package is not None and package != self.package:
            logger.debug("Reference %s names foreign package %s", reference, package)
            return None
        entry = self.lookup(match.group("type"), match.group("name"))
        if entry is None:
            logger.debug("Unresolved resource reference %s", reference)
        return entry


class TypedArray:
    """Resolved attribute values of one element, for one styleable.

    Obtained from ``Resources.obtain_attributes()``; must be recycled after
    use, preferably by using it as a context manager.
    """

    def __init__(self, resources: Resources, styleable: Styleable, values: dict[str, str]) -> None:
        self._resources = resources
        self._styleable = styleable
        self._values = values
        self._recycled = False

    def __enter__(self) -> TypedArray:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._recycled:
            self.recycle()

    @property
    def styleable(self) -> Styleable:
        return self._styleable

    @property
    def recycled(self) -> bool:
        return self._recycled

    def recycle(self) -> None:
        """Release the array. Further reads raise RuntimeError."""
        if self._recycled:
            raise RuntimeError(f"TypedArray for {self._styleable.name} recycled twice")
        self._recycled = True
        self._values = {}

    def has_value(self, name: str) -> bool:
        return self._raw(name) is not None

    def get_string(self, name: str) -> str | None:
        """Return the attribute as a string, resolving references."""
        raw = self._raw(name)
        if raw is None:
            return None
        if raw.startswith("@"):
            entry = self._resources.resolve_reference(raw)
            return entry.value if entry is not None else None
        return raw

    def get_int(self, name: str, default: int | None = None) -> int:
        """Return the attribute as an integer.

        Args:
            name: Attribute name within the styleable.
            default: Value for absent or unparseable attributes. ``None``
                uses the styleable's declared default (or 0).
        """
        attr = self._styleable.attr(name)
        if default is None:
            default = attr.default if isinstance(attr.default, int) else 0
        raw = self._raw(name)
        if raw is None:
            return default
        text = raw.strip()
        if text.startswith("@"):
            entry = self._resources.resolve_reference(text)
            if entry is None or entry.value is None:
                return default
            text = entry.value.strip()
        if text in attr.enum:
            return attr.enum[text]
        try:
            return _parse_int(text)
        except ValueError:
            logger.debug(
                "Attribute %s=%r of %s is not an integer; using %d",
                name, raw, self._styleable.name, default,
            )
            return default

    def get_resource_id(self, name: str, default: int = 0) -> int:
        """Return the id of the resource the attribute references, or *default*."""
        raw = self._raw(name)
        if raw is None or not raw.startswith("@"):
            return default
        entry = self._resources.resolve_reference(raw)
        return entry.id if entry is not None else default

    def _raw(self, name: str) -> str | None:
        if self._recycled:
            raise RuntimeError(f"TypedArray for {self._styleable.name} used after recycle()")
        self._styleable.attr(name)
        return self._values.get(name)


class Resources:
    """Attribute resolver handed to the parser.

    Args:
        table: Resource table that references resolve against. Defaults
            to an empty table, so every reference is unresolved.
        namespaces: Attribute namespaces to read, highest priority first.
            ``""`` stands for un-prefixed attributes.
    """

    def __init__(
        self,
        table: ResourceTable | None = None,
        namespaces: Sequence[str] | None = None,
    ) -> None:
        self.table = table if table is not None else ResourceTable()
        self.namespaces = list(DEFAULT_NAMESPACES if namespaces is None else namespaces)

    @classmethod
    def from_config(cls, config: ParserConfig) -> Resources:
        table = ResourceTable(config.resources, package=config.resolver.package)
        logger.debug(
            "Resources from config: %d entries, namespaces=%s",
            len(table), config.resolver.namespaces,
        )
        return cls(table, config.resolver.namespaces)

    def resolve_reference(self, reference: str) -> ResourceEntry | None:
        return self.table.resolve(reference)

    def obtain_attributes(
        self, attributes: Mapping[str, str], styleable: Styleable | str
    ) -> TypedArray:
        """Collect the styleable's attributes from one element's attribute set.

        Args:
            attributes: The element's attributes, keyed as ``{namespace}local``.
            styleable: Schema to read, or the name of a built-in styleable.

        Returns:
            A TypedArray the caller must recycle.
        """
        if isinstance(styleable, str):
            styleable = get_styleable(styleable)

        by_local: dict[str, dict[str, str]] = {}
        for key, value in attributes.items():
            namespace, local = _split_clark(key)
            by_local.setdefault(local, {})[namespace] = value

        values: dict[str, str] = {}
        for attr_name in styleable.attr_names:
            candidates = by_local.get(attr_name)
            if not candidates:
                continue
            for namespace in self.namespaces:
                if namespace in candidates:
                    values[attr_name] = candidates[namespace]
                    break
        return TypedArray(self, styleable, values)
