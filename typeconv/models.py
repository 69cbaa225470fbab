"""Core data models shared across typeconv components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .errors import TranslationError


@dataclass(frozen=True)
class Named:
    """A bare identifier such as ``string``, ``User`` or a type parameter."""

    name: str
    declared_locally: bool = False


@dataclass(frozen=True)
class Pointer:
    inner: "TypeExpr"


@dataclass(frozen=True)
class Slice:
    """A slice or fixed-length array of ``element``."""

    element: "TypeExpr"


@dataclass(frozen=True)
class ByteSlice:
    """``[]byte``, which JSON encodes as a base64 string."""


@dataclass(frozen=True)
class MapType:
    key: "TypeExpr"
    value: "TypeExpr"


@dataclass(frozen=True)
class InlineStruct:
    fields: Tuple["Field", ...] = ()


@dataclass(frozen=True)
class Selector:
    """A package-qualified type such as ``time.Time``."""

    package: str
    name: str


@dataclass(frozen=True)
class GenericInstantiation:
    base: "TypeExpr"
    arguments: Tuple["TypeExpr", ...]


@dataclass(frozen=True)
class InterfaceAny:
    """``interface{}`` or any other interface type."""


@dataclass(frozen=True)
class Opaque:
    """A Go type constructor outside the translatable set, kept for error reports."""

    text: str
    kind: str


TypeExpr = Union[
    Named,
    Pointer,
    Slice,
    ByteSlice,
    MapType,
    InlineStruct,
    Selector,
    GenericInstantiation,
    InterfaceAny,
    Opaque,
]


@dataclass(frozen=True)
class Field:
    """One struct member as written in the source.

    ``names`` is empty for embedded members. ``tag`` holds the raw Go string
    literal, quotes included.
    """

    names: Tuple[str, ...]
    type: TypeExpr
    tag: Optional[str] = None

    @property
    def embedded(self) -> bool:
        return not self.names


@dataclass(frozen=True)
class TypeDecl:
    """One top-level named type declaration."""

    name: str
    type: TypeExpr
    type_params: Tuple[str, ...] = ()
    alias: bool = False

    @property
    def kind(self) -> str:
        if isinstance(self.type, InlineStruct):
            return "struct"
        if isinstance(self.type, MapType):
            return "map"
        return "alias"


@dataclass(frozen=True)
class SourceUnit:
    """Parsed view of one Go file."""

    path: str
    package: Optional[str]
    declarations: Tuple[TypeDecl, ...]
    skipped: Tuple[str, ...] = ()

    def declared_names(self) -> List[str]:
        return [decl.name for decl in self.declarations]


@dataclass(frozen=True)
class ImportRef:
    """A type imported from another Go package."""

    package: str
    symbol: str


class ImportSet:
    """Ordered, de-duplicated external and internal import references."""

    def __init__(self) -> None:
        self._external: Dict[ImportRef, None] = {}
        self._internal: Dict[str, None] = {}

    def add_external(self, package: str, symbol: str) -> None:
        self._external.setdefault(ImportRef(package=package, symbol=symbol), None)

    def add_internal(self, symbol: str) -> None:
        self._internal.setdefault(symbol, None)

    def update(self, other: "ImportSet") -> None:
        for ref in other.external:
            self._external.setdefault(ref, None)
        for symbol in other.internal:
            self._internal.setdefault(symbol, None)

    @property
    def external(self) -> List[ImportRef]:
        return list(self._external)

    @property
    def internal(self) -> List[str]:
        return list(self._internal)

    def __bool__(self) -> bool:
        return bool(self._external or self._internal)


@dataclass
class Rendered:
    """TypeScript text plus the imports it needs."""

    text: str
    imports: ImportSet = field(default_factory=ImportSet)


@dataclass(frozen=True)
class EmittedDeclaration:
    name: str
    type_params: Tuple[str, ...]
    supertypes: Tuple[str, ...]
    text: str
    imports: ImportSet


@dataclass(frozen=True)
class TranslationResult:
    """Everything the generator needs to write one TypeScript module."""

    path: str
    declaration_names: Tuple[str, ...]
    external_imports: Tuple[ImportRef, ...]
    internal_imports: Tuple[str, ...]
    text: str
    errors: Tuple[TranslationError, ...] = ()
    synthesized: Tuple[TypeDecl, ...] = ()


def iter_named(expr: TypeExpr) -> Iterator[Named]:
    """Yield every ``Named`` node reachable from ``expr``."""
    if isinstance(expr, Named):
        yield expr
    elif isinstance(expr, Pointer):
        yield from iter_named(expr.inner)
    elif isinstance(expr, Slice):
        yield from iter_named(expr.element)
    elif isinstance(expr, MapType):
        yield from iter_named(expr.key)
        yield from iter_named(expr.value)
    elif isinstance(expr, InlineStruct):
        for member in expr.fields:
            yield from iter_named(member.type)
    elif isinstance(expr, GenericInstantiation):
        yield from iter_named(expr.base)
        for argument in expr.arguments:
            yield from iter_named(argument)


def is_exported(name: str) -> bool:
    """Go exports identifiers that start with an uppercase letter."""
    return name[:1].isupper()


__all__ = [
    "ByteSlice",
    "EmittedDeclaration",
    "Field",
    "GenericInstantiation",
    "ImportRef",
    "ImportSet",
    "InlineStruct",
    "InterfaceAny",
    "MapType",
    "Named",
    "Opaque",
    "Pointer",
    "Rendered",
    "Selector",
    "Slice",
    "SourceUnit",
    "TranslationResult",
    "TypeDecl",
    "TypeExpr",
    "is_exported",
    "iter_named",
]
