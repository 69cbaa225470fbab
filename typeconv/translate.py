"""Go type expression to TypeScript translation.

``translate_type`` maps one type expression to TypeScript text and
``extract_fields`` turns a struct member list into interface member lines.
The two recurse into each other for inline structs so nested members follow
exactly the same naming and optionality rules as top-level ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, assert_never

from .errors import TranslationError, UnsupportedConstruct
from .models import (
    ByteSlice,
    Field,
    GenericInstantiation,
    InlineStruct,
    InterfaceAny,
    MapType,
    Named,
    Opaque,
    Pointer,
    Rendered,
    Selector,
    Slice,
    TypeExpr,
    is_exported,
)
from .tags import StructTag, parse_tag_literal

DEFAULT_INDENT = "    "
DEFAULT_GENERIC_PLACEHOLDER = "T"
DEFAULT_SCALAR_SELECTORS: Mapping[str, str] = {
    "time.Time": "string",
    "decimal.Decimal": "number",
}

_NUMBER_KINDS = frozenset(
    {
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "byte",
        "rune",
        "float32",
        "float64",
        "complex64",
        "complex128",
    }
)
_SCALAR_KINDS = _NUMBER_KINDS | {"bool"}

_OMIT_OPTIONS = ("omitempty", "omitzero")
_VALID_NAME = re.compile(r"^[^\W\d]\w*$")


@dataclass(frozen=True)
class TranslationOptions:
    """Read-only settings threaded through every translation call."""

    indent: str = DEFAULT_INDENT
    generic_placeholder: str = DEFAULT_GENERIC_PLACEHOLDER
    optional_pointer_union: bool = False
    scalar_selectors: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SCALAR_SELECTORS)
    )


DEFAULT_OPTIONS = TranslationOptions()


@dataclass(frozen=True)
class Member:
    """A struct member that survives the export and tag rules."""

    source_name: str
    name: str
    optional: bool
    type: TypeExpr
    pointer: bool = False
    as_string: bool = False


def primitive_name(name: str) -> str:
    """Map Go builtin scalar names onto TypeScript primitives."""
    if name == "bool":
        return "boolean"
    if name in _NUMBER_KINDS:
        return "number"
    return name


def translate_type(
    expr: TypeExpr,
    depth: int = 0,
    require_parens: bool = False,
    options: TranslationOptions = DEFAULT_OPTIONS,
) -> Rendered:
    """Translate ``expr`` into TypeScript.

    ``depth`` is the nesting level of the member line that owns the
    expression; inline struct members are indented one level deeper.
    ``require_parens`` is set for container elements so that unions keep
    their precedence, e.g. ``(X | undefined)[]``.
    """
    match expr:
        case Pointer(inner=inner_expr):
            inner = translate_type(inner_expr, depth, False, options)
            text = f"{inner.text} | undefined"
            if require_parens or isinstance(inner_expr, Slice):
                text = f"({text})"
            return Rendered(text, inner.imports)

        case ByteSlice():
            return Rendered("string")

        case Slice(element=element_expr):
            element = translate_type(element_expr, depth, True, options)
            return Rendered(f"{element.text}[]", element.imports)

        case InlineStruct(fields=fields):
            body = extract_fields(fields, depth + 1, options)
            closing = options.indent * (depth + 1)
            return Rendered(f"{{\n{body.text}{closing}}}", body.imports)

        case Named(name=name, declared_locally=declared_locally):
            rendered = Rendered(primitive_name(name))
            if (
                not declared_locally
                and is_exported(name)
                and name != options.generic_placeholder
            ):
                rendered.imports.add_internal(name)
            return rendered

        case Selector(package=package, name=name):
            scalar = options.scalar_selectors.get(f"{package}.{name}")
            if scalar is not None:
                return Rendered(scalar)
            rendered = Rendered(name)
            rendered.imports.add_external(package, name)
            return rendered

        case MapType(key=key_expr, value=value_expr):
            key = translate_type(key_expr, depth, False, options)
            value = translate_type(value_expr, depth, False, options)
            rendered = Rendered(f"{{ [key: {key.text}]: {value.text} }}", key.imports)
            rendered.imports.update(value.imports)
            return rendered

        case InterfaceAny():
            return Rendered("any")

        case GenericInstantiation(base=base_expr, arguments=argument_exprs):
            base = translate_type(base_expr, depth, False, options)
            rendered = Rendered("", base.imports)
            arguments: List[str] = []
            for argument in argument_exprs:
                translated = translate_type(argument, depth, False, options)
                arguments.append(translated.text)
                rendered.imports.update(translated.imports)
            rendered.text = f"{base.text}<{', '.join(arguments)}>"
            return rendered

        case Opaque(text=text, kind=kind):
            raise UnsupportedConstruct(text, kind, "cannot translate type")

        case _:
            assert_never(expr)


def collect_members(fields: Iterable[Field]) -> List[Member]:
    """Apply export, tag and optionality rules to a struct member list.

    Embedded members are left to the declaration emitter.
    """
    members: List[Member] = []
    for struct_field in fields:
        exported = [name for name in struct_field.names if is_exported(name)]
        if not exported:
            continue

        tag = _parse_field_tag(struct_field, exported[0])
        json_entry = tag.get("json") if tag is not None else None

        for source_name in exported:
            name = source_name
            optional = False
            as_string = False
            if json_entry is not None:
                if json_entry.name == "-" and not json_entry.options:
                    continue
                if json_entry.name:
                    name = json_entry.name
                optional = any(json_entry.has_option(option) for option in _OMIT_OPTIONS)
                as_string = json_entry.has_option("string")

            member_type = struct_field.type
            pointer = isinstance(member_type, Pointer)
            if isinstance(member_type, Pointer):
                member_type = member_type.inner
                optional = True

            members.append(
                Member(
                    source_name=source_name,
                    name=name,
                    optional=optional,
                    type=member_type,
                    pointer=pointer,
                    as_string=as_string and _is_scalar(member_type),
                )
            )
    return members


def extract_fields(
    fields: Iterable[Field],
    depth: int = 0,
    options: TranslationOptions = DEFAULT_OPTIONS,
) -> Rendered:
    """Render struct members as interface member lines at ``depth``."""
    rendered = Rendered("")
    lines: List[str] = []
    prefix = options.indent * (depth + 1)
    for member in collect_members(fields):
        try:
            if member.as_string:
                translated = Rendered("string")
            else:
                translated = translate_type(member.type, depth, False, options)
        except TranslationError as exc:
            raise exc.add_context(f"field {member.source_name}")

        type_text = translated.text
        if member.pointer and options.optional_pointer_union:
            type_text = f"{type_text} | undefined"
        marker = "?" if member.optional else ""
        lines.append(f"{prefix}{quote_name(member.name)}{marker}: {type_text};\n")
        rendered.imports.update(translated.imports)

    rendered.text = "".join(lines)
    return rendered


def quote_name(name: str) -> str:
    """Single-quote member names that are not plain identifiers."""
    if _VALID_NAME.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _parse_field_tag(struct_field: Field, label: str) -> Optional[StructTag]:
    if struct_field.tag is None:
        return None
    try:
        return parse_tag_literal(struct_field.tag)
    except TranslationError as exc:
        raise exc.add_context(f"field {label}")


def _is_scalar(expr: TypeExpr) -> bool:
    return isinstance(expr, Named) and expr.name in _SCALAR_KINDS


__all__ = [
    "DEFAULT_OPTIONS",
    "DEFAULT_SCALAR_SELECTORS",
    "Member",
    "TranslationOptions",
    "collect_members",
    "extract_fields",
    "primitive_name",
    "quote_name",
    "translate_type",
]
