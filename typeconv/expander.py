"""Synthesis of ``<Name>Update`` companion structs for partial updates.

Members tagged with the ``update`` key are collected into a new struct whose
members are all pointers tagged ``omitempty``, so clients can send only the
fields they want to change.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .errors import OutputFailure, TranslationError, UnsupportedConstruct
from .logging import source_logger
from .models import (
    ByteSlice,
    Field,
    InlineStruct,
    Named,
    Opaque,
    Pointer,
    Selector,
    Slice,
    SourceUnit,
    TypeDecl,
    TypeExpr,
)
from .tags import parse_tag_literal

UPDATE_TAG_KEY = "update"
UPDATE_SUFFIX = "Update"


@dataclass(frozen=True)
class UpdateField:
    name: str
    type: TypeExpr
    tag_name: str


@dataclass(frozen=True)
class Expansion:
    """Outcome of expanding one source unit."""

    unit: SourceUnit
    synthesized: Tuple[TypeDecl, ...] = ()
    errors: Tuple[TranslationError, ...] = ()


def synthesize_update_type(decl: TypeDecl) -> Optional[TypeDecl]:
    """Return the ``<Name>Update`` struct for ``decl``, or None when no member opts in."""
    if not isinstance(decl.type, InlineStruct):
        return None

    collected: List[UpdateField] = []
    for struct_field in decl.type.fields:
        try:
            collected.extend(_update_fields(struct_field))
        except TranslationError as exc:
            label = struct_field.names[0] if struct_field.names else "embedded member"
            raise exc.add_context(f"field {label}").add_context(f"declaration {decl.name}")

    if not collected:
        return None

    fields = tuple(
        Field(
            names=(item.name,),
            type=Pointer(item.type),
            tag=f'`json:"{item.tag_name},omitempty" bson:"{item.tag_name},omitempty"`',
        )
        for item in collected
    )
    return TypeDecl(name=f"{decl.name}{UPDATE_SUFFIX}", type=InlineStruct(fields=fields))


def expand_unit(unit: SourceUnit) -> Expansion:
    """Insert synthesized update structs after their originals.

    Declarations whose companion already exists in the unit are left alone, so
    expanding a previously persisted file is a no-op. A declaration whose
    update members cannot be synthesized is dropped from the unit and its
    error recorded.
    """
    existing = set(unit.declared_names())
    declarations: List[TypeDecl] = []
    synthesized: List[TypeDecl] = []
    errors: List[TranslationError] = []
    log = source_logger("expander", unit.path)
    for decl in unit.declarations:
        if f"{decl.name}{UPDATE_SUFFIX}" in existing:
            declarations.append(decl)
            continue
        try:
            update = synthesize_update_type(decl)
        except TranslationError as exc:
            log.for_declaration(decl.name).warning("Cannot expand: %s", exc)
            errors.append(exc)
            continue
        declarations.append(decl)
        if update is None:
            continue
        log.for_declaration(decl.name).debug("Synthesized %s", update.name)
        declarations.append(update)
        synthesized.append(update)
    return Expansion(
        unit=replace(unit, declarations=tuple(declarations)),
        synthesized=tuple(synthesized),
        errors=tuple(errors),
    )


def render_go_declaration(decl: TypeDecl) -> str:
    """Render a synthesized struct back as Go source."""
    if not isinstance(decl.type, InlineStruct):
        raise UnsupportedConstruct(repr(decl.type), type(decl.type).__name__, "can only render structs")
    lines = [f"type {decl.name} struct {{"]
    for struct_field in decl.type.fields:
        tag = f"\t\t{struct_field.tag}" if struct_field.tag else ""
        lines.append(f"\t{', '.join(struct_field.names)}\t\t{go_type_text(struct_field.type)}{tag}")
    lines.append("}")
    return "\n".join(lines)


def persist_expansion(path: Path, synthesized: Sequence[TypeDecl]) -> None:
    """Append synthesized structs to the Go file they were derived from."""
    if not synthesized:
        return
    text = "".join(f"\n{render_go_declaration(decl)}\n" for decl in synthesized)
    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(text)
    except OSError as exc:
        raise OutputFailure(str(path), f"cannot append update structs: {exc}") from exc
    source_logger("expander", path).info("Appended %d update struct(s)", len(synthesized))


def go_type_text(expr: TypeExpr) -> str:
    """Go spelling of the type shapes an update struct can hold."""
    if isinstance(expr, Pointer):
        return f"*{go_type_text(expr.inner)}"
    if isinstance(expr, ByteSlice):
        return "[]byte"
    if isinstance(expr, Slice):
        return f"[]{go_type_text(expr.element)}"
    if isinstance(expr, Named):
        return expr.name
    if isinstance(expr, Selector):
        return f"{expr.package}.{expr.name}"
    raise UnsupportedConstruct(repr(expr), type(expr).__name__, "no Go spelling for type")


def _update_fields(struct_field: Field) -> List[UpdateField]:
    if struct_field.tag is None:
        return []
    tag = parse_tag_literal(struct_field.tag)
    if not tag.has(UPDATE_TAG_KEY):
        return []
    if struct_field.embedded:
        raise UnsupportedConstruct(
            repr(struct_field.type), "embedded", "embedded members cannot be updated"
        )
    _check_update_type(struct_field.type)

    json_entry = tag.get("json")
    tag_name = json_entry.name if json_entry is not None else ""
    return [
        UpdateField(name=name, type=struct_field.type, tag_name=tag_name or name.lower())
        for name in struct_field.names
    ]


def _check_update_type(expr: TypeExpr) -> None:
    if isinstance(expr, Opaque):
        raise UnsupportedConstruct(expr.text, expr.kind, "unsupported update member type")
    if isinstance(expr, (Named, Selector, ByteSlice)):
        return
    if isinstance(expr, Slice) and isinstance(expr.element, Named):
        return
    if isinstance(expr, Slice):
        raise UnsupportedConstruct(repr(expr), "Slice", "update members must be slices of named types")
    raise UnsupportedConstruct(repr(expr), type(expr).__name__, "unsupported update member type")


__all__ = [
    "Expansion",
    "expand_unit",
    "go_type_text",
    "persist_expansion",
    "render_go_declaration",
    "synthesize_update_type",
]
