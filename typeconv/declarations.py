"""Rendering of top-level Go type declarations as TypeScript declarations."""

from __future__ import annotations

from typing import List, Tuple

from .errors import UnsupportedConstruct
from .logging import get_logger
from .models import (
    EmittedDeclaration,
    Field,
    GenericInstantiation,
    ImportSet,
    InlineStruct,
    MapType,
    Named,
    Pointer,
    Selector,
    TypeDecl,
    is_exported,
    iter_named,
)
from .translate import DEFAULT_OPTIONS, TranslationOptions, extract_fields, translate_type

logger = get_logger("declarations")


def emit_declaration(
    decl: TypeDecl, options: TranslationOptions = DEFAULT_OPTIONS
) -> EmittedDeclaration:
    """Render one declaration.

    Structs become interfaces (embedded members turn into ``extends``
    clauses), map-rooted types become an interface with a single index
    signature and every other named type becomes a type alias.
    """
    type_params = generic_params(decl, options)
    header_name = decl.name
    if type_params:
        header_name += f"<{', '.join(type_params)}>"

    imports = ImportSet()
    supertypes: Tuple[str, ...] = ()

    if isinstance(decl.type, InlineStruct):
        supertypes = tuple(_supertypes(decl.type.fields, imports, options))
        body = extract_fields(decl.type.fields, 0, options)
        imports.update(body.imports)
        header = f"export interface {header_name}"
        if supertypes:
            header += f" extends {', '.join(supertypes)}"
        text = f"{header} {{\n{body.text}}}"
    elif isinstance(decl.type, MapType):
        key = translate_type(decl.type.key, 0, False, options)
        value = translate_type(decl.type.value, 0, False, options)
        imports.update(key.imports)
        imports.update(value.imports)
        text = (
            f"export interface {header_name} {{\n"
            f"{options.indent}[key: {key.text}]: {value.text};\n"
            "}"
        )
    else:
        target = translate_type(decl.type, 0, False, options)
        imports.update(target.imports)
        text = f"export type {header_name} = {target.text};"

    logger.debug("Emitted %s (%s)", decl.name, decl.kind)
    return EmittedDeclaration(
        name=decl.name,
        type_params=type_params,
        supertypes=supertypes,
        text=text,
        imports=imports,
    )


def generic_params(decl: TypeDecl, options: TranslationOptions = DEFAULT_OPTIONS) -> Tuple[str, ...]:
    """Return the generic parameters to declare on the TypeScript side.

    Declared type parameters win; otherwise a reference to the placeholder
    identifier anywhere in the declaration makes it generic over that name.
    """
    if decl.type_params:
        return decl.type_params
    placeholder = options.generic_placeholder
    if any(named.name == placeholder for named in iter_named(decl.type)):
        return (placeholder,)
    return ()


def _supertypes(fields: Tuple[Field, ...], imports: ImportSet, options: TranslationOptions) -> List[str]:
    supertypes: List[str] = []
    for struct_field in fields:
        if not struct_field.embedded:
            continue
        target = struct_field.type
        if isinstance(target, Pointer):
            target = target.inner

        if isinstance(target, Named):
            if not is_exported(target.name):
                logger.debug("Ignoring unexported embedded member %s", target.name)
                continue
            if not target.declared_locally:
                imports.add_internal(target.name)
            supertypes.append(target.name)
        elif isinstance(target, Selector):
            imports.add_external(target.package, target.name)
            supertypes.append(target.name)
        elif isinstance(target, GenericInstantiation):
            rendered = translate_type(target, 0, False, options)
            imports.update(rendered.imports)
            supertypes.append(rendered.text)
        else:
            raise UnsupportedConstruct(
                repr(struct_field.type),
                type(struct_field.type).__name__,
                "cannot embed type",
            ).add_context("embedded member")
    return supertypes


__all__ = ["emit_declaration", "generic_params"]
