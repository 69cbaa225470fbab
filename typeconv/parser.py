"""Tree-sitter powered Go source parser.

Lowers the type declarations of a Go file into the ``typeconv.models`` tree.
Only top-level ``type`` declarations are read; functions, constants and
variables are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .errors import ParseFailure
from .logging import get_logger
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
    Selector,
    Slice,
    SourceUnit,
    TypeDecl,
    TypeExpr,
)

GO_LANGUAGE = Language(tree_sitter_go.language())

# Declarations with these right-hand sides describe behaviour, not data.
_BEHAVIOUR_KINDS = {"function_type", "channel_type"}


class GoParser:
    """Parses Go source into a ``SourceUnit``.

    A ``GoParser`` owns one tree-sitter parser and must not be shared between
    threads.
    """

    def __init__(self) -> None:
        self._parser = Parser(GO_LANGUAGE)
        self.logger = get_logger("parser")

    def parse_file(self, path: Path) -> SourceUnit:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseFailure(str(path), f"cannot read file: {exc}") from exc
        return self.parse(source, str(path))

    def parse(self, source: str, path: str = "<memory>") -> SourceUnit:
        source_bytes = source.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            raise ParseFailure(path, _describe_error(root, source_bytes))
        return _Lowering(source_bytes, path, self.logger).lower(root)


def parse_source(source: str, path: str = "<memory>") -> SourceUnit:
    """Parse ``source`` with a fresh parser."""
    return GoParser().parse(source, path)


class _Lowering:
    def __init__(self, source_bytes: bytes, path: str, logger: logging.Logger) -> None:
        self._source = source_bytes
        self._path = path
        self.logger = logger

    def lower(self, root: Node) -> SourceUnit:
        specs = list(self._type_specs(root))
        local_names = {self._text(spec.child_by_field_name("name")) for spec in specs}

        declarations: List[TypeDecl] = []
        skipped: List[str] = []
        for spec in specs:
            name = self._text(spec.child_by_field_name("name"))
            type_node = _unwrap_parens(spec.child_by_field_name("type"))
            if _describes_behaviour(type_node):
                self.logger.debug("Skipping %s in %s (%s)", name, self._path, type_node.type)
                skipped.append(name)
                continue
            type_params = tuple(self._type_params(spec.child_by_field_name("type_parameters")))
            scope = local_names | set(type_params)
            declarations.append(
                TypeDecl(
                    name=name,
                    type=self._lower_type(type_node, scope),
                    type_params=type_params,
                    alias=spec.type == "type_alias",
                )
            )

        return SourceUnit(
            path=self._path,
            package=self._package_name(root),
            declarations=tuple(declarations),
            skipped=tuple(skipped),
        )

    def _type_specs(self, root: Node) -> Iterable[Node]:
        for child in _named(root):
            if child.type != "type_declaration":
                continue
            for spec in _named(child):
                if spec.type in {"type_spec", "type_alias"}:
                    yield spec

    def _package_name(self, root: Node) -> Optional[str]:
        for child in _named(root):
            if child.type == "package_clause":
                for ident in _named(child):
                    return self._text(ident)
        return None

    def _type_params(self, node: Optional[Node]) -> Iterable[str]:
        if node is None:
            return
        for declaration in _named(node):
            for name_node in declaration.children_by_field_name("name"):
                yield self._text(name_node)

    def _lower_type(self, node: Node, scope: Set[str]) -> TypeExpr:
        kind = node.type
        if kind == "parenthesized_type":
            return self._lower_type(_unwrap_parens(node), scope)
        if kind in {"type_identifier", "identifier"}:
            name = self._text(node)
            return Named(name=name, declared_locally=name in scope)
        if kind == "pointer_type":
            return Pointer(self._lower_type(_named(node)[0], scope))
        if kind in {"slice_type", "array_type"}:
            element = _unwrap_parens(node.child_by_field_name("element"))
            if element.type == "type_identifier" and self._text(element) == "byte":
                return ByteSlice()
            return Slice(self._lower_type(element, scope))
        if kind == "map_type":
            return MapType(
                key=self._lower_type(node.child_by_field_name("key"), scope),
                value=self._lower_type(node.child_by_field_name("value"), scope),
            )
        if kind == "struct_type":
            return InlineStruct(fields=tuple(self._lower_fields(node, scope)))
        if kind == "qualified_type":
            return Selector(
                package=self._text(node.child_by_field_name("package")),
                name=self._text(node.child_by_field_name("name")),
            )
        if kind == "generic_type":
            arguments_node = node.child_by_field_name("type_arguments")
            arguments = _named(arguments_node) if arguments_node is not None else []
            return GenericInstantiation(
                base=self._lower_type(node.child_by_field_name("type"), scope),
                arguments=tuple(self._lower_argument(argument, scope) for argument in arguments),
            )
        if kind == "interface_type":
            return InterfaceAny()
        return Opaque(text=self._text(node), kind=kind)

    def _lower_argument(self, node: Node, scope: Set[str]) -> TypeExpr:
        # Newer grammars wrap each type argument in a type_elem (a union of terms).
        if node.type == "type_elem":
            terms = _named(node)
            if len(terms) != 1:
                return Opaque(text=self._text(node), kind=node.type)
            node = terms[0]
        return self._lower_type(node, scope)

    def _lower_fields(self, struct_node: Node, scope: Set[str]) -> Iterable[Field]:
        for body in _named(struct_node):
            if body.type != "field_declaration_list":
                continue
            for declaration in _named(body):
                if declaration.type != "field_declaration":
                    continue
                names = tuple(
                    self._text(name) for name in declaration.children_by_field_name("name")
                )
                member_type = self._lower_type(declaration.child_by_field_name("type"), scope)
                if not names and any(child.type == "*" for child in declaration.children):
                    member_type = Pointer(member_type)
                tag_node = declaration.child_by_field_name("tag")
                yield Field(
                    names=names,
                    type=member_type,
                    tag=self._text(tag_node) if tag_node is not None else None,
                )

    def _text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _named(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _unwrap_parens(node: Node) -> Node:
    while node.type == "parenthesized_type":
        inner = _named(node)
        if not inner:
            break
        node = inner[0]
    return node


def _describes_behaviour(node: Node) -> bool:
    if node.type in _BEHAVIOUR_KINDS:
        return True
    return node.type == "interface_type" and bool(_named(node))


def _describe_error(root: Node, source_bytes: bytes) -> str:
    node = _first_error(root)
    if node is None:
        return "syntax error"
    row, column = node.start_point[0] + 1, node.start_point[1] + 1
    if node.is_missing:
        return f"syntax error at line {row}, column {column}: missing {node.type}"
    snippet = source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")
    snippet = " ".join(snippet.split())[:40]
    return f"syntax error at line {row}, column {column} near {snippet!r}"


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


__all__ = ["GO_LANGUAGE", "GoParser", "parse_source"]
