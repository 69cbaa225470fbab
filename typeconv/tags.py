"""Parsing for Go struct tags such as ``json:"name,omitempty" update:""``."""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import MalformedMetadata

_GO_ESCAPE = re.compile(r'\\(?:[abfnrtv\\"]|x[0-9a-fA-F]{2}|[0-7]{3}|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8})')


@dataclass(frozen=True)
class TagEntry:
    """One ``key:"name,opt1,opt2"`` entry of a struct tag."""

    key: str
    name: str
    options: Tuple[str, ...] = ()

    def has_option(self, option: str) -> bool:
        return option in self.options


@dataclass(frozen=True)
class StructTag:
    """Ordered entries of a parsed struct tag."""

    entries: Tuple[TagEntry, ...] = ()

    def get(self, key: str) -> Optional[TagEntry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> List[str]:
        return [entry.key for entry in self.entries]


def parse_tag_literal(literal: str) -> StructTag:
    """Parse a tag as written in Go source, backquoted or double-quoted."""
    return parse_struct_tag(_unquote_literal(literal))


def parse_struct_tag(tag: str) -> StructTag:
    """Parse the contents of a struct tag.

    Follows the conventional ``reflect.StructTag`` grammar: space separated
    ``key:"value"`` pairs where the key holds no spaces, quotes, colons or
    control characters and the value is a Go double-quoted string.
    """
    entries: List[TagEntry] = []
    rest = tag
    while rest:
        rest = rest.lstrip(" ")
        if not rest:
            break

        index = 0
        while index < len(rest) and rest[index] > " " and rest[index] not in ':"\x7f':
            index += 1
        if index == 0:
            raise MalformedMetadata(tag, "bad syntax for struct tag key")
        if index + 1 >= len(rest) or rest[index] != ":":
            raise MalformedMetadata(tag, "bad syntax for struct tag pair")
        if rest[index + 1] != '"':
            raise MalformedMetadata(tag, "bad syntax for struct tag value")
        key = rest[:index]
        rest = rest[index + 1 :]

        index = 1
        while index < len(rest) and rest[index] != '"':
            if rest[index] == "\\":
                index += 1
            index += 1
        if index >= len(rest):
            raise MalformedMetadata(tag, "bad syntax for struct tag value")
        quoted = rest[: index + 1]
        rest = rest[index + 1 :]

        value = _unquote(quoted, tag)
        name, *options = value.split(",")
        entries.append(TagEntry(key=key, name=name, options=tuple(options)))

    return StructTag(entries=tuple(entries))


def _unquote_literal(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1]
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        return _unquote(literal, literal)
    raise MalformedMetadata(literal, "tag must be a string literal")


def _unquote(quoted: str, tag: str) -> str:
    _check_go_escapes(quoted, tag)
    try:
        value = ast.literal_eval(quoted)
    except (SyntaxError, ValueError) as exc:
        raise MalformedMetadata(tag, f"invalid quoted value {quoted}") from exc
    if not isinstance(value, str):
        raise MalformedMetadata(tag, f"invalid quoted value {quoted}")
    return value


def _check_go_escapes(quoted: str, tag: str) -> None:
    # literal_eval also knows \N{...}, short octals and surrogates; Go does not.
    body = quoted[1:-1]
    index = body.find("\\")
    while index != -1:
        match = _GO_ESCAPE.match(body, index)
        if match is None or not _escape_in_range(match.group(0)):
            raise MalformedMetadata(tag, f"invalid escape in quoted value {quoted}")
        index = body.find("\\", match.end())


def _escape_in_range(escape: str) -> bool:
    marker = escape[1]
    if marker in "01234567":
        return int(escape[1:], 8) <= 0xFF
    if marker in "uU":
        code = int(escape[2:], 16)
        return code <= 0x10FFFF and not 0xD800 <= code <= 0xDFFF
    return True


__all__ = ["StructTag", "TagEntry", "parse_struct_tag", "parse_tag_literal"]
