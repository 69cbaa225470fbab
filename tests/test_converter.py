"""Tests for typeconv.converter and module rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from typeconv.converter import convert_file, convert_source, convert_unit
from typeconv.errors import ParseFailure, UnsupportedConstruct
from typeconv.generator import build_import_map, render_typescript_module
from typeconv.models import ImportRef
from typeconv.parser import parse_source
from typeconv.translate import TranslationOptions

USERS_SOURCE = """
package users

import (
\t"time"

\t"example.com/common"
)

type User struct {
\tcommon.Base
\tID        int             `json:"id"`
\tEmail     string          `json:"email"`
\tNickname  *string         `json:"nickname,omitempty"`
\tRoles     []Role          `json:"roles"`
\tAddress   Address         `json:"address"`
\tCreatedAt time.Time       `json:"created_at"`
\tOwner     common.Account  `json:"owner"`
\tBackup    *common.Account `json:"backup"`
\tpassword  string
}

type Address struct {
\tStreet string `json:"street"`
}
"""


def test_convert_source_renders_declarations_in_order() -> None:
    result = convert_source(USERS_SOURCE, "users/user.go")

    assert result.path == "users/user.go"
    assert result.declaration_names == ("User", "Address")
    assert result.text == (
        "export interface User extends Base {\n"
        "    id: number;\n"
        "    email: string;\n"
        "    nickname?: string;\n"
        "    roles: Role[];\n"
        "    address: Address;\n"
        "    created_at: string;\n"
        "    owner: Account;\n"
        "    backup?: Account;\n"
        "}\n"
        "\n"
        "export interface Address {\n"
        "    street: string;\n"
        "}"
    )
    assert result.external_imports == (
        ImportRef("common", "Base"),
        ImportRef("common", "Account"),
    )
    assert result.internal_imports == ("Role",)
    assert result.errors == ()


def test_render_typescript_module_writes_import_blocks() -> None:
    result = convert_source(USERS_SOURCE, "users/user.go")

    module = render_typescript_module(result)

    assert module.startswith(
        'import { Base, Account } from "../common";\n'
        "\n"
        'import { Role } from ".";\n'
        "\n"
        "export interface User extends Base {\n"
    )
    assert module.endswith("    street: string;\n}\n")


def test_render_typescript_module_without_imports() -> None:
    result = convert_source("package core\n\ntype Empty struct{}\n")

    assert render_typescript_module(result) == "export interface Empty {\n}\n"


def test_build_import_map_groups_by_package() -> None:
    grouped = build_import_map(
        [
            ImportRef("common", "Base"),
            ImportRef("billing", "Invoice"),
            ImportRef("common", "Account"),
            ImportRef("common", "Base"),
        ]
    )

    assert grouped == {"common": ["Base", "Account"], "billing": ["Invoice"]}


def test_failing_declarations_are_reported_and_skipped() -> None:
    result = convert_source(
        """
package core

type Worker struct {
\tJobs chan int `json:"jobs"`
}

type Job struct {
\tID int `json:"id"`
}
"""
    )

    assert result.declaration_names == ("Job",)
    assert result.text == "export interface Job {\n    id: number;\n}"
    (error,) = result.errors
    assert isinstance(error, UnsupportedConstruct)
    assert error.context == ["declaration Worker", "field Jobs"]
    assert str(error).startswith("declaration Worker > field Jobs: ")


def test_map_and_alias_declarations() -> None:
    result = convert_source(
        """
package core

type Scores map[string]int
type Status string
"""
    )

    assert result.text == (
        "export interface Scores {\n    [key: string]: number;\n}\n\nexport type Status = string;"
    )


def test_generic_declarations_use_the_placeholder() -> None:
    result = convert_source(
        """
package paging

type Page[T any] struct {
\tItems []T `json:"items"`
\tTotal int `json:"total"`
}
"""
    )

    assert result.text.startswith("export interface Page<T> {\n    items: T[];\n")
    assert result.internal_imports == ()


def test_options_flow_through_conversion() -> None:
    options = TranslationOptions(indent="  ", optional_pointer_union=True)

    result = convert_source(
        "package core\n\ntype Note struct {\n\tBody *string `json:\"body\"`\n}\n",
        options=options,
    )

    assert result.text == "export interface Note {\n  body?: string | undefined;\n}"


def test_expand_adds_update_interfaces() -> None:
    result = convert_source(
        """
package users

type Profile struct {
\tName  string `json:"name" update:"true"`
\tRoles []Role `json:"roles" update:"true"`
\tID    int    `json:"id"`
}
""",
        expand=True,
    )

    assert result.declaration_names == ("Profile", "ProfileUpdate")
    assert [decl.name for decl in result.synthesized] == ["ProfileUpdate"]
    assert result.text.endswith(
        "export interface ProfileUpdate {\n"
        "    name?: string;\n"
        "    roles?: Role[];\n"
        "}"
    )


def test_convert_file_reads_from_disk(tmp_path: Path) -> None:
    source = tmp_path / "thing.go"
    source.write_text("package things\n\ntype Thing struct {\n\tName string\n}\n", encoding="utf-8")

    result = convert_file(source)

    assert result.path == str(source)
    assert result.text == "export interface Thing {\n    Name: string;\n}"


def test_convert_source_raises_on_syntax_errors() -> None:
    with pytest.raises(ParseFailure):
        convert_source("package core\n\ntype Broken struct {\n", "broken.go")


def test_convert_unit_is_repeatable_on_the_same_unit() -> None:
    unit = parse_source(
        """
package shop

import "example.com/common"

type Order struct {
\tcommon.Base
\tLines    []Line         `json:"lines"`
\tBuyer    common.Account `json:"buyer"`
\tShipping struct {
\t\tStreet string  `json:"street"`
\t\tZone   *Zone   `json:"zone"`
\t} `json:"shipping"`
}
""",
        "shop/order.go",
    )

    first = convert_unit(unit)
    second = convert_unit(unit)

    assert second.text == first.text
    assert second.external_imports == first.external_imports
    assert second.internal_imports == first.internal_imports
    assert first.external_imports == (ImportRef("common", "Base"), ImportRef("common", "Account"))
    assert first.internal_imports == ("Line", "Zone")
    assert "    shipping: {\n        street: string;\n        zone?: Zone;\n    };\n" in first.text
