"""Tests for the type translator and field extractor."""

from __future__ import annotations

import pytest

from typeconv.errors import MalformedMetadata, UnsupportedConstruct
from typeconv.models import (
    ByteSlice,
    Field,
    GenericInstantiation,
    ImportRef,
    InlineStruct,
    InterfaceAny,
    MapType,
    Named,
    Opaque,
    Pointer,
    Selector,
    Slice,
)
from typeconv.translate import (
    TranslationOptions,
    collect_members,
    extract_fields,
    quote_name,
    translate_type,
)


def test_pointer_becomes_union_with_undefined() -> None:
    assert translate_type(Pointer(Named("string"))).text == "string | undefined"


def test_pointer_inside_slice_is_parenthesised() -> None:
    rendered = translate_type(Slice(Pointer(Named("Item", declared_locally=True))))
    assert rendered.text == "(Item | undefined)[]"


def test_pointer_to_slice_is_parenthesised() -> None:
    assert translate_type(Pointer(Slice(Named("int")))).text == "(number[] | undefined)"


def test_byte_slice_is_a_string() -> None:
    assert translate_type(ByteSlice()).text == "string"
    assert translate_type(Slice(ByteSlice())).text == "string[]"


@pytest.mark.parametrize(
    ("go_name", "expected"),
    [
        ("bool", "boolean"),
        ("int", "number"),
        ("int64", "number"),
        ("uint8", "number"),
        ("float32", "number"),
        ("complex128", "number"),
        ("rune", "number"),
        ("string", "string"),
        ("any", "any"),
    ],
)
def test_primitive_names(go_name: str, expected: str) -> None:
    rendered = translate_type(Named(go_name))
    assert rendered.text == expected
    assert rendered.imports.internal == []


def test_exported_names_from_other_files_are_internal_imports() -> None:
    rendered = translate_type(Named("Profile"))

    assert rendered.text == "Profile"
    assert rendered.imports.internal == ["Profile"]
    assert rendered.imports.external == []


def test_locally_declared_names_and_placeholder_are_not_imported() -> None:
    assert translate_type(Named("Profile", declared_locally=True)).imports.internal == []
    assert translate_type(Named("T")).imports.internal == []


def test_scalar_selectors() -> None:
    time_rendered = translate_type(Selector("time", "Time"))
    decimal_rendered = translate_type(Selector("decimal", "Decimal"))

    assert time_rendered.text == "string"
    assert decimal_rendered.text == "number"
    assert not time_rendered.imports
    assert not decimal_rendered.imports


def test_other_selectors_are_external_imports() -> None:
    rendered = translate_type(Selector("common", "Account"))

    assert rendered.text == "Account"
    assert rendered.imports.external == [ImportRef(package="common", symbol="Account")]


def test_scalar_selectors_can_be_extended() -> None:
    options = TranslationOptions(scalar_selectors={"uuid.UUID": "string"})

    assert translate_type(Selector("uuid", "UUID"), options=options).text == "string"
    assert translate_type(Selector("time", "Time"), options=options).text == "Time"


def test_map_translates_key_and_value() -> None:
    rendered = translate_type(MapType(Named("string"), Slice(Named("Tag"))))

    assert rendered.text == "{ [key: string]: Tag[] }"
    assert rendered.imports.internal == ["Tag"]


def test_interface_is_any() -> None:
    assert translate_type(InterfaceAny()).text == "any"
    assert translate_type(MapType(Named("string"), InterfaceAny())).text == "{ [key: string]: any }"


def test_generic_instantiation() -> None:
    rendered = translate_type(
        GenericInstantiation(Named("Page", declared_locally=True), (Named("User"),))
    )

    assert rendered.text == "Page<User>"
    assert rendered.imports.internal == ["User"]


def test_inline_struct_is_indented_one_level_deeper() -> None:
    inline = InlineStruct(fields=(Field(("Count",), Named("int"), '`json:"count"`'),))

    assert translate_type(inline).text == "{\n        count: number;\n    }"
    assert translate_type(inline, depth=1).text == "{\n            count: number;\n        }"


def test_inline_struct_honours_indent_option() -> None:
    inline = InlineStruct(fields=(Field(("Count",), Named("int")),))
    options = TranslationOptions(indent="\t")

    assert translate_type(inline, options=options).text == "{\n\t\tCount: number;\n\t}"


def test_unsupported_constructs_report_text_and_kind() -> None:
    with pytest.raises(UnsupportedConstruct) as excinfo:
        translate_type(Slice(Opaque(text="chan int", kind="channel_type")))

    assert excinfo.value.text == "chan int"
    assert excinfo.value.kind == "channel_type"
    assert "chan int" in str(excinfo.value)


def test_extract_fields_applies_tag_and_pointer_rules() -> None:
    fields = (
        Field(("A",), Named("int"), '`json:"a"`'),
        Field(("B",), Pointer(Named("string")), '`json:"b,omitempty"`'),
    )

    assert extract_fields(fields).text == "    a: number;\n    b?: string;\n"


def test_extract_fields_can_keep_undefined_union_for_pointers() -> None:
    fields = (Field(("B",), Pointer(Named("string")), '`json:"b,omitempty"`'),)
    options = TranslationOptions(optional_pointer_union=True)

    assert extract_fields(fields, options=options).text == "    b?: string | undefined;\n"


def test_nested_pointers_keep_union_form() -> None:
    fields = (Field(("Items",), Slice(Pointer(Named("string"))), '`json:"items"`'),)

    assert extract_fields(fields).text == "    items: (string | undefined)[];\n"


def test_omitempty_without_pointer_is_optional() -> None:
    fields = (Field(("Note",), Named("string"), '`json:"note,omitempty"`'),)

    assert extract_fields(fields).text == "    note?: string;\n"


def test_dash_tag_and_unexported_members_are_dropped() -> None:
    fields = (
        Field(("Secret",), Named("string"), '`json:"-"`'),
        Field(("Hidden",), Pointer(Named("Thing")), '`json:"-"`'),
        Field(("internal",), Named("string")),
        Field(("lower",), Named("string"), '`json:"lower"`'),
        Field(("Kept",), Named("string")),
    )

    assert [member.source_name for member in collect_members(fields)] == ["Kept"]
    rendered = extract_fields(fields)
    assert rendered.text == "    Kept: string;\n"
    assert rendered.imports.internal == []


def test_embedded_members_are_not_fields() -> None:
    fields = (Field((), Named("Base")), Field(("ID",), Named("int"), '`json:"id"`'))

    assert extract_fields(fields).text == "    id: number;\n"


def test_untagged_members_use_source_name() -> None:
    fields = (
        Field(("Title",), Named("string")),
        Field(("Parent",), Pointer(Named("Node", declared_locally=True))),
    )

    assert extract_fields(fields).text == "    Title: string;\n    Parent?: Node;\n"


def test_empty_json_name_falls_back_to_source_name() -> None:
    fields = (Field(("Count",), Named("int"), '`json:",omitempty"`'),)

    assert extract_fields(fields).text == "    Count?: number;\n"


def test_invalid_identifiers_are_quoted() -> None:
    fields = (
        Field(("Kind",), Named("string"), '`json:"kind-name"`'),
        Field(("Ref",), Named("string"), '`json:"$ref"`'),
        Field(("Unicode",), Named("string"), '`json:"größe"`'),
    )

    assert extract_fields(fields).text == (
        "    'kind-name': string;\n    '$ref': string;\n    größe: string;\n"
    )
    assert quote_name("it's") == "'it\\'s'"


def test_multiple_names_share_the_type() -> None:
    fields = (Field(("X", "Y"), Named("float64")),)

    assert extract_fields(fields).text == "    X: number;\n    Y: number;\n"


def test_string_option_turns_scalars_into_strings() -> None:
    fields = (
        Field(("ID",), Named("int64"), '`json:"id,string"`'),
        Field(("Name",), Named("string"), '`json:"name,string"`'),
    )

    assert extract_fields(fields).text == "    id: string;\n    name: string;\n"


def test_string_option_leaves_non_scalars_alone() -> None:
    fields = (
        Field(("Active",), Named("bool"), '`json:"active,string"`'),
        Field(("Role",), Named("Role", declared_locally=True), '`json:"role,string"`'),
    )

    assert extract_fields(fields).text == "    active: string;\n    role: Role;\n"


def test_values_outside_the_type_tree_are_rejected() -> None:
    with pytest.raises(AssertionError):
        translate_type("chan int")  # type: ignore[arg-type]


def test_external_imports_are_deduplicated() -> None:
    fields = (
        Field(("Owner",), Selector("common", "Account"), '`json:"owner"`'),
        Field(("Backup",), Pointer(Selector("common", "Account")), '`json:"backup"`'),
        Field(("Tags",), Slice(Named("Tag")), '`json:"tags"`'),
        Field(("Extra",), MapType(Named("string"), Named("Tag")), '`json:"extra"`'),
    )

    rendered = extract_fields(fields)

    assert rendered.imports.external == [ImportRef("common", "Account")]
    assert rendered.imports.internal == ["Tag"]


def test_malformed_tags_name_the_field() -> None:
    fields = (Field(("Broken",), Named("string"), "`json:broken`"),)

    with pytest.raises(MalformedMetadata) as excinfo:
        extract_fields(fields)

    assert excinfo.value.context == ["field Broken"]


def test_malformed_tags_on_unexported_members_are_ignored() -> None:
    fields = (Field(("broken",), Named("string"), "`json:broken`"),)

    assert extract_fields(fields).text == ""


def test_translation_errors_name_the_field() -> None:
    fields = (
        Field(
            ("Meta",),
            InlineStruct(fields=(Field(("Events",), Opaque("chan Event", "channel_type")),)),
            '`json:"meta"`',
        ),
    )

    with pytest.raises(UnsupportedConstruct) as excinfo:
        extract_fields(fields)

    assert excinfo.value.context == ["field Meta", "field Events"]
    assert str(excinfo.value).startswith("field Meta > field Events: ")
