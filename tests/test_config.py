"""Tests for typeconv.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from typeconv.config import ConfigError, TypeConvConfig, load_config
from typeconv.translate import DEFAULT_INDENT, DEFAULT_SCALAR_SELECTORS


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TypeConvConfig)
    assert config.root == tmp_path.resolve()
    assert config.input_dir == tmp_path.resolve()
    assert config.output_dir == tmp_path.resolve() / "types"
    assert config.expand is False
    assert config.persist_updates is False
    assert config.workers == 1
    assert config.exclude_paths == []
    assert config.default_exports == {}
    assert config.translation.indent == DEFAULT_INDENT
    assert config.translation.scalar_selectors == dict(DEFAULT_SCALAR_SELECTORS)


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".typeconv.yml"
    config_file.write_text(
        """
input_dir: models
output_dir: web/src/types
expand: true
persist_updates: "yes"
workers: 4
exclude_paths:
  - "legacy/*"
  - "internal"
default_exports:
  users: User
  billing: Invoice
translation:
  indent: 2
  generic_placeholder: Item
  optional_pointer_union: true
  scalar_selectors:
    uuid.UUID: string
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.input_dir == (tmp_path / "models").resolve()
    assert config.output_dir == (tmp_path / "web/src/types").resolve()
    assert config.expand is True
    assert config.persist_updates is True
    assert config.workers == 4
    assert config.exclude_paths == ["legacy/*", "internal"]
    assert config.default_exports == {"users": "User", "billing": "Invoice"}
    assert config.translation.indent == "  "
    assert config.translation.generic_placeholder == "Item"
    assert config.translation.optional_pointer_union is True
    assert config.translation.scalar_selectors == {
        "time.Time": "string",
        "decimal.Decimal": "number",
        "uuid.UUID": "string",
    }


def test_translation_options_mirror_config(tmp_path: Path) -> None:
    (tmp_path / ".typeconv.yml").write_text(
        'translation:\n  indent: "\\t"\n  optional_pointer_union: true\n',
        encoding="utf-8",
    )

    options = load_config(tmp_path).translation.options()

    assert options.indent == "\t"
    assert options.optional_pointer_union is True
    assert options.generic_placeholder == "T"


def test_load_config_accepts_a_file_path(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("workers: 2\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.workers == 2
    assert config.root == tmp_path.resolve()


def test_empty_config_file_gives_defaults(tmp_path: Path) -> None:
    (tmp_path / ".typeconv.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.workers == 1
    assert config.output_dir == tmp_path.resolve() / "types"


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".typeconv.yml").write_text("- one\n- two\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_yaml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".typeconv.yml").write_text("translation: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert ".typeconv.yml" in str(excinfo.value)


def test_non_positive_workers_are_rejected(tmp_path: Path) -> None:
    (tmp_path / ".typeconv.yml").write_text("workers: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
