"""Configuration loading for typeconv (.typeconv.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .translate import (
    DEFAULT_GENERIC_PLACEHOLDER,
    DEFAULT_INDENT,
    DEFAULT_SCALAR_SELECTORS,
    TranslationOptions,
)

CONFIG_FILENAME = ".typeconv.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TranslationConfig:
    """Output formatting settings from the ``translation`` section."""

    indent: str = DEFAULT_INDENT
    generic_placeholder: str = DEFAULT_GENERIC_PLACEHOLDER
    optional_pointer_union: bool = False
    scalar_selectors: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SCALAR_SELECTORS)
    )

    def options(self) -> TranslationOptions:
        return TranslationOptions(
            indent=self.indent,
            generic_placeholder=self.generic_placeholder,
            optional_pointer_union=self.optional_pointer_union,
            scalar_selectors=dict(self.scalar_selectors),
        )


@dataclass
class TypeConvConfig:
    """Represents the settings defined in .typeconv.yml."""

    root: Path
    input_dir: Path
    output_dir: Path
    expand: bool = False
    persist_updates: bool = False
    workers: int = 1
    exclude_paths: List[str] = field(default_factory=list)
    default_exports: Dict[str, str] = field(default_factory=dict)
    translation: TranslationConfig = field(default_factory=TranslationConfig)


def default_config(root: Path) -> TypeConvConfig:
    root = root.resolve()
    return TypeConvConfig(root=root, input_dir=root, output_dir=root / "types")


def load_config(config_path: Path) -> TypeConvConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return default_config(root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = default_config(root)

    input_dir = _as_str(data.get("input_dir"))
    if input_dir:
        config.input_dir = (root / input_dir).resolve()
    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = (root / output_dir).resolve()

    config.expand = _as_bool(data.get("expand")) or False
    config.persist_updates = _as_bool(data.get("persist_updates")) or False
    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError("workers must be a positive integer")
        config.workers = workers
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.default_exports = _as_str_dict(data.get("default_exports"))

    translation_data = _as_dict(data.get("translation"))
    if translation_data:
        translation = config.translation
        indent = translation_data.get("indent")
        if isinstance(indent, int) and not isinstance(indent, bool):
            translation.indent = " " * indent
        elif isinstance(indent, str):
            translation.indent = indent
        placeholder = _as_str(translation_data.get("generic_placeholder"))
        if placeholder:
            translation.generic_placeholder = placeholder
        translation.optional_pointer_union = (
            _as_bool(translation_data.get("optional_pointer_union")) or False
        )
        translation.scalar_selectors.update(
            _as_str_dict(translation_data.get("scalar_selectors"))
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


def _as_str_dict(value: Any) -> Dict[str, str]:
    mapping = _as_dict(value)
    return {str(key): str(item) for key, item in mapping.items() if _as_str(item) is not None}


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "TranslationConfig",
    "TypeConvConfig",
    "default_config",
    "load_config",
]
