"""Translate Go struct declarations into TypeScript interfaces."""

from .converter import convert_file, convert_source, convert_unit
from .declarations import emit_declaration
from .errors import (
    MalformedMetadata,
    OutputFailure,
    ParseFailure,
    TranslationError,
    UnsupportedConstruct,
)
from .expander import expand_unit, synthesize_update_type
from .models import TranslationResult
from .translate import TranslationOptions, extract_fields, translate_type

__all__ = [
    "MalformedMetadata",
    "OutputFailure",
    "ParseFailure",
    "TranslationError",
    "TranslationOptions",
    "TranslationResult",
    "UnsupportedConstruct",
    "convert_file",
    "convert_source",
    "convert_unit",
    "emit_declaration",
    "expand_unit",
    "extract_fields",
    "synthesize_update_type",
    "translate_type",
]
