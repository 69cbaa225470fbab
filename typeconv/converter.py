"""Per-file Go to TypeScript conversion."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .declarations import emit_declaration
from .errors import TranslationError
from .expander import expand_unit
from .logging import source_logger
from .models import ImportSet, SourceUnit, TranslationResult, TypeDecl
from .parser import GoParser
from .translate import DEFAULT_OPTIONS, TranslationOptions

DECLARATION_SEPARATOR = "\n\n"


def convert_unit(
    unit: SourceUnit,
    options: TranslationOptions = DEFAULT_OPTIONS,
    *,
    synthesized: Sequence[TypeDecl] = (),
    prior_errors: Sequence[TranslationError] = (),
) -> TranslationResult:
    """Translate every declaration of ``unit`` in source order.

    A declaration that fails is left out of the output and its error is
    recorded on the result; the remaining declarations are still emitted.
    """
    names: List[str] = []
    blocks: List[str] = []
    imports = ImportSet()
    errors: List[TranslationError] = list(prior_errors)
    log = source_logger("converter", unit.path)

    for decl in unit.declarations:
        try:
            emitted = emit_declaration(decl, options)
        except TranslationError as exc:
            exc.add_context(f"declaration {decl.name}")
            log.for_declaration(decl.name).warning("Skipping declaration: %s", exc)
            errors.append(exc)
            continue
        names.append(emitted.name)
        blocks.append(emitted.text)
        imports.update(emitted.imports)

    log.debug("Converted %d declaration(s), %d error(s)", len(names), len(errors))
    return TranslationResult(
        path=unit.path,
        declaration_names=tuple(names),
        external_imports=tuple(imports.external),
        internal_imports=tuple(imports.internal),
        text=DECLARATION_SEPARATOR.join(blocks),
        errors=tuple(errors),
        synthesized=tuple(synthesized),
    )


def convert_source(
    source: str,
    path: str = "<memory>",
    options: TranslationOptions = DEFAULT_OPTIONS,
    *,
    expand: bool = False,
    parser: Optional[GoParser] = None,
) -> TranslationResult:
    """Parse and translate Go source text."""
    unit = (parser or GoParser()).parse(source, path)
    return _convert(unit, options, expand=expand)


def convert_file(
    path: Path,
    options: TranslationOptions = DEFAULT_OPTIONS,
    *,
    expand: bool = False,
    parser: Optional[GoParser] = None,
) -> TranslationResult:
    """Parse and translate one Go file.

    Raises ``ParseFailure`` when the file cannot be read or parsed.
    """
    unit = (parser or GoParser()).parse_file(path)
    return _convert(unit, options, expand=expand)


def _convert(unit: SourceUnit, options: TranslationOptions, *, expand: bool) -> TranslationResult:
    if not expand:
        return convert_unit(unit, options)
    expansion = expand_unit(unit)
    return convert_unit(
        expansion.unit,
        options,
        synthesized=expansion.synthesized,
        prior_errors=expansion.errors,
    )


__all__ = ["DECLARATION_SEPARATOR", "convert_file", "convert_source", "convert_unit"]
