"""Directory-level generation of TypeScript modules and index files."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import TypeConvConfig
from .converter import convert_unit
from .errors import OutputFailure, TranslationError
from .expander import expand_unit, persist_expansion
from .logging import get_logger, source_logger
from .models import ImportRef, TranslationResult, TypeDecl
from .parser import GoParser

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    "vendor",
    "node_modules",
    "testdata",
}

INDEX_FILENAME = "index.ts"


@dataclass
class FileFailure:
    path: Path
    error: TranslationError


@dataclass
class FileOutcome:
    """Result of translating one Go file."""

    source: Path
    target: Path
    result: Optional[TranslationResult] = None
    failure: Optional[FileFailure] = None


@dataclass
class GenerationReport:
    """Summary of a generator run."""

    written: List[Path] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)
    declarations: int = 0
    declaration_errors: int = 0
    default_exports: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.declaration_errors


class Generator:
    """Translates a tree of Go packages into a tree of TypeScript modules.

    Every immediate sub-folder of the input directory is treated as one Go
    package and mirrored as a folder of ``.ts`` files plus an ``index.ts``.
    """

    def __init__(self, config: TypeConvConfig) -> None:
        self.config = config
        self.options = config.translation.options()
        self.logger = get_logger("generator")

    def run(self) -> GenerationReport:
        input_dir = self.config.input_dir
        output_dir = self.config.output_dir
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")

        self.logger.info("Generating TypeScript from %s into %s", input_dir, output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        report = GenerationReport()

        main_index: List[str] = []
        for folder in self._package_folders():
            default_export = self._generate_folder(folder, report)
            if default_export:
                main_index.append(f'import {default_export} from "./{folder.name}";\n')
                report.default_exports.append(default_export)

        main_index.append(f"\nexport {{ {', '.join(report.default_exports)} }}\n")
        main_index_path = output_dir / INDEX_FILENAME
        main_index_path.write_text("".join(main_index), encoding="utf-8")
        report.written.append(main_index_path)

        self.logger.info(
            "Wrote %d file(s), %d declaration(s), %d failure(s)",
            len(report.written),
            report.declarations,
            len(report.failures) + report.declaration_errors,
        )
        return report

    def _package_folders(self) -> List[Path]:
        output_dir = self.config.output_dir.resolve()
        folders: List[Path] = []
        for entry in sorted(self.config.input_dir.iterdir()):
            if not entry.is_dir() or entry.name in _EXCLUDED_DIRS:
                continue
            if entry.resolve() == output_dir:
                continue
            if self._is_excluded(entry):
                self.logger.debug("Excluding folder %s", entry)
                continue
            folders.append(entry)
        return folders

    def _source_files(self, folder: Path) -> List[Path]:
        files = []
        for entry in sorted(folder.iterdir()):
            if not entry.is_file() or entry.suffix != ".go":
                continue
            if entry.name.endswith("_test.go") or self._is_excluded(entry):
                continue
            files.append(entry)
        return files

    def _is_excluded(self, path: Path) -> bool:
        relative = path.relative_to(self.config.input_dir).as_posix()
        return any(fnmatchcase(relative, pattern) for pattern in self.config.exclude_paths)

    def _generate_folder(self, folder: Path, report: GenerationReport) -> Optional[str]:
        target_dir = self.config.output_dir / folder.name
        target_dir.mkdir(parents=True, exist_ok=True)

        sources = self._source_files(folder)
        self.logger.debug("Translating %d file(s) in %s", len(sources), folder.name)
        outcomes = self._translate_all(sources, target_dir)

        wanted_default = self.config.default_exports.get(folder.name)
        default_export: Optional[str] = None
        index_lines: List[str] = []
        for outcome in outcomes:
            result = outcome.result
            if result is None:
                if outcome.failure is not None:
                    source_logger("generator", outcome.source).error(
                        "Failed to translate: %s", outcome.failure.error
                    )
                    report.failures.append(outcome.failure)
                continue
            report.written.append(outcome.target)
            report.declarations += len(result.declaration_names)
            report.declaration_errors += len(result.errors)
            if not result.declaration_names:
                continue

            module = f"./{outcome.target.stem}"
            index_lines.append(f'export {{ {", ".join(result.declaration_names)} }} from "{module}";\n\n')
            if wanted_default and wanted_default in result.declaration_names:
                default_export = wanted_default
                index_lines.append(f'import {{ {wanted_default} }} from "{module}";\n')
                index_lines.append(f"export default {wanted_default};\n\n")

        if wanted_default and default_export is None:
            self.logger.warning(
                "Default export %s not found in folder %s", wanted_default, folder.name
            )

        index_path = target_dir / INDEX_FILENAME
        index_path.write_text("".join(index_lines), encoding="utf-8")
        report.written.append(index_path)
        return default_export

    def _translate_all(self, sources: Sequence[Path], target_dir: Path) -> List[FileOutcome]:
        jobs = [(source, target_dir / f"{source.stem}.ts") for source in sources]
        if self.config.workers <= 1 or len(jobs) <= 1:
            parser = GoParser()
            return [self._translate_one(source, target, parser) for source, target in jobs]
        with ThreadPoolExecutor(max_workers=self.config.workers, thread_name_prefix="typeconv") as pool:
            return list(pool.map(lambda job: self._translate_one(*job), jobs))

    def _translate_one(
        self, source: Path, target: Path, parser: Optional[GoParser] = None
    ) -> FileOutcome:
        parser = parser or GoParser()
        try:
            unit = parser.parse_file(source)
            synthesized: Tuple[TypeDecl, ...] = ()
            prior_errors: Tuple[TranslationError, ...] = ()
            if self.config.expand:
                expansion = expand_unit(unit)
                if self.config.persist_updates:
                    persist_expansion(source, expansion.synthesized)
                unit = expansion.unit
                synthesized = expansion.synthesized
                prior_errors = expansion.errors
            result = convert_unit(
                unit, self.options, synthesized=synthesized, prior_errors=prior_errors
            )
            _write_module(target, result)
        except TranslationError as exc:
            return FileOutcome(source=source, target=target, failure=FileFailure(source, exc))

        source_logger("generator", source).debug("Wrote %s", target)
        return FileOutcome(source=source, target=target, result=result)


def _write_module(target: Path, result: TranslationResult) -> None:
    try:
        target.write_text(render_typescript_module(result), encoding="utf-8")
    except OSError as exc:
        raise OutputFailure(str(target), f"cannot write module: {exc}") from exc


def build_import_map(imports: Iterable[ImportRef]) -> Dict[str, List[str]]:
    """Group external imports by package, keeping first-seen order."""
    grouped: Dict[str, Dict[str, None]] = {}
    for ref in imports:
        grouped.setdefault(ref.package, {}).setdefault(ref.symbol, None)
    return {package: list(symbols) for package, symbols in grouped.items()}


def render_typescript_module(result: TranslationResult, *, package_prefix: str = "../") -> str:
    """Render a translation result as the contents of a ``.ts`` module."""
    parts: List[str] = []

    import_map = build_import_map(result.external_imports)
    if import_map:
        for package, symbols in import_map.items():
            parts.append(f'import {{ {", ".join(symbols)} }} from "{package_prefix}{package}";\n')
        parts.append("\n")

    if result.internal_imports:
        parts.append(f'import {{ {", ".join(result.internal_imports)} }} from ".";\n')
        parts.append("\n")

    if result.text:
        parts.append(f"{result.text}\n")
    return "".join(parts)


__all__ = [
    "FileFailure",
    "FileOutcome",
    "GenerationReport",
    "Generator",
    "build_import_map",
    "render_typescript_module",
]
