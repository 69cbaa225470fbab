"""CLI entrypoints for typeconv commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, Sequence

from .config import ConfigError, TypeConvConfig, default_config, load_config
from .converter import convert_file
from .errors import TranslationError
from .expander import expand_unit, persist_expansion, render_go_declaration
from .generator import Generator, render_typescript_module
from .logging import configure_logging, get_logger
from .parser import GoParser


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .typeconv.yml file or the folder holding one.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typeconv",
        description="Translate Go struct declarations into TypeScript interfaces.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write timestamped log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert",
        help="Print the TypeScript module for a single Go file.",
    )
    _add_verbose_option(convert_parser, suppress_default=True)
    _add_config_option(convert_parser)
    convert_parser.add_argument("file", help="Go source file to translate.")
    convert_parser.add_argument(
        "--expand",
        action="store_true",
        help="Include synthesized <Name>Update structs.",
    )

    expand_parser = subparsers.add_parser(
        "expand",
        help="Print the <Name>Update structs synthesized for a Go file.",
    )
    _add_verbose_option(expand_parser, suppress_default=True)
    expand_parser.add_argument("file", help="Go source file to expand.")
    expand_parser.add_argument(
        "--write",
        action="store_true",
        help="Append the synthesized structs to the Go file instead of printing them.",
    )

    generate_parser = subparsers.add_parser(
        "generate",
        help="Translate a folder of Go packages into a folder of TypeScript modules.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root holding .typeconv.yml (defaults to current directory).",
    )
    generate_parser.add_argument("--input", default=None, help="Folder of Go packages.")
    generate_parser.add_argument("--output", default=None, help="Folder for TypeScript output.")
    generate_parser.add_argument(
        "--expand",
        action="store_true",
        default=None,
        help="Synthesize <Name>Update structs before translating.",
    )
    generate_parser.add_argument(
        "--persist-updates",
        action="store_true",
        default=None,
        help="Append synthesized structs to the Go sources (implies --expand).",
    )
    generate_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files translated in parallel per package folder.",
    )
    generate_parser.add_argument(
        "--default-export",
        action="append",
        default=[],
        metavar="FOLDER=NAME",
        help="Declaration exported as default from a folder index (repeatable).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for typeconv commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)
    logger = get_logger("cli")

    if args.command == "convert":
        try:
            config = _load(args.config, Path(args.file).parent)
            result = convert_file(
                Path(args.file), config.translation.options(), expand=bool(args.expand)
            )
        except (ConfigError, TranslationError) as exc:
            parser.exit(1, f"typeconv convert failed: {exc}\n")
        for error in result.errors:
            logger.warning("%s", error)
        sys.stdout.write(render_typescript_module(result))
        if result.errors:
            parser.exit(1)
    elif args.command == "expand":
        source = Path(args.file)
        try:
            expansion = expand_unit(GoParser().parse_file(source))
        except TranslationError as exc:
            parser.exit(1, f"typeconv expand failed: {exc}\n")
        for error in expansion.errors:
            logger.warning("%s", error)
        if args.write:
            try:
                persist_expansion(source, expansion.synthesized)
            except TranslationError as exc:
                parser.exit(1, f"typeconv expand failed: {exc}\n")
            print(f"Appended {len(expansion.synthesized)} update struct(s) to {_relativize(source)}")
        else:
            for decl in expansion.synthesized:
                print(render_go_declaration(decl))
        if expansion.errors:
            parser.exit(1)
    elif args.command == "generate":
        try:
            config = _load(args.config, Path(args.path))
            _apply_overrides(config, args)
            report = Generator(config).run()
        except (ConfigError, ValueError, OSError) as exc:
            parser.exit(1, f"{exc}\n")
        print(
            f"Generated {report.declarations} declaration(s) into "
            f"{_relativize(config.output_dir)}"
        )
        if not report.ok:
            for failure in report.failures:
                print(f"  failed: {_relativize(failure.path)}: {failure.error}", file=sys.stderr)
            parser.exit(1, "typeconv generate finished with errors. Run with --verbose for details.\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load(config_arg: str | None, fallback: Path) -> TypeConvConfig:
    if config_arg:
        return load_config(Path(config_arg))
    if fallback.is_dir():
        return load_config(fallback)
    return default_config(fallback.parent)


def _apply_overrides(config: TypeConvConfig, args: argparse.Namespace) -> None:
    if args.input:
        config.input_dir = Path(args.input).expanduser().resolve()
    if args.output:
        config.output_dir = Path(args.output).expanduser().resolve()
    if args.expand:
        config.expand = True
    if args.persist_updates:
        config.expand = True
        config.persist_updates = True
    if args.workers is not None:
        if args.workers < 1:
            raise ValueError("--workers must be a positive integer")
        config.workers = args.workers
    config.default_exports.update(_parse_default_exports(args.default_export))


def _parse_default_exports(values: Sequence[str]) -> Dict[str, str]:
    exports: Dict[str, str] = {}
    for value in values:
        folder, sep, name = value.partition("=")
        if not sep or not folder or not name:
            raise ValueError(f"Invalid --default-export value {value!r}; expected FOLDER=NAME")
        exports[folder] = name
    return exports


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
