"""Logging for typeconv runs.

Records emitted while translating a Go file carry the file and, when known,
the declaration they concern, so per-file and per-declaration failures can be
told apart in the output::

    [typeconv] WARNING typeconv.converter (users/user.go > Worker): field Jobs: ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

_LOGGER_NAME = "typeconv"

CONSOLE_FORMAT = "[typeconv] %(levelname)s %(name)s%(location)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s%(location)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the typeconv hierarchy (``typeconv.<name>``)."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class SourceLogger(logging.LoggerAdapter):
    """Attaches the Go source path to every record.

    A ``declaration`` passed through ``extra`` on a single call is merged with
    the adapter's own fields instead of replacing them.
    """

    def __init__(
        self, logger: logging.Logger, source: str, declaration: str | None = None
    ) -> None:
        extra = {"source": source}
        if declaration:
            extra["declaration"] = declaration
        super().__init__(logger, extra)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def for_declaration(self, declaration: str) -> "SourceLogger":
        return SourceLogger(self.logger, self.extra["source"], declaration)


def source_logger(name: str, source: str | Path) -> SourceLogger:
    """Return a ``typeconv.<name>`` logger bound to one Go source file."""
    return SourceLogger(get_logger(name), str(source))


class _LocationFilter(logging.Filter):
    # Renders the optional source/declaration fields into %(location)s.
    def filter(self, record: logging.LogRecord) -> bool:
        source: Optional[str] = getattr(record, "source", None)
        declaration: Optional[str] = getattr(record, "declaration", None)
        if source and declaration:
            record.location = f" ({source} > {declaration})"
        elif source:
            record.location = f" ({source})"
        else:
            record.location = ""
        return True


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, optionally, a timestamped file handler.

    Repeated calls replace (and close) the handlers installed by earlier ones.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    formats = [CONSOLE_FORMAT]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        formats.append(FILE_FORMAT)

    for handler, fmt in zip(handlers, formats):
        handler.setLevel(level)
        handler.addFilter(_LocationFilter())
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    return logger


__all__ = [
    "CONSOLE_FORMAT",
    "FILE_FORMAT",
    "SourceLogger",
    "configure_logging",
    "get_logger",
    "source_logger",
]
