"""Exception hierarchy for Go to TypeScript translation failures."""

from __future__ import annotations

from typing import List, Sequence


class TranslationError(RuntimeError):
    """Base class for failures raised while translating Go declarations.

    Errors travel up the recursive translation with a context chain that names
    the declaration and field they came from, outermost first.
    """

    def __init__(self, message: str, *, context: Sequence[str] = ()) -> None:
        self.message = message
        self.context: List[str] = list(context)
        super().__init__(self._render())

    def add_context(self, label: str) -> "TranslationError":
        """Prepend ``label`` to the context chain and return the same error."""
        self.context.insert(0, label)
        self.args = (self._render(),)
        return self

    def _render(self) -> str:
        if not self.context:
            return self.message
        return f"{' > '.join(self.context)}: {self.message}"


class ParseFailure(TranslationError):
    """Raised when a Go source file cannot be read or parsed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class OutputFailure(TranslationError):
    """Raised when a translated module or a persisted Go file cannot be written."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class UnsupportedConstruct(TranslationError):
    """Raised for a type expression or member shape outside the supported set."""

    def __init__(self, text: str, kind: str, message: str | None = None) -> None:
        self.text = text
        self.kind = kind
        detail = message or "unsupported construct"
        super().__init__(f"{detail}: {text!r} ({kind})")


class MalformedMetadata(TranslationError):
    """Raised when a struct tag cannot be parsed."""

    def __init__(self, tag: str, reason: str) -> None:
        self.tag = tag
        self.reason = reason
        super().__init__(f"malformed struct tag {tag!r}: {reason}")


__all__ = [
    "MalformedMetadata",
    "OutputFailure",
    "ParseFailure",
    "TranslationError",
    "UnsupportedConstruct",
]
