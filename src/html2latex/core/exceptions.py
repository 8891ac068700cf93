"""Custom exception hierarchy for the HTML-to-LaTeX conversion pipeline."""

from __future__ import annotations


class Html2LatexError(RuntimeError):
    """Base exception for conversion failures."""


class ConfigLookupError(Html2LatexError):
    """Raised when an element has no entry in the element configuration."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Element '{name}' is not declared in the element configuration.")
        self.name = name


class OutputWriteError(Html2LatexError):
    """Raised when the output sink rejects a write."""


class CssFileUnreadableError(Html2LatexError):
    """Raised when a CSS file cannot be opened or read."""


class ConfigurationError(Html2LatexError):
    """Raised when a configuration file cannot be loaded or validated."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


__all__ = [
    "ConfigLookupError",
    "ConfigurationError",
    "CssFileUnreadableError",
    "Html2LatexError",
    "OutputWriteError",
    "exception_messages",
]
