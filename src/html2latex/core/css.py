"""Parser for the CSS-like style files.

The grammar is informal: ``selector { property: value; ... }`` blocks with
C-style ``/* */`` comments. Comments are removed character by character
before blocks are split, so a comment inside a declaration disappears too.
Every ``}`` ends a block. Malformed blocks and declarations are dropped
silently; an unreadable file is logged and yields whatever was parsed so far.
"""

from __future__ import annotations

from collections.abc import Mapping
import io
import logging
from pathlib import Path
from typing import IO, Protocol

from .exceptions import CssFileUnreadableError


logger = logging.getLogger(__name__)

_CHUNK_SIZE = 4096


class CSSParserHandler(Protocol):
    """Receiver of the styles found by :class:`CSSParser`."""

    def new_style(self, selector: str, properties: Mapping[str, str]) -> None: ...


class CSSParser:
    """Split a CSS-like stream into styles and forward them to a handler."""

    def parse(self, stream: IO[str] | IO[bytes], handler: CSSParserHandler) -> None:
        """Parse ``stream`` and call ``handler.new_style`` once per block.

        Read errors stop the parsing early; they are logged and never raised.
        """
        try:
            self._do_parsing(_as_text(stream), handler)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("%s", CssFileUnreadableError(f"Cannot read CSS stream: {exc}"))

    def parse_string(self, text: str, handler: CSSParserHandler) -> None:
        self.parse(io.StringIO(text), handler)

    def parse_file(self, path: Path | str, handler: CSSParserHandler) -> None:
        """Parse the CSS file at ``path``; a missing file only logs a warning."""
        css_path = Path(path)
        try:
            with css_path.open("r", encoding="utf-8") as stream:
                self.parse(stream, handler)
        except OSError as exc:
            logger.warning(
                "%s", CssFileUnreadableError(f"Cannot open CSS file '{css_path}': {exc.strerror}")
            )

    def _do_parsing(self, stream: IO[str], handler: CSSParserHandler) -> None:
        buffer: list[str] = []
        in_comment = False
        previous = ""
        while chunk := stream.read(_CHUNK_SIZE):
            for char in chunk:
                if in_comment:
                    if previous == "*" and char == "/":
                        in_comment = False
                        previous = ""
                    else:
                        previous = char
                    continue
                if char == "*" and buffer and buffer[-1] == "/":
                    buffer.pop()
                    in_comment = True
                    previous = ""
                    continue
                buffer.append(char)
                if char == "}":
                    block = "".join(buffer)
                    logger.debug("CSS block: %s", block.replace("\n", " "))
                    self._parse_style(block, handler)
                    buffer.clear()

    @staticmethod
    def _parse_style(block: str, handler: CSSParserHandler) -> None:
        selector, separator, body = block.partition("{")
        if not separator:
            return
        selector = _trailing_selector(selector)
        if body.endswith("}"):
            body = body[:-1]
        body = body.replace("\\}", "").strip()

        properties: dict[str, str] = {}
        for declaration in body.split(";"):
            parts = declaration.split(":")
            if len(parts) != 2:
                continue
            properties[parts[0].strip().lower()] = parts[1].strip().lower()

        handler.new_style(selector.strip(), properties)


def _trailing_selector(text: str) -> str:
    """Drop leftovers of an unterminated block from the text before ``{``.

    The selector starts after the last ``;`` and on the last line, unless the
    lines before it end with ``,`` and so continue a selector list.
    """
    lines = [line for line in text.rsplit(";", 1)[-1].splitlines() if line.strip()]
    if not lines:
        return ""
    kept = [lines.pop()]
    while lines and lines[-1].rstrip().endswith(","):
        kept.insert(0, lines.pop())
    return "\n".join(kept)


def _as_text(stream: IO[str] | IO[bytes]) -> IO[str]:
    if isinstance(stream, io.TextIOBase):
        return stream
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return io.TextIOWrapper(stream, encoding="utf-8")
    return stream  # type: ignore[return-value]


__all__ = ["CSSParser", "CSSParserHandler"]
