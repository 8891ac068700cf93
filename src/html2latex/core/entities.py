"""LaTeX escaping and character entity resolution for character data."""

from __future__ import annotations

from collections.abc import Mapping
from html.entities import codepoint2name
import logging
import re

from pylatexenc.latexencode import unicode_to_latex


logger = logging.getLogger(__name__)


_BASIC_LATEX_ESCAPE_MAP = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "#": r"\#",
    "$": r"\$",
    "_": r"\_",
    "^": r"\textasciicircum{}",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
}

# Entity references are split out of the text before escaping so the ``#``
# and ``;`` of a reference never reach the escape map.
_ENTITY_PATTERN = re.compile(r"&(#[xX]?[0-9A-Za-z]+|[A-Za-z][A-Za-z0-9]*);")

_ACCENT_NEEDS_BRACES_PATTERN = re.compile(
    r"\\([" + re.escape("`'^\"~=\\.Hrvuck") + r"])\s*([A-Za-z])(?!\{)"
)


def _wrap_accents(payload: str) -> str:
    """Ensure accent macros wrap their payload in braces."""

    def _repl(match: re.Match[str]) -> str:
        command, char = match.groups()
        return f"\\{command}{{{char}}}"

    return _ACCENT_NEEDS_BRACES_PATTERN.sub(_repl, payload)


def escape_latex_chars(text: str, *, legacy_accents: bool = False) -> str:
    """Escape LaTeX special characters in a single pass.

    Each character is substituted at most once, so the backslash produced by
    one replacement is never escaped again by another.
    """
    if not text:
        return text
    escaped = "".join(_BASIC_LATEX_ESCAPE_MAP.get(char, char) for char in text)
    if legacy_accents:
        encoded = unicode_to_latex(escaped, non_ascii_only=True, unknown_char_warning=False)
        return _wrap_accents(encoded)
    return escaped


def _parse_code(reference: str) -> int:
    """Return the code point of a ``#NNN`` or ``#xHH`` reference."""
    digits = reference[1:]
    if digits[:1] in ("x", "X"):
        return int(digits[1:], 16)
    return int(digits, 10)


class EntityTable:
    """Lookup from entity names and code points to LaTeX replacements.

    Keys starting with ``#`` are numeric (``#160`` or ``#xA0``); any other key
    is an entity name, matched case-sensitively.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._named: dict[str, str] = {}
        self._numeric: dict[int, str] = {}
        for key, value in (entries or {}).items():
            if key.startswith("#"):
                self._numeric[_parse_code(key)] = value
            else:
                self._named[key] = value

    def __len__(self) -> int:
        return len(self._named) + len(self._numeric)

    def names(self) -> list[str]:
        return list(self._named)

    def lookup_name(self, name: str) -> str | None:
        return self._named.get(name)

    def lookup_code(self, code: int) -> str | None:
        """Return the replacement of a numeric reference.

        Explicit numeric entries win, then the entry of the matching entity
        name, then printable ASCII characters stand for themselves.
        """
        if code in self._numeric:
            return self._numeric[code]
        name = codepoint2name.get(code)
        if name is not None and name in self._named:
            return self._named[name]
        if 32 <= code < 127:
            return escape_latex_chars(chr(code))
        return None

    def resolve(self, reference: str) -> str | None:
        """Resolve the body of ``&reference;``.

        Raises:
            ValueError: ``reference`` is numeric but not a valid number.
        """
        if reference.startswith("#"):
            return self.lookup_code(_parse_code(reference))
        return self.lookup_name(reference)


def convert_text(
    text: str,
    entities: EntityTable,
    *,
    escape: bool = True,
    legacy_accents: bool = False,
) -> str:
    """Escape ``text`` (unless ``escape`` is false) and resolve its entities.

    Unknown entities and malformed numeric references are logged and left in
    the output unchanged.
    """
    parts: list[str] = []
    last = 0
    for match in _ENTITY_PATTERN.finditer(text):
        chunk = text[last : match.start()]
        parts.append(escape_latex_chars(chunk, legacy_accents=legacy_accents) if escape else chunk)
        reference = match.group(1)
        try:
            replacement = entities.resolve(reference)
        except ValueError:
            logger.warning("Not a number in entity '%s'.", match.group(0))
            replacement = None
        else:
            if replacement is None:
                logger.warning("Unknown character entity '%s'.", match.group(0))
        parts.append(match.group(0) if replacement is None else replacement)
        last = match.end()
    tail = text[last:]
    parts.append(escape_latex_chars(tail, legacy_accents=legacy_accents) if escape else tail)
    return "".join(parts)


__all__ = ["EntityTable", "convert_text", "escape_latex_chars"]
