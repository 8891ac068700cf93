"""Style registry mapping element, class and id selectors to LaTeX wraps.

Rules live in three independent namespaces. Element rules are keyed by the
element name; class and id rules are additionally keyed by the element they
are scoped to (an empty owner matches any element). Registering a rule with
an existing identity silently replaces it.

The registry is filled once before a conversion starts and is only read
afterwards, so one instance may be shared between conversions that use the
same styling.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
import logging
import re
from typing import TYPE_CHECKING

from slugify import slugify

from .css import CSSParser


if TYPE_CHECKING:  # pragma: no cover - typing only
    from pathlib import Path

    from .config import ConversionConfig, ElementConfig
    from .tags import StartTag


logger = logging.getLogger(__name__)


class SelectorKind(Enum):
    """Namespaces of the style cascade, in wrapping order."""

    ELEMENT = "element"
    CLASS = "class"
    ID = "id"


@dataclass(frozen=True, slots=True)
class StyleRule:
    """LaTeX wrap registered for one selector."""

    kind: SelectorKind
    value: str
    owner: str = ""
    start: str = ""
    end: str = ""
    properties: Mapping[str, str] = field(default_factory=dict)
    command_name: str = ""

    @property
    def name(self) -> str:
        """Return the selector text the rule was registered under."""
        if self.kind is SelectorKind.ELEMENT:
            return self.value
        marker = "." if self.kind is SelectorKind.CLASS else "#"
        return f"{self.owner}{marker}{self.value}"


_DIGIT_NAMES = ("Zero", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine")


def _spell_digits(text: str) -> str:
    return "".join(_DIGIT_NAMES[int(char)] if char.isdigit() else char for char in text)


def _macro_part(text: str) -> str:
    """Return ``text`` as a capitalised run of ASCII letters."""
    slug = _spell_digits(slugify(text, separator="", lowercase=False))
    letters = re.sub(r"[^A-Za-z]", "", slug)
    return letters[:1].upper() + letters[1:]


def base_command_name(kind: SelectorKind, value: str, owner: str = "") -> str:
    """Return the readable macro name of a selector, e.g. ``\\cssPClassNote``.

    Unscoped class rules keep the bare class name (``.note`` gives
    ``\\cssNote``). Names are not guaranteed unique; the registry appends an
    ordinal to a name already in use.
    """
    parts = [_macro_part(owner)]
    if kind is SelectorKind.CLASS and owner:
        parts.append("Class")
    elif kind is SelectorKind.ID:
        parts.append("Id")
    parts.append(_macro_part(value))
    return "\\css" + ("".join(parts) or "Style")


StyleTriple = tuple[StyleRule | None, StyleRule | None, StyleRule | None]

_EMPTY: StyleTriple = (None, None, None)

_SIMPLE_SELECTOR = re.compile(
    r"^(?P<element>[A-Za-z][A-Za-z0-9-]*)?(?:(?P<marker>[.#])(?P<value>[A-Za-z_-][\w-]*))?$"
)


class StyleRegistry:
    """Container of the element/class/id style rules of one configuration."""

    def __init__(self) -> None:
        self._rules: dict[tuple[SelectorKind, str, str], StyleRule] = {}
        self._commands: dict[tuple[SelectorKind, str, str], str] = {}

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[StyleRule]:
        return iter(self._rules.values())

    def register_style(
        self,
        kind: SelectorKind,
        value: str,
        owner: str = "",
        start: str = "",
        end: str = "",
        properties: Mapping[str, str] | None = None,
    ) -> StyleRule:
        """Register a rule, replacing any rule with the same identity.

        A replaced rule keeps the macro name of the rule it replaces.
        """
        if kind is SelectorKind.ELEMENT:
            value, owner = value.lower(), ""
        else:
            owner = owner.lower()
        key = (kind, value, owner)
        rule = StyleRule(
            kind=kind,
            value=value,
            owner=owner,
            start=start,
            end=end,
            properties=dict(properties or {}),
            command_name=self._command_for(key),
        )
        self._rules[key] = rule
        return rule

    def _command_for(self, key: tuple[SelectorKind, str, str]) -> str:
        command = self._commands.get(key)
        if command is not None:
            return command
        kind, value, owner = key
        base = base_command_name(kind, value, owner)
        used = set(self._commands.values())
        command, ordinal = base, 1
        while command in used:
            ordinal += 1
            command = base + _spell_digits(str(ordinal))
        self._commands[key] = command
        return command

    def register_selector(
        self,
        selector: str,
        start: str,
        end: str,
        properties: Mapping[str, str] | None = None,
    ) -> list[StyleRule]:
        """Register ``start``/``end`` for every simple selector in ``selector``."""
        registered: list[StyleRule] = []
        for part in selector.split(","):
            parsed = parse_selector(part)
            if parsed is None:
                logger.debug("Unsupported CSS selector '%s' ignored.", part.strip())
                continue
            kind, value, owner = parsed
            registered.append(self.register_style(kind, value, owner, start, end, properties))
        return registered

    def lookup_element_style(self, element: str) -> StyleRule | None:
        return self._rules.get((SelectorKind.ELEMENT, element.lower(), ""))

    def lookup_class_style(self, class_name: str, element: str) -> StyleRule | None:
        """Return the class rule scoped to ``element``, else the unscoped one."""
        for owner in (element.lower(), ""):
            rule = self._rules.get((SelectorKind.CLASS, class_name, owner))
            if rule is not None:
                return rule
        return None

    def lookup_id_style(self, identifier: str, element: str) -> StyleRule | None:
        """Return the id rule scoped to ``element``, else the unscoped one."""
        for owner in (element.lower(), ""):
            rule = self._rules.get((SelectorKind.ID, identifier, owner))
            if rule is not None:
                return rule
        return None

    def find_styles_for(
        self, tag: StartTag, element_config: ElementConfig | None = None
    ) -> StyleTriple:
        """Return the element, class and id rules matching ``tag``, in that order."""
        if element_config is not None and element_config.ignore_styles:
            return _EMPTY

        class_style = None
        class_attr = tag.get("class")
        if class_attr:
            candidates = [class_attr, *class_attr.split()]
            for candidate in candidates:
                class_style = self.lookup_class_style(candidate, tag.name)
                if class_style is not None:
                    break

        id_style = None
        id_attr = tag.get("id")
        if id_attr:
            id_style = self.lookup_id_style(id_attr, tag.name)

        return (self.lookup_element_style(tag.name), class_style, id_style)


def parse_selector(selector: str) -> tuple[SelectorKind, str, str] | None:
    """Split a simple selector into ``(kind, value, owner)``."""
    match = _SIMPLE_SELECTOR.match(selector.strip())
    if match is None:
        return None
    element = (match.group("element") or "").lower()
    marker = match.group("marker")
    if marker is None:
        if not element:
            return None
        return SelectorKind.ELEMENT, element, ""
    kind = SelectorKind.CLASS if marker == "." else SelectorKind.ID
    return kind, match.group("value"), element


# ---------------------------------------------------------------------------
# CSS declarations to LaTeX

_FONT_SIZES = {
    "xx-small": r"\tiny",
    "x-small": r"\scriptsize",
    "small": r"\small",
    "medium": r"\normalsize",
    "large": r"\large",
    "x-large": r"\Large",
    "xx-large": r"\LARGE",
    "xxx-large": r"\Huge",
    "smaller": r"\small",
    "larger": r"\large",
}

_ALIGN_ENVIRONMENTS = {
    "center": "center",
    "left": "flushleft",
    "right": "flushright",
}

_HEX_COLOR = re.compile(r"^#(?P<hex>[0-9a-f]{3}|[0-9a-f]{6})$")


def _is_bold(value: str) -> bool:
    if value in ("bold", "bolder"):
        return True
    return value.isdigit() and int(value) >= 600


def _color_wrap(value: str) -> tuple[str, str] | None:
    match = _HEX_COLOR.match(value)
    if match is not None:
        digits = match.group("hex")
        if len(digits) == 3:
            digits = "".join(char * 2 for char in digits)
        return f"\\textcolor[HTML]{{{digits.upper()}}}{{", "}"
    if re.fullmatch(r"[a-z]+", value):
        return f"\\textcolor{{{value}}}{{", "}"
    return None


def css_to_latex(properties: Mapping[str, str]) -> tuple[str, str]:
    """Translate CSS declarations into a LaTeX ``(start, end)`` wrap.

    Declarations are applied outermost first in a fixed order; unknown
    properties and values are ignored.
    """
    wraps: list[tuple[str, str]] = []

    align = _ALIGN_ENVIRONMENTS.get(properties.get("text-align", ""))
    if align:
        wraps.append((f"\\begin{{{align}}}\n", f"\n\\end{{{align}}}\n"))

    size = _FONT_SIZES.get(properties.get("font-size", ""))
    if size:
        wraps.append((f"{{{size} ", "}"))

    family = properties.get("font-family", "")
    if "monospace" in family or "courier" in family:
        wraps.append(("\\texttt{", "}"))
    elif "sans-serif" in family:
        wraps.append(("\\textsf{", "}"))
    elif "serif" in family:
        wraps.append(("\\textrm{", "}"))

    if _is_bold(properties.get("font-weight", "")):
        wraps.append(("\\textbf{", "}"))

    if properties.get("font-style") in ("italic", "oblique"):
        wraps.append(("\\textit{", "}"))

    if properties.get("font-variant") == "small-caps":
        wraps.append(("\\textsc{", "}"))

    decoration = properties.get("text-decoration", "")
    if "underline" in decoration:
        wraps.append(("\\underline{", "}"))
    if "line-through" in decoration:
        wraps.append(("\\sout{", "}"))

    color = _color_wrap(properties.get("color", ""))
    if color is not None:
        wraps.append(color)

    start = "".join(opening for opening, _ in wraps)
    end = "".join(closing for _, closing in reversed(wraps))
    return start, end


class RegistryCSSHandler:
    """CSS parser handler that turns parsed blocks into registry rules."""

    def __init__(self, registry: StyleRegistry) -> None:
        self.registry = registry

    def new_style(self, selector: str, properties: Mapping[str, str]) -> None:
        start, end = css_to_latex(properties)
        self.registry.register_selector(selector, start, end, properties)


def make_command_definitions(rules: Iterable[StyleRule]) -> str:
    """Return one ``\\newcommand`` per rule, named by :attr:`StyleRule.command_name`."""
    lines = [
        f"\\newcommand{{{rule.command_name}}}[1]{{{rule.start}#1{rule.end}}}" for rule in rules
    ]
    if not lines:
        return ""
    return "\n" + "\n".join(lines) + "\n"


def build_style_registry(
    config: ConversionConfig, css_path: Path | str | None = None
) -> StyleRegistry:
    """Create a registry from the configured styles and an optional CSS file.

    Styles listed in the configuration are registered first so a CSS file can
    override them. ``css_path`` defaults to ``config.css_file``.
    """
    registry = StyleRegistry()
    for style in config.styles:
        registry.register_selector(style.selector, style.start, style.end)

    path = css_path if css_path is not None else config.css_file
    if path:
        CSSParser().parse_file(path, RegistryCSSHandler(registry))
    return registry


__all__ = [
    "RegistryCSSHandler",
    "SelectorKind",
    "StyleRegistry",
    "StyleRule",
    "StyleTriple",
    "base_command_name",
    "build_style_registry",
    "css_to_latex",
    "make_command_definitions",
    "parse_selector",
]
