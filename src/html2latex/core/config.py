"""Configuration models used by the converter.

ElementConfig

`start` (`str`)
: LaTeX emitted verbatim when the element opens. Empty strings emit nothing.

`end` (`str`)
: LaTeX emitted verbatim when the element closes.

`leave_text` (`bool`)
: Character data nested inside the element is neither normalised nor
  escaped; character entities are still resolved.

`ignore_content` (`bool`)
: Character data and images nested inside the element are dropped.

`ignore_styles` (`bool`)
: CSS-like styles are never applied to the element.

StyleConfig

`selector` (`str`)
: `tag`, `.class`, `tag.class`, `#id` or `tag#id`. Comma-separated lists are
  accepted.

`start` / `end` (`str`)
: LaTeX wrapped around the element content when the selector matches.

ConversionConfig

`links` (`LinksConversion`)
: How anchors are rendered: `footnotes`, `biblio`, `hypertex` or `ignore`.

`make_cmds_from_css` (`bool`)
: Emit one `\\newcommand` per registered style at body start and wrap
  elements with the generated macros instead of the raw start/end text.

`elements` (`dict[str, ElementConfig]`)
: Per-element start/end strings and flags, keyed by lowercase element name.

`entities` (`dict[str, str]`)
: Character entity replacements keyed by entity name (`amp`) or by `#` and
  the decimal code point (`#160`).

`styles` (`list[StyleConfig]`)
: Explicit selector wraps registered before any CSS file is parsed.

`css_file` (`Path | None`)
: CSS-like file parsed once to populate the style registry.

`abort_on_write_error` (`bool`)
: Abort the conversion when the output sink rejects a write. When `False`
  the failure is logged and the conversion keeps going.

`legacy_accents` (`bool`)
: Encode non-ASCII characters of escaped text with LaTeX accent macros.

`legacy_hline_search` (`bool`)
: Truncate bordered tables at the last literal `\\hline` of the buffered
  body instead of tracking the trailing border line explicitly.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from .exceptions import ConfigLookupError, ConfigurationError


DEFAULT_CONFIG_RESOURCE = "config.yml"


class LinksConversion(str, Enum):
    """Rendering policy for anchor elements."""

    FOOTNOTES = "footnotes"
    BIBLIO = "biblio"
    HYPERTEX = "hypertex"
    IGNORE = "ignore"


class ElementConfig(BaseModel):
    """Conversion settings of a single HTML element."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    start: str = ""
    end: str = ""
    leave_text: bool = False
    ignore_content: bool = False
    ignore_styles: bool = False


class StyleConfig(BaseModel):
    """Explicit LaTeX wrap attached to a selector."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    selector: str
    start: str = ""
    end: str = ""


class ConversionConfig(BaseModel):
    """Settings of one conversion run."""

    model_config = ConfigDict(extra="forbid")

    links: LinksConversion = LinksConversion.FOOTNOTES
    make_cmds_from_css: bool = False
    elements: dict[str, ElementConfig] = Field(default_factory=dict)
    entities: dict[str, str] = Field(default_factory=dict)
    styles: list[StyleConfig] = Field(default_factory=list)
    css_file: Path | None = None
    abort_on_write_error: bool = True
    legacy_accents: bool = False
    legacy_hline_search: bool = False

    def element(self, name: str) -> ElementConfig | None:
        """Return the configuration of ``name`` or ``None`` when undeclared."""
        return self.elements.get(name.lower())

    def require_element(self, name: str) -> ElementConfig:
        """Return the configuration of ``name`` or raise :class:`ConfigLookupError`."""
        item = self.element(name)
        if item is None:
            raise ConfigLookupError(name)
        return item


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` one level deep for mapping values."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def _read_yaml(text: str, origin: str) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {origin}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration in {origin} must be a mapping.")
    return payload


def default_config_data() -> dict[str, Any]:
    """Return the raw mapping of the bundled default configuration."""
    text = resources.files("html2latex.data").joinpath(DEFAULT_CONFIG_RESOURCE).read_text(
        encoding="utf-8"
    )
    return _read_yaml(text, DEFAULT_CONFIG_RESOURCE)


def load_config(path: Path | str | None = None, **overrides: Any) -> ConversionConfig:
    """Load the default configuration, merge ``path`` over it and apply ``overrides``.

    Element and entity tables are merged key by key so a user file only needs
    to declare the entries it changes.
    """
    data = default_config_data()
    if path is not None:
        config_path = Path(path)
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read configuration file '{config_path}'.") from exc
        data = _merge(data, _read_yaml(text, str(config_path)))
    data = _merge(data, {key: value for key, value in overrides.items() if value is not None})
    try:
        return ConversionConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = [
    "ConversionConfig",
    "ElementConfig",
    "LinksConversion",
    "StyleConfig",
    "default_config_data",
    "load_config",
]
