"""Core conversion primitives: configuration, styles, tokenizer and engine."""

from __future__ import annotations

from .config import ConversionConfig, ElementConfig, LinksConversion, StyleConfig, load_config
from .convertor import Convertor, TableState
from .css import CSSParser, CSSParserHandler
from .entities import EntityTable, convert_text, escape_latex_chars
from .exceptions import (
    ConfigLookupError,
    ConfigurationError,
    CssFileUnreadableError,
    Html2LatexError,
    OutputWriteError,
)
from .handler import ParserHandler
from .styles import SelectorKind, StyleRegistry, StyleRule, build_style_registry
from .tags import EndTag, StartTag
from .tokenizer import HtmlEventParser, walk_soup


__all__ = [
    "CSSParser",
    "CSSParserHandler",
    "ConfigLookupError",
    "ConfigurationError",
    "ConversionConfig",
    "Convertor",
    "CssFileUnreadableError",
    "ElementConfig",
    "EndTag",
    "EntityTable",
    "Html2LatexError",
    "HtmlEventParser",
    "LinksConversion",
    "OutputWriteError",
    "ParserHandler",
    "SelectorKind",
    "StartTag",
    "StyleConfig",
    "StyleRegistry",
    "StyleRule",
    "TableState",
    "build_style_registry",
    "convert_text",
    "escape_latex_chars",
    "load_config",
    "walk_soup",
]
