"""Primary public API for html2latex."""

from __future__ import annotations

from html2latex.api import convert, convert_file, convert_stream
from html2latex.core.config import (
    ConversionConfig,
    ElementConfig,
    LinksConversion,
    StyleConfig,
    load_config,
)
from html2latex.core.convertor import Convertor
from html2latex.core.css import CSSParser
from html2latex.core.handler import ParserHandler
from html2latex.core.styles import StyleRegistry, build_style_registry
from html2latex.core.tags import EndTag, StartTag
from html2latex.exceptions import (
    ConfigLookupError,
    ConfigurationError,
    Html2LatexError,
    OutputWriteError,
)
from html2latex.version import get_version


__version__ = get_version()


__all__ = [
    "CSSParser",
    "ConfigLookupError",
    "ConfigurationError",
    "ConversionConfig",
    "Convertor",
    "ElementConfig",
    "EndTag",
    "Html2LatexError",
    "LinksConversion",
    "OutputWriteError",
    "ParserHandler",
    "StartTag",
    "StyleConfig",
    "StyleRegistry",
    "__version__",
    "build_style_registry",
    "convert",
    "convert_file",
    "convert_stream",
    "load_config",
]
