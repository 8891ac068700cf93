"""High-level entry points converting HTML documents into LaTeX."""

from __future__ import annotations

import io
from pathlib import Path
from typing import IO

from .core.config import ConversionConfig, load_config
from .core.convertor import Convertor, TextSink
from .core.diagnostics import DiagnosticEmitter
from .core.handler import ParserHandler
from .core.styles import StyleRegistry, build_style_registry
from .core.tokenizer import SOUP_PARSERS, HtmlEventParser, parse_with_soup


STREAM_TOKENIZER = "stream"
TOKENIZERS = (STREAM_TOKENIZER, *SOUP_PARSERS)

_CHUNK_SIZE = 8192


def _check_tokenizer(tokenizer: str) -> None:
    if tokenizer not in TOKENIZERS:
        choices = ", ".join(TOKENIZERS)
        raise ValueError(f"Unknown tokenizer '{tokenizer}' (expected one of: {choices}).")


def convert_stream(
    reader: IO[str],
    writer: TextSink,
    *,
    config: ConversionConfig | None = None,
    registry: StyleRegistry | None = None,
    tokenizer: str = STREAM_TOKENIZER,
    emitter: DiagnosticEmitter | None = None,
) -> None:
    """Convert the HTML read from ``reader`` and write the LaTeX to ``writer``.

    ``writer`` is flushed but not closed; pending table rows are flushed on
    every exit path, including an aborted conversion.
    """
    _check_tokenizer(tokenizer)
    config = config or load_config()
    if registry is None:
        registry = build_style_registry(config)

    convertor = Convertor(writer, config=config, registry=registry)
    handler = ParserHandler(convertor, emitter=emitter)
    try:
        if tokenizer == STREAM_TOKENIZER:
            parser = HtmlEventParser(handler)
            while chunk := reader.read(_CHUNK_SIZE):
                parser.feed(chunk)
            parser.close()
        else:
            parse_with_soup(reader.read(), handler, parser=tokenizer)
    finally:
        convertor.close()


def convert(
    html: str,
    *,
    config: ConversionConfig | None = None,
    registry: StyleRegistry | None = None,
    tokenizer: str = STREAM_TOKENIZER,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Return the LaTeX conversion of ``html``."""
    output = io.StringIO()
    convert_stream(
        io.StringIO(html),
        output,
        config=config,
        registry=registry,
        tokenizer=tokenizer,
        emitter=emitter,
    )
    return output.getvalue()


def convert_file(
    input_path: Path | str,
    output_path: Path | str,
    *,
    config: ConversionConfig | None = None,
    css_path: Path | str | None = None,
    tokenizer: str = STREAM_TOKENIZER,
    encoding: str = "utf-8",
    emitter: DiagnosticEmitter | None = None,
) -> Path:
    """Convert ``input_path`` into ``output_path`` and return the output path.

    The output file is closed on every exit path; an aborted conversion
    leaves the partial output in place.
    """
    config = config or load_config()
    registry = build_style_registry(config, css_path)
    target = Path(output_path)
    with (
        Path(input_path).open("r", encoding=encoding) as reader,
        target.open("w", encoding="utf-8") as writer,
    ):
        convert_stream(
            reader,
            writer,
            config=config,
            registry=registry,
            tokenizer=tokenizer,
            emitter=emitter,
        )
    return target


__all__ = ["STREAM_TOKENIZER", "TOKENIZERS", "convert", "convert_file", "convert_stream"]
