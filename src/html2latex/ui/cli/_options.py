"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import click
import typer

from html2latex.api import TOKENIZERS
from html2latex.core.config import LinksConversion


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

InputPathArgument = Annotated[
    Path,
    typer.Argument(
        metavar="INPUT",
        help="HTML document to convert.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ParserOption = Annotated[
    str,
    typer.Option(
        "--parser",
        click_type=click.Choice(TOKENIZERS),
        help="Event source feeding the converter.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

EncodingOption = Annotated[
    str,
    typer.Option(
        "--encoding",
        help="Encoding of the input document.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML configuration merged over the built-in element and entity tables.",
        exists=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=RENDERING_PANEL,
    ),
]

CssOption = Annotated[
    Path | None,
    typer.Option(
        "--css",
        help="CSS-like style file mapped onto LaTeX commands.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=RENDERING_PANEL,
    ),
]

LinksOption = Annotated[
    LinksConversion | None,
    typer.Option(
        "--links",
        help="How anchors are rendered.",
        case_sensitive=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

CssCommandsOption = Annotated[
    bool,
    typer.Option(
        "--css-commands",
        help="Define one LaTeX macro per style and wrap elements with it.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output LaTeX file. Defaults to standard output.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

KeepGoingOption = Annotated[
    bool,
    typer.Option(
        "--keep-going",
        help="Log output write failures instead of aborting the conversion.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase diagnostic verbosity (repeatable).",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks on failure.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
