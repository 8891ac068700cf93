"""Implementation of the primary ``html2latex`` CLI command."""

from __future__ import annotations

import sys
from typing import Annotated

import typer

from html2latex.api import convert_file, convert_stream
from html2latex.core.config import load_config
from html2latex.core.exceptions import Html2LatexError
from html2latex.core.styles import build_style_registry
from html2latex.version import get_version

from .._options import (
    DIAGNOSTICS_PANEL,
    ConfigOption,
    CssCommandsOption,
    CssOption,
    DebugOption,
    EncodingOption,
    InputPathArgument,
    KeepGoingOption,
    LinksOption,
    OutputPathOption,
    ParserOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import configure_logging, emit_error, emit_warning, set_cli_state


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


def convert(
    input_path: InputPathArgument,
    output: OutputPathOption = None,
    config_file: ConfigOption = None,
    css: CssOption = None,
    links: LinksOption = None,
    css_commands: CssCommandsOption = False,
    parser: ParserOption = "stream",
    encoding: EncodingOption = "utf-8",
    keep_going: KeepGoingOption = False,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
) -> None:
    """Convert an HTML document into LaTeX."""
    _ = version
    state = set_cli_state(verbosity=verbose, debug=debug)
    configure_logging(state)

    overrides: dict[str, object] = {}
    if links is not None:
        overrides["links"] = links
    if css_commands:
        overrides["make_cmds_from_css"] = True
    if keep_going:
        overrides["abort_on_write_error"] = False

    emitter = CliEmitter(state)
    try:
        config = load_config(config_file, **overrides)
        if output is None:
            registry = build_style_registry(config, css)
            with input_path.open("r", encoding=encoding) as reader:
                convert_stream(
                    reader,
                    sys.stdout,
                    config=config,
                    registry=registry,
                    tokenizer=parser,
                    emitter=emitter,
                )
        else:
            convert_file(
                input_path,
                output,
                config=config,
                css_path=css,
                tokenizer=parser,
                encoding=encoding,
                emitter=emitter,
            )
    except (Html2LatexError, OSError, UnicodeDecodeError) as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    skipped = state.consume_events("skipped_element")
    if skipped:
        names = sorted({entry.get("element") or "?" for entry in skipped})
        emit_warning(f"{len(skipped)} element event(s) skipped: {', '.join(names)}")
    if output is not None:
        state.err_console.log(f"Wrote {output}")


__all__ = ["convert"]
