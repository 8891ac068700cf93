"""Routing of tag events to the conversion engine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .exceptions import ConfigLookupError, OutputWriteError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .convertor import Convertor
    from .tags import EndTag, StartTag


logger = logging.getLogger(__name__)


class ParserHandler:
    """Receive tag events and drive a :class:`Convertor`.

    Style wraps are opened after the element's own start output and closed
    before its end output, so LaTeX groups nest correctly. An element missing
    from the configuration is reported and skipped; a failed write either
    aborts the conversion or is reported, depending on
    ``abort_on_write_error``.
    """

    def __init__(
        self,
        convertor: Convertor,
        *,
        emitter: DiagnosticEmitter | None = None,
        abort_on_write_error: bool | None = None,
    ) -> None:
        self.convertor = convertor
        self.emitter: DiagnosticEmitter = emitter or LoggingEmitter(logger_obj=logger)
        if abort_on_write_error is None:
            abort_on_write_error = convertor.config.abort_on_write_error
        self.abort_on_write_error = abort_on_write_error
        self._skipped: list[StartTag] = []

    def start_element(self, tag: StartTag) -> None:
        conv = self.convertor
        name = tag.name
        try:
            if name == "a":
                conv.anchor_start(tag)
            elif name == "tr":
                conv.table_row_start(tag)
            elif name in ("td", "th"):
                conv.table_cell_start(tag)
            elif name == "meta":
                conv.meta_start(tag)
            elif name == "body":
                conv.body_start(tag)
            elif name == "font":
                conv.font_start(tag)
            elif name == "img":
                if conv.ignore_content_depth == 0:
                    conv.image_start(tag)
            elif name == "table":
                conv.table_start(tag)
            else:
                conv.generic_element_start(tag)

            conv.css_style_start(tag)
        except ConfigLookupError as exc:
            self._skipped.append(tag)
            self._report_skipped(exc, "start")
        except OutputWriteError as exc:
            self._write_failed(exc, name)

    def end_element(self, tag: EndTag, start: StartTag) -> None:
        if self._forget_skipped(start):
            self.emitter.event("skipped_element", {"element": tag.name, "phase": "end"})
            return

        conv = self.convertor
        name = tag.name
        try:
            conv.css_style_end(start)

            if name == "a":
                conv.anchor_end(tag, start)
            elif name == "tr":
                conv.table_row_end(tag, start)
            elif name in ("th", "td"):
                conv.table_cell_end(tag, start)
            elif name == "table":
                conv.table_end(tag, start)
            elif name == "body":
                conv.body_end(tag, start)
            elif name == "font":
                conv.font_end(tag, start)
            else:
                conv.generic_element_end(tag, start)
        except ConfigLookupError as exc:
            self._report_skipped(exc, "end")
        except OutputWriteError as exc:
            self._write_failed(exc, name)

    def characters(self, text: str) -> None:
        try:
            self.convertor.characters(text)
        except OutputWriteError as exc:
            self._write_failed(exc)

    def comment(self, text: str) -> None:
        try:
            self.convertor.comment(text)
        except OutputWriteError as exc:
            self._write_failed(exc)

    def end_document(self) -> None:
        try:
            self.convertor.close()
        except OutputWriteError as exc:
            self._write_failed(exc)

    def _forget_skipped(self, start: StartTag) -> bool:
        """Drop ``start`` from the skipped tags, returning whether it was there."""
        for index in range(len(self._skipped) - 1, -1, -1):
            if self._skipped[index] is start:
                del self._skipped[index]
                return True
        return False

    def _report_skipped(self, exc: ConfigLookupError, phase: str) -> None:
        self.emitter.warning(str(exc), exc)
        self.emitter.event("skipped_element", {"element": exc.name, "phase": phase})

    def _write_failed(self, exc: OutputWriteError, element: str | None = None) -> None:
        if self.abort_on_write_error:
            raise exc
        self.emitter.error(str(exc), exc)
        self.emitter.event("write_failed", {"element": element})


__all__ = ["ParserHandler"]
